# tests/conftest.py
# Description: Shared fixtures for the lore server tests: an isolated document store, upload sink and a FastAPI app
#   wired to them through dependency overrides.
#
# Imports
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.staticfiles import StaticFiles
#
# Local imports
from lore_Server_API.app.api.v1.API_Deps.Lore_DB_Deps import get_lore_library, get_upload_sink
from lore_Server_API.app.api.v1.endpoints.lore import router as lore_router
from lore_Server_API.app.api.v1.endpoints.media import router as media_router
from lore_Server_API.app.core.DB_Management.Lore_DB import LoreDB
from lore_Server_API.app.core.Ingestion_Media_Processing.Upload_Sink import UploadSink
from lore_Server_API.app.core.Lore.Lore_Library import LoreLibrary
#
########################################################################################################################
#
# Fixtures


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "lore.json"


@pytest.fixture
def lore_db(data_file):
    return LoreDB(data_file)


@pytest.fixture
def upload_sink(tmp_path):
    return UploadSink(tmp_path / "uploads")


@pytest.fixture
def library(lore_db, upload_sink):
    return LoreLibrary(lore_db, upload_sink=upload_sink)


def build_test_app(library: LoreLibrary, upload_sink: UploadSink) -> FastAPI:
    app = FastAPI()
    app.include_router(lore_router, prefix="/api/lore", tags=["lore"])
    app.include_router(media_router, prefix="/api", tags=["media"])
    app.mount("/uploads", StaticFiles(directory=upload_sink.uploads_dir), name="uploads")
    app.dependency_overrides[get_lore_library] = lambda: library
    app.dependency_overrides[get_upload_sink] = lambda: upload_sink
    return app


@pytest.fixture
def test_app(library, upload_sink):
    return build_test_app(library, upload_sink)


@pytest.fixture
def client(test_app):
    with TestClient(test_app) as test_client:
        yield test_client
