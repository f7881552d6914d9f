# lore_cli/tests/conftest.py
# Description: Fixtures that run the real lore server app in-process so the client can talk to it over ASGI.
#
# Imports
#
# Third-party imports
import httpx
import pytest
from fastapi import FastAPI
from starlette.staticfiles import StaticFiles
#
# Local imports
from lore_Server_API.app.api.v1.API_Deps.Lore_DB_Deps import get_lore_library, get_upload_sink
from lore_Server_API.app.api.v1.endpoints.lore import router as lore_router
from lore_Server_API.app.api.v1.endpoints.media import router as media_router
from lore_Server_API.app.core.DB_Management.Lore_DB import LoreDB
from lore_Server_API.app.core.Ingestion_Media_Processing.Upload_Sink import UploadSink
from lore_Server_API.app.core.Lore.Lore_Library import LoreLibrary
from lore_cli.lore_cli_app import config as cli_config
from lore_cli.lore_cli_app.api_client import LoreAPIClient
#
########################################################################################################################
#
# Fixtures

BASE_URL = "http://testserver"


@pytest.fixture
def server_library(tmp_path):
    sink = UploadSink(tmp_path / "uploads")
    return LoreLibrary(LoreDB(tmp_path / "lore.json"), upload_sink=sink)


@pytest.fixture
def server_app(server_library):
    app = FastAPI()
    app.include_router(lore_router, prefix="/api/lore")
    app.include_router(media_router, prefix="/api")
    app.mount("/uploads", StaticFiles(directory=server_library.upload_sink.uploads_dir), name="uploads")
    app.dependency_overrides[get_lore_library] = lambda: server_library
    app.dependency_overrides[get_upload_sink] = lambda: server_library.upload_sink
    return app


@pytest.fixture
def make_api_client(server_app):
    """Factory returning (httpx client, LoreAPIClient) bound to the in-process server."""
    def _make():
        http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=server_app), base_url=BASE_URL)
        return http_client, LoreAPIClient(base_url=BASE_URL, http_client=http_client)
    return _make


@pytest.fixture
def cli_config_path(tmp_path, monkeypatch):
    """Isolated client config file; the module-level cache is reset to it."""
    path = (tmp_path / "cli" / "config.toml").resolve()
    monkeypatch.setenv("LORE_CLI_CONFIG_PATH", str(path))
    cli_config.load_config(path, reload=True)
    return path
