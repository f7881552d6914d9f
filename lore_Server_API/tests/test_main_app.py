# tests/test_main_app.py
# Description: Smoke tests against the real application object and its settings.
#
# Imports
import pytest
from fastapi.testclient import TestClient
#
# Local imports
from lore_Server_API.app.core import config
from lore_Server_API.app.main import app
#
########################################################################################################################
#
# Tests:


@pytest.fixture
def app_client():
    with TestClient(app) as test_client:
        yield test_client


def test_health(app_client):
    response = app_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root_message(app_client):
    response = app_client.get("/")
    assert response.status_code == 200
    assert "Lore API" in response.json()["message"]


def test_routes_are_registered():
    paths = app.openapi()["paths"]
    assert {"/api/lore", "/api/lore/{entry_id}", "/api/upload",
            "/api/lore/{entry_id}/media", "/api/lore/{entry_id}/media/{filename}"} <= set(paths)
    assert set(paths["/api/lore"]) == {"get", "post"}
    assert set(paths["/api/lore/{entry_id}"]) == {"put", "delete"}


def test_uploads_mount_serves_blobs(app_client):
    blob = config.settings["UPLOADS_DIR"] / "mount_check_1.png"
    blob.write_bytes(b"\x89PNG\r\n\x1a\n")
    try:
        response = app_client.get("/uploads/mount_check_1.png")
        assert response.status_code == 200
        assert response.content == b"\x89PNG\r\n\x1a\n"
    finally:
        blob.unlink(missing_ok=True)


def test_settings_defaults():
    assert config.settings["PORT"] == config.DEFAULT_PORT == 3000
    assert config.settings["MAX_UPLOAD_SIZE_BYTES"] == 20 * 1024 * 1024
    assert config.settings["UPLOADS_URL_PREFIX"] == "/uploads"
    assert config.settings["UPLOADS_DIR"].is_dir()


def test_load_settings_reads_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("LORE_DATA_DIR", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("LORE_PORT", "4100")
    monkeypatch.setenv("LORE_CASCADE_DELETE_MEDIA", "true")
    loaded = config.load_settings()
    assert loaded["PORT"] == 4100
    assert loaded["CASCADE_DELETE_MEDIA"] is True
    assert loaded["DATA_FILE"].parent == tmp_path / "elsewhere"
    assert (tmp_path / "elsewhere").is_dir()

#
# End of test_main_app.py
########################################################################################################################
