# api_client.py
# Description: Thin async wrapper around the lore server HTTP API. Every method is one request/response
#   round trip returning the parsed JSON body.
#
# Imports
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote
#
# 3rd-Party Libraries
import httpx
#
# Local Imports
#
#######################################################################################################################
#
# Functions:

log = logging.getLogger(__name__)


class LoreAPIError(Exception):
    """Raised for any failed call; carries the server's message when one was provided."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict):
        detail = payload.get("detail") or payload.get("error")
        if isinstance(detail, str) and detail:
            return detail
        if isinstance(detail, list) and detail:
            # Request validation errors: report the first one
            first = detail[0]
            if isinstance(first, dict) and first.get("msg"):
                return str(first["msg"])
    return fallback


class LoreAPIClient:
    """Client for the /api/lore and /api/upload endpoints."""

    def __init__(self, base_url: str = "http://127.0.0.1:3000", timeout: float = 30.0,
                 http_client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LoreAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, operation: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.error(f"{operation} failed: {e}")
            raise LoreAPIError(f"{operation} failed: {e}") from e

        if response.is_error:
            message = _error_message(response, f"{operation} failed")
            log.warning(f"{operation} failed with HTTP {response.status_code}: {message}")
            raise LoreAPIError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise LoreAPIError(f"{operation} failed: invalid JSON response",
                               status_code=response.status_code) from e

    # --- Entries ---
    async def list_entries(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/lore", "Loading entries")

    async def create_entry(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/api/lore", "Create", json=data)

    async def update_entry(self, entry_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/api/lore/{quote(entry_id, safe='')}", "Update", json=data)

    async def delete_entry(self, entry_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/lore/{quote(entry_id, safe='')}", "Delete")

    # --- Media ---
    async def upload_file(self, file_path: Union[str, Path], mimetype: str) -> Dict[str, Any]:
        path = Path(file_path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise LoreAPIError(f"Could not read {path}: {e.strerror or e}") from e
        files = {"file": (path.name, content, mimetype)}
        return await self._request("POST", "/api/upload", "Upload", files=files)

    async def attach_media(self, entry_id: str, media: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/api/lore/{quote(entry_id, safe='')}/media", "Attach", json=media)

    async def detach_media(self, entry_id: str, filename: str) -> Dict[str, Any]:
        path = f"/api/lore/{quote(entry_id, safe='')}/media/{quote(filename, safe='')}"
        return await self._request("DELETE", path, "Detach")

    def media_url(self, media: Dict[str, Any]) -> str:
        url = media.get("url", "")
        return url if url.startswith(("http://", "https://")) else f"{self.base_url}{url}"

#
# End of api_client.py
#######################################################################################################################
