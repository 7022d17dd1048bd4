"""
HTTP client for the SignTalk backend.
"""
from typing import Dict, List, Optional
from urllib.parse import quote, urljoin

import requests

from signtalk.backend.core.logging import get_logger
from signtalk.client.errors import GatewayError

logger = get_logger(__name__)


class GatewayClient:
    """Blocking client for the vocabulary and model routes. Run it off the event loop."""

    def __init__(self, base_url, timeout=10.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning("gateway_unreachable", method=method, url=url, error=str(e))
            raise GatewayError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _json(response):
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"Invalid JSON from {response.url}", response.status_code) from e

    @staticmethod
    def _raise_for_status(response):
        if response.status_code >= 400:
            raise GatewayError(f"HTTP {response.status_code} from {response.url}", response.status_code)

    def list_vocabulary(self) -> List[dict]:
        response = self._request("GET", "/api/vocabulario")
        self._raise_for_status(response)
        return self._json(response)

    def lookup(self, key: str) -> Optional[dict]:
        """Return the vocabulary entry for ``key``, or None when the backend has none."""
        key = key.strip().upper()
        if not key:
            return None
        response = self._request("GET", f"/api/vocabulario/{quote(key, safe='')}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        entry = self._json(response)
        return entry if isinstance(entry, dict) else None

    def save_snapshot(self, snapshot: Dict[str, dict]) -> dict:
        response = self._request("POST", "/api/modelo", json=snapshot)
        self._raise_for_status(response)
        return self._json(response)

    def load_snapshot(self) -> Optional[Dict[str, dict]]:
        """Return the saved snapshot, or None when nothing was ever saved."""
        response = self._request("GET", "/api/modelo")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return self._json(response)

    def media_url(self, path: Optional[str]) -> Optional[str]:
        """Resolve a media path returned by the backend against the API base URL."""
        if not path:
            return None
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.base_url + "/", path.lstrip("/"))

    def close(self):
        self.session.close()
