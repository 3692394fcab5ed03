"""Helper client used by the Streamlit app to talk to the API or fall back to the local repository."""

from __future__ import annotations

import os
from typing import Dict, Optional

import requests

from backend.db.repo import BlobPropertyRepository, get_repository


class BackendClient:
    def __init__(self) -> None:
        self.base_url = os.getenv("API_BASE_URL", "http://localhost:8000").rstrip("/")
        self.session = requests.Session()
        self.repository: Optional[BlobPropertyRepository] = None
        self.use_api = self._ping_api()
        if not self.use_api:
            self._enable_local_mode()

    def _ping_api(self) -> bool:
        try:
            resp = self.session.get(f"{self.base_url}/api/health", timeout=2)
            # 503 means the API is up but the blob is not; listings still work
            return resp.status_code in (200, 503)
        except requests.RequestException:
            return False

    def list_properties(self) -> Dict:
        """Return ``{"properties": [...], "total": n, "source": ..., "fallback_reason": ...}``."""

        if self.use_api:
            try:
                resp = self.session.get(f"{self.base_url}/api/properties", timeout=30)
                resp.raise_for_status()
                return resp.json()
            except requests.RequestException:
                self._enable_local_mode()
        result = self.repository.list_all()  # type: ignore[union-attr]
        return {
            "properties": [prop.model_dump(mode="json", by_alias=True) for prop in result.properties],
            "total": len(result.properties),
            "source": result.source,
            "fallback_reason": result.fallback_reason,
        }

    def refresh(self) -> None:
        """Drop the server-side cache so the next listing re-reads the blob."""

        if self.use_api:
            try:
                resp = self.session.delete(f"{self.base_url}/api/properties/cache", timeout=10)
                resp.raise_for_status()
                return
            except requests.RequestException:
                self._enable_local_mode()
        self.repository.invalidate_cache()  # type: ignore[union-attr]

    def _enable_local_mode(self) -> None:
        if self.repository is None:
            self.repository = get_repository()
        self.use_api = False
