"""
Client for the content-research VPS that owns the topical maps.
"""
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..config import get_settings
from ..logging_config import get_logger
from ..scheduling.errors import ExternalServiceError, NotFoundError

logger = get_logger("research")


class ContentResearchClient:

    def __init__(self, base_url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_website_content(self, domain: str) -> Dict[str, Any]:
        """Fetch the topical map JSON for a domain (read-only)."""
        url = f"{self.base_url}/website-content/{quote(domain, safe='')}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Content API unreachable", error=e, domain=domain)
            raise ExternalServiceError(f"Content API request failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError("Website content", domain)
        if response.status_code >= 400:
            raise ExternalServiceError(f"Content API returned {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError("Content API returned a non-JSON response") from e


def get_content_research_client() -> ContentResearchClient:
    settings = get_settings()
    return ContentResearchClient(settings.content_api_url, settings.http_timeout)
