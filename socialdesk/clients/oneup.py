"""
OneUp API client.

OneUp delivers a post to the social networks connected to a category. Every
call is a GET with the api key and parameters in the query string; the body
is ``{"message": str, "error": bool, "data": ...}``.
"""
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import requests

from ..config import get_settings
from ..logging_config import publish_logger, timed
from ..scheduling.errors import ExternalServiceError, ValidationError
from ..scheduling.states import PLATFORMS_ALL

NetworkTarget = Union[str, Sequence[str]]


def format_oneup_datetime(value: datetime) -> str:
    """OneUp expects ``YYYY-MM-DD HH:MM``."""
    return value.strftime("%Y-%m-%d %H:%M")


def network_param(social_network_id: NetworkTarget) -> str:
    if isinstance(social_network_id, str):
        return social_network_id
    ids = list(social_network_id)
    return json.dumps(ids) if ids else PLATFORMS_ALL


class OneUpClient:
    """Thin wrapper over the OneUp REST endpoints."""

    def __init__(self, api_key: Optional[str], base_url: str, timeout: int = 30, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.configured:
            raise ValidationError("OneUp API is not configured. Set ONEUP_API_KEY.")

        try:
            response = self.session.get(
                f"{self.base_url}/{endpoint}",
                params={"apiKey": self.api_key, **params},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ExternalServiceError(f"OneUp request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("OneUp returned a non-JSON response") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(f"OneUp returned an unexpected response: {data!r}")
        return data

    def list_categories(self) -> List[Dict[str, Any]]:
        data = self._get("listcategory", {})
        if data.get("error"):
            raise ExternalServiceError(data.get("message") or "OneUp error")
        return data.get("data") or []

    def list_category_accounts(self, category_id: int) -> List[Dict[str, Any]]:
        data = self._get("listcategoryaccount", {"category_id": category_id})
        if data.get("error"):
            raise ExternalServiceError(data.get("message") or "OneUp error")
        return data.get("data") or []

    @timed(publish_logger)
    def schedule_image_post(
        self,
        category_id: int,
        social_network_id: NetworkTarget,
        scheduled_datetime: datetime,
        image_url: str,
        content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Schedule an image post in OneUp.

        Returns:
            ``{"error": bool, "message": str}`` as reported by OneUp. Transport
            failures raise ``ExternalServiceError``.
        """
        params = {
            "category_id": str(category_id),
            "social_network_id": network_param(social_network_id),
            "scheduled_date_time": format_oneup_datetime(scheduled_datetime),
            "image_url": image_url,
        }
        if content:
            params["content"] = content

        data = self._get("scheduleimagepost", params)
        publish_logger.info(
            "OneUp scheduleimagepost",
            category_id=category_id,
            error=bool(data.get("error")),
            message=data.get("message"),
        )
        return {"error": bool(data.get("error")), "message": data.get("message") or ""}


def get_oneup_client() -> OneUpClient:
    """FastAPI dependency returning a client built from settings."""
    settings = get_settings()
    return OneUpClient(settings.oneup_api_key, settings.oneup_base_url, settings.http_timeout)
