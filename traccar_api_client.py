"""
Traccar API Client
Reads the device registry and event reports from the Traccar REST API

Traccar is the source of truth for devices and driving events; this backend
never stores them.

API Documentation: https://www.traccar.org/api-reference/
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

import requests

logger = logging.getLogger(__name__)


class TraccarAPIError(Exception):
    """Raised when Traccar cannot be reached or answers with an error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _format_time(value: Union[datetime, str]) -> str:
    """Traccar expects ISO 8601 with an explicit offset"""
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class TraccarAPIClient:
    """Thin client over the Traccar endpoints the dashboard needs"""

    def __init__(
        self,
        base_url: str,
        email: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: Traccar server root, e.g. http://localhost:8082
            email, password: user credentials for basic auth
            token: user token, sent as the basic-auth username (used when set)
            timeout: per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Accept": "application/json", "Content-Type": "application/json"}
        )

        if token:
            self.session.auth = (token, "")
        elif email and password:
            self.session.auth = (email, password)

    def _get(self, path: str, params: Any = None) -> Any:
        url = f"{self.base_url}/api/{path.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"❌ Traccar request failed ({path}): {e}")
            raise TraccarAPIError(f"Traccar unreachable: {e}") from e

        if response.status_code >= 400:
            logger.warning(
                f"⚠️ Traccar {path} answered {response.status_code}: {response.text[:200]}"
            )
            raise TraccarAPIError(
                f"Traccar {path} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TraccarAPIError(f"Traccar {path} returned invalid JSON") from e

    def get_devices(self) -> List[Dict[str, Any]]:
        """All devices visible to the configured user"""
        devices = self._get("devices")
        logger.debug(f"Fetched {len(devices)} devices from Traccar")
        return devices

    def get_events(
        self,
        date_from: Union[datetime, str],
        date_to: Union[datetime, str],
        device_ids: Optional[Iterable[int]] = None,
        event_types: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Event report for a time window.

        Args:
            date_from, date_to: window bounds (naive datetimes are UTC)
            device_ids: restrict to these devices (Traccar requires at least one
                        deviceId or groupId, so callers normally pass all ids)
            event_types: restrict to these types, e.g. ["deviceOverspeed"]
        """
        params: List[tuple] = [
            ("from", _format_time(date_from)),
            ("to", _format_time(date_to)),
        ]
        params.extend(("deviceId", device_id) for device_id in device_ids or [])
        params.extend(("type", event_type) for event_type in event_types or [])

        events = self._get("reports/events", params=params)
        logger.debug(f"Fetched {len(events)} events from Traccar")
        return events


def get_traccar_client() -> TraccarAPIClient:
    """Client configured from settings"""
    from settings import settings

    config = settings.traccar
    return TraccarAPIClient(
        base_url=config.base_url,
        email=config.email,
        password=config.password,
        token=config.token,
        timeout=config.timeout_seconds,
    )
