"""
HTTP client for the routine store.

Maps transport failures and server errors to StoreUnavailableError, which the
watcher treats as transient, and 404/409 trigger responses to the routine
errors the store raised.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ..routines.errors import (
    RoutineAlreadyTriggeredError,
    RoutineNotFoundError,
    TriggerCommitError,
)
from ..routines.routine import DueRoutine
from ..timezones import LocalTime

logger = logging.getLogger(__name__)


class StoreUnavailableError(Exception):
    """Raised when the store cannot be reached or answers with a server error."""


def _detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("detail") if isinstance(body, dict) else None


def _detail_code(response: httpx.Response) -> Optional[str]:
    detail = _detail(response)
    return detail.get("error") if isinstance(detail, dict) else None


def _detail_message(response: httpx.Response) -> str:
    detail = _detail(response)
    if detail is None:
        return response.text
    if isinstance(detail, dict):
        return detail.get("message", str(detail))
    return str(detail)


class StoreClient:
    """Synchronous client for the routine store API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {token}"} if token else {},
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "StoreClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self, method: str, path: str, check_server_error: bool = True, **kwargs
    ) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise StoreUnavailableError(f"{method} {path} failed: {e}") from e

        if check_server_error and response.status_code >= 500:
            raise StoreUnavailableError(
                f"{method} {path} returned {response.status_code}: "
                f"{_detail_message(response)}"
            )
        return response

    def get_timezone(self) -> str:
        """The store's global scheduling zone."""
        response = self._request("GET", "/settings/timezone")
        response.raise_for_status()
        return response.json()["timezone"]

    def list_routines(self, enabled_only: bool = False) -> List[Dict[str, Any]]:
        response = self._request(
            "GET", "/routines", params={"enabled_only": enabled_only}
        )
        response.raise_for_status()
        return response.json()

    def create_routine(self, routine: Dict[str, Any]) -> str:
        """Create a routine and return its ID."""
        response = self._request("POST", "/routines", json=routine)
        response.raise_for_status()
        return response.json()["routine_id"]

    def get_due_routines(self, now: datetime, local: LocalTime) -> List[DueRoutine]:
        """Ask the store which routines are due for ``now``."""
        response = self._request(
            "GET",
            "/routines/due",
            params={
                "current_timestamp": int(now.timestamp() * 1000),
                "day_of_week": local.day_of_week,
                "hour": local.hour,
                "minute": local.minute,
            },
        )
        response.raise_for_status()
        return [DueRoutine.model_validate(item) for item in response.json()]

    def trigger(self, routine_id: str, cycle_start: Optional[datetime] = None) -> str:
        """Trigger a routine and return the created task ID.

        Raises:
            RoutineNotFoundError: on 404
            RoutineAlreadyTriggeredError: on 409
            TriggerCommitError: when the store rolled the trigger back
            StoreUnavailableError: on transport or other server failures
        """
        body = {"cycle_start": cycle_start.isoformat()} if cycle_start else None
        path = f"/routines/{routine_id}/trigger"
        response = self._request("POST", path, check_server_error=False, json=body)

        if response.status_code == 404:
            raise RoutineNotFoundError(routine_id)
        if response.status_code == 409:
            raise RoutineAlreadyTriggeredError(routine_id)
        if response.status_code >= 500:
            message = _detail_message(response)
            if _detail_code(response) == TriggerCommitError.code:
                raise TriggerCommitError(routine_id, message)
            raise StoreUnavailableError(
                f"POST {path} returned {response.status_code}: {message}"
            )
        response.raise_for_status()
        return response.json()["task_id"]
