"""HTTP client for the roadmap schedule API.

Implements the store side of the move workflow (check, commit) plus the
read and create calls the timeline view needs.
"""

import os
from datetime import date
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
import requests
from pydantic import BaseModel, ValidationError
from dotenv import load_dotenv

from roadmap.engine.errors import (
    BlockNotFoundError,
    SchedulingError,
    ScheduleStoreError,
    StaleScheduleError,
)
from roadmap.engine.timeline import TimelineLayout
from roadmap.models.constants import DEFAULT_TIMEFRAME
from roadmap.models.schedule_requests import (
    BlockCreateRequest,
    BlockCreateResponse,
    ConflictCheckResponse,
    MoveCheckRequest,
    MoveCommitRequest,
    MoveCommitResponse,
    ScheduleSnapshot,
)

load_dotenv()

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)

DEFAULT_API_URL = "http://localhost:8000"

_STATUS_ERRORS = {
    400: SchedulingError,
    404: BlockNotFoundError,
    409: StaleScheduleError,
}


class ScheduleApiClient:
    """Client for the schedule API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[Any] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root. If None, reads ROADMAP_API_URL.
            session: Object with a requests-style `request()` (defaults to a
                `requests.Session`)
            timeout: Per-request timeout in seconds. If None, reads
                ROADMAP_API_TIMEOUT_SEC (default 10).
        """
        self.base_url = (base_url or os.getenv("ROADMAP_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else float(os.getenv("ROADMAP_API_TIMEOUT_SEC", "10"))

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ScheduleStoreError: Network failure or unexpected server error
            SchedulingError (or subclass): The API rejected the request
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ScheduleStoreError(f"Schedule API unreachable: {e}") from e

        if response.status_code >= 400:
            message, details = _error_body(response)
            error_class = _STATUS_ERRORS.get(response.status_code, ScheduleStoreError)
            raise error_class(message, {**details, "status_code": response.status_code})
        try:
            return response.json()
        except ValueError as e:
            raise ScheduleStoreError(f"Schedule API returned a body that is not JSON: {e}") from e

    def check_move(self, request: MoveCheckRequest) -> ConflictCheckResponse:
        data = self._request("POST", "/schedule/move/check", json=request.model_dump(mode="json"))
        return _parse(ConflictCheckResponse, data)

    def commit_move(self, request: MoveCommitRequest) -> MoveCommitResponse:
        data = self._request("POST", "/schedule/move", json=request.model_dump(mode="json"))
        return _parse(MoveCommitResponse, data)

    def create_block(self, request: BlockCreateRequest) -> BlockCreateResponse:
        data = self._request("POST", "/schedule/add", json=request.model_dump(mode="json", exclude_none=True))
        return _parse(BlockCreateResponse, data)

    def delete_block(self, block_id: str) -> None:
        self._request("DELETE", f"/schedule/{block_id}")

    def fetch_snapshot(self, start: date, end: date) -> ScheduleSnapshot:
        """Authoritative state for a window (used to refresh after every commit)."""
        data = self._request("GET", "/schedule", params={"start": start.isoformat(), "end": end.isoformat()})
        return _parse(ScheduleSnapshot, data)

    def fetch_timeline(
        self,
        view: str,
        anchor: date,
        timeframe: str = DEFAULT_TIMEFRAME,
        today: Optional[date] = None,
    ) -> TimelineLayout:
        params = {"view": view, "timeframe": timeframe, "anchor": anchor.isoformat()}
        if today is not None:
            params["today"] = today.isoformat()
        data = self._request("GET", "/timeline", params=params)
        return _parse(TimelineLayout, data)


def _parse(model: Type[ResponseModel], data: Any) -> ResponseModel:
    """Validate a response body; a malformed body is a store failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ScheduleStoreError(
            f"Schedule API returned an unexpected {model.__name__}: {e.error_count()} invalid field(s)"
        ) from e


def _error_body(response) -> Tuple[str, Dict[str, Any]]:
    """Pull a message (and any structured details) out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}", {}
    detail = body.get("detail") if isinstance(body, dict) else body
    if isinstance(detail, dict):
        details = {k: v for k, v in detail.items() if k != "message"}
        return str(detail.get("message", "")), details
    if isinstance(detail, list):
        return "; ".join(str(d) for d in detail), {}
    return str(detail), {}
