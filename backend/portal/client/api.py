"""Thin HTTP client for the /api/events surface.

Works with any ``httpx.Client`` pointed at the portal; the session cookie
is whatever the client already carries. Every failure leaves this module
as an ``EventsClientError``.
"""
import logging
from typing import Any, Iterable, Optional

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from portal.client.errors import MalformedResponse, TransientFetchError, error_for_status
from portal.models.participant import ParticipantStatus
from portal.schemas.event import (
    EventDetailOut,
    EventFilters,
    EventOut,
    ParticipantOut,
    ParticipantsAdded,
)

logger = logging.getLogger(__name__)

EVENTS_PATH = "/api/events"

_event_list = TypeAdapter(list[EventOut])
_event_detail = TypeAdapter(EventDetailOut)
_participant = TypeAdapter(ParticipantOut)
_participants_added = TypeAdapter(ParticipantsAdded)


class EventsAPI:
    def __init__(self, http: httpx.Client):
        self.http = http

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransientFetchError(str(exc)) from exc
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            detail = body.get("detail", body) if isinstance(body, dict) else body
            raise error_for_status(response.status_code, detail)
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body (%s)", method, path,
                           response.headers.get("content-type", "no content type"))
            raise MalformedResponse("Response body is not JSON", response.status_code) from exc

    @staticmethod
    def _parse(adapter: TypeAdapter, data: Any) -> Any:
        try:
            return adapter.validate_python(data)
        except PydanticValidationError as exc:
            raise MalformedResponse(exc.errors(include_url=False, include_context=False)) from exc

    def list_events(self, filters: Optional[EventFilters] = None) -> list[EventOut]:
        params = filters.to_query_params() if filters else {}
        return self._parse(_event_list, self._request("GET", EVENTS_PATH, params=params))

    def get_event(self, event_id: str) -> EventDetailOut:
        return self._parse(_event_detail, self._request("GET", f"{EVENTS_PATH}/{event_id}"))

    def upcoming(self, limit: int = 5) -> list[EventOut]:
        data = self._request("GET", f"{EVENTS_PATH}/upcoming/sidebar", params={"limit": limit})
        return self._parse(_event_list, data)

    def create_event(self, payload: dict[str, Any]) -> EventDetailOut:
        return self._parse(_event_detail, self._request("POST", EVENTS_PATH, json=payload))

    def update_event(self, event_id: str, patch: dict[str, Any]) -> EventDetailOut:
        data = self._request("PUT", f"{EVENTS_PATH}/{event_id}", json=patch)
        return self._parse(_event_detail, data)

    def delete_event(self, event_id: str) -> None:
        self._request("DELETE", f"{EVENTS_PATH}/{event_id}")

    def add_participants(self, event_id: str, user_ids: Iterable[str]) -> list[str]:
        data = self._request(
            "POST", f"{EVENTS_PATH}/{event_id}/participants", json={"userIds": list(user_ids)}
        )
        return self._parse(_participants_added, data).added

    def set_rsvp(self, event_id: str, user_id: str, status: ParticipantStatus) -> ParticipantOut:
        data = self._request(
            "PUT",
            f"{EVENTS_PATH}/{event_id}/participants/{user_id}",
            json={"status": ParticipantStatus(status).value},
        )
        return self._parse(_participant, data)
