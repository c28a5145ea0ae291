from __future__ import annotations

from typing import Any

import requests

from .log_store import Entry


class GuestbookClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GuestbookClient:
    def __init__(self, base_url: str, timeout: int = 20) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        if not self.base_url:
            raise GuestbookClientError("Missing guestbook base URL")
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise GuestbookClientError(str(exc)) from exc

        if not response.ok:
            raise GuestbookClientError(self._error_message(response), response.status_code)
        return response

    def _error_message(self, response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), str):
            return payload["error"]
        return f"{response.status_code} {response.reason}"

    def list_entries(self) -> list[Entry]:
        response = self._request("GET", "entries")
        try:
            return [Entry.from_dict(item) for item in response.json()]
        except (TypeError, ValueError) as exc:
            raise GuestbookClientError(f"Unexpected entries payload: {exc}") from exc

    def post_entry(self, user: str, message: str) -> Entry:
        response = self._request("POST", "entries", json={"user": user, "message": message})
        try:
            return Entry.from_dict(response.json())
        except ValueError as exc:
            raise GuestbookClientError(f"Unexpected entry payload: {exc}") from exc
