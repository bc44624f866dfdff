"""
Remote Progress Store over HTTP

The remote store is a spreadsheet-backed web app exposing one endpoint:

    POST {endpoint}  {"action": "createSession", "email"}        -> {"success", "sessionId"}
    POST {endpoint}  {"action": "saveProgress", "sessionId",
                      "email", "formData"}                       -> {"success"}
    GET  {endpoint}?sessionId=...                                -> {"success", "formData"}

We treat it as an opaque key-value store. How it lays the data out in
the spreadsheet is not our concern.

TRADEOFFS:
- Every request carries a timeout; a hung request surfaces as a
  ConnectionError instead of blocking the save queue forever
- No retries here. Retry policy belongs to the auto-save coordinator
- requests is blocking, so the async methods run it in a worker thread
  to keep the event loop free for debounce timers
"""

import asyncio
import json
from typing import Any, Optional

import requests

from tax_intake.config import get_settings
from tax_intake.services.storage.interface import (
    ConnectionError,
    RemoteStoreInterface,
    ResponseError,
)


class AppsScriptClient:
    """
    Low-level HTTP client for the remote store endpoint.

    Handles transport errors and JSON decoding; knows nothing about
    sessions.
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ):
        settings = get_settings().remote
        self._endpoint_url = endpoint_url or settings.endpoint_url
        self._timeout = timeout or settings.request_timeout_seconds
        self._http = http or requests.Session()
        self._http.headers.update({"Accept": "application/json"})

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    def post(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the decoded JSON response."""
        try:
            response = self._http.post(
                self._endpoint_url,
                json=payload,
                timeout=self._timeout,
            )
        except requests.Timeout:
            raise ConnectionError(
                f"Remote store did not answer within {self._timeout}s"
            )
        except requests.RequestException as e:
            raise ConnectionError(f"Failed to reach remote store: {e}")

        return self._decode(response)

    def get(self, params: dict[str, str]) -> dict[str, Any]:
        """GET with query parameters and return the decoded JSON response."""
        try:
            response = self._http.get(
                self._endpoint_url,
                params=params,
                timeout=self._timeout,
            )
        except requests.Timeout:
            raise ConnectionError(
                f"Remote store did not answer within {self._timeout}s"
            )
        except requests.RequestException as e:
            raise ConnectionError(f"Failed to reach remote store: {e}")

        return self._decode(response)

    def _decode(self, response: requests.Response) -> dict[str, Any]:
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ResponseError(
                f"Remote store returned HTTP {response.status_code}: {e}"
            )

        try:
            data = response.json()
        except ValueError:
            raise ResponseError(
                "Remote store returned a non-JSON response",
                payload=response.text[:500],
            )

        if not isinstance(data, dict):
            raise ResponseError(
                "Remote store returned an unexpected JSON shape",
                payload=data,
            )
        return data

    def close(self) -> None:
        self._http.close()


class AppsScriptRemoteStore(RemoteStoreInterface):
    """
    Remote store implementation on top of AppsScriptClient.

    Maps the {success: bool, ...} envelope onto return values and
    ResponseError.
    """

    def __init__(self, client: Optional[AppsScriptClient] = None):
        self._client = client or AppsScriptClient()

    async def create_session(self, email: str) -> str:
        """Request a new session id for an email."""
        data = await asyncio.to_thread(
            self._client.post,
            {"action": "createSession", "email": email},
        )

        session_id = data.get("sessionId")
        if not data.get("success") or not session_id:
            raise ResponseError(
                f"Remote store refused to create a session: {data.get('error', 'no reason given')}",
                payload=data,
            )
        return str(session_id)

    async def save_progress(
        self,
        session_id: str,
        email: str,
        form_data: dict[str, Any],
    ) -> bool:
        """Store the full form snapshot under a session."""
        data = await asyncio.to_thread(
            self._client.post,
            {
                "action": "saveProgress",
                "sessionId": session_id,
                "email": email,
                "formData": form_data,
            },
        )

        if not data.get("success"):
            raise ResponseError(
                f"Remote store refused the save: {data.get('error', 'no reason given')}",
                payload=data,
            )
        return True

    async def load_progress(self, session_id: str) -> Optional[dict[str, Any]]:
        """Fetch the stored snapshot; None when the store has nothing."""
        data = await asyncio.to_thread(
            self._client.get,
            {"sessionId": session_id},
        )

        if not data.get("success"):
            return None

        form_data = data.get("formData")
        if form_data is None or form_data == "":
            return None

        # Some deployments hand the cell contents back as a JSON string
        if isinstance(form_data, str):
            try:
                form_data = json.loads(form_data)
            except ValueError:
                raise ResponseError(
                    "Stored form data is not valid JSON",
                    payload=form_data[:500],
                )

        if not isinstance(form_data, dict):
            raise ResponseError(
                "Stored form data is not a JSON object",
                payload=form_data,
            )
        return form_data
