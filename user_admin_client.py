"""User Admin API client.

A thin wrapper around the REST API of ``user_admin_api`` for the
presentation layer (login form, dashboards and the admin table).  The
client uses the ``requests`` library internally.

Every public method returns a tuple ``(data, error)``.  On success
``error`` is ``None``; on failure ``data`` is ``None`` (or an empty
list for listings) and ``error`` is a dictionary with the keys
``status_code`` and ``message``.  The message is the server's
``detail`` text and is meant to be shown to the user verbatim.

After :meth:`UserAdminAPI.login` succeeds the issued token is kept on
the client and sent as ``Authorization: Bearer <token>`` with every
later request, so the signed‑in user travels with the client object
instead of living in global state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class UserAdminAPI:
    """Client for the user administration API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        prefix: str = "/api/v1",
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:8000``.
            api_key: Optional bearer token from a previous login.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            prefix: Path prefix of the versioned API.
        """
        self.base_url = base_url.rstrip("/") + prefix
        self.api_key = api_key
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to the API prefix (e.g. ``/users``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)`` as described in the module docstring.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=15,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def authenticate(self, login: str, password: str) -> Result:
        """Check credentials and return the account without its password."""
        return self._request("POST", "/auth", json_body={"login": login, "password": password})

    def login(self, login: str, password: str) -> Result:
        """Obtain a session token and keep it for subsequent requests.

        Returns:
            ``(token_response, error)`` where ``token_response`` holds
            ``access_token``, ``user`` and ``dashboard``.
        """
        data, error = self._request("POST", "/auth/token", json_body={"login": login, "password": password})
        if data:
            self.api_key = data.get("access_token")
        return data, error

    def logout(self) -> None:
        """Forget the session token."""
        self.api_key = None

    def current_session(self) -> Result:
        """Return ``{"user": ..., "dashboard": ...}`` for the held token."""
        return self._request("GET", "/auth/session")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    @staticmethod
    def _user_path(user_id: str) -> str:
        # Ids are opaque; "/" or "?" must not change the target route.
        return "/users/" + requests.utils.quote(str(user_id), safe="")

    def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """List users, optionally filtered by role and a search string."""
        params = {key: value for key, value in (("role", role), ("search", search)) if value}
        data, error = self._request("GET", "/users", params=params or None)
        return data or [], error

    def get_user(self, user_id: str) -> Result:
        return self._request("GET", self._user_path(user_id))

    def create_user(self, payload: Dict[str, Any]) -> Result:
        """Create a user from the "add user" form fields."""
        return self._request("POST", "/users", json_body=payload)

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Result:
        return self._request("PUT", self._user_path(user_id), json_body=changes)

    def delete_user(self, user_id: str) -> Result:
        return self._request("DELETE", self._user_path(user_id))
