"""
HTTP client for the temperature profile server.

The form controller receives one of these per session instead of reaching
for a shared global client. Requests go through urllib in a worker thread
so the caller's event loop stays free while a call is in flight.
"""

import asyncio
import json
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

PROFILE_ENDPOINT = "/api/profile"


class ProfileClientError(Exception):
    """A profile call failed in transport or was rejected by the server."""

    def __init__(self, message: str, status: int | None = None, body: dict | None = None):
        super().__init__(message)
        self.status = status
        self.body = body or {}


class ProfileApiClient:
    """Remote calls for one user's profile."""

    def __init__(self, server_url: str, email: str, timeout: float = 10):
        self.server_url = server_url.rstrip('/')
        self.email = email
        self.timeout = timeout

    def _request(self, method: str, data: dict = None):
        """Make a JSON request against the profile endpoint."""
        url = f"{self.server_url}{PROFILE_ENDPOINT}"
        payload = json.dumps(data).encode('utf-8') if data is not None else None

        req = Request(url, data=payload, method=method)
        req.add_header('Accept', 'application/json')
        req.add_header('X-User-Email', self.email)
        if payload is not None:
            req.add_header('Content-Type', 'application/json')

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                return json.loads(resp.read().decode('utf-8'))
        except HTTPError as e:
            print(f"  [server] HTTP {e.code}: {e.reason}")
            try:
                body = json.loads(e.read().decode('utf-8'))
            except ValueError:
                body = {}
            raise ProfileClientError(body.get('error') or str(e.reason), e.code, body) from e
        except URLError as e:
            print(f"  [server] connection error: {e.reason}")
            raise ProfileClientError(f"Connection error: {e.reason}") from e

    async def get_user_temperature_profile(self) -> dict | None:
        """Fetch the saved profile (camelCase dict), or None if there is none."""
        return await asyncio.to_thread(self._request, 'GET')

    async def update_user_temperature_profile(self, payload: dict) -> dict:
        """Create or replace the profile."""
        return await asyncio.to_thread(self._request, 'PUT', payload)

    async def delete_user_temperature_profile(self) -> bool:
        result = await asyncio.to_thread(self._request, 'DELETE')
        return bool(result.get('deleted'))
