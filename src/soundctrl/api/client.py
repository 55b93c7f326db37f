"""SoundByte HTTP API client.

The server exposes a small JSON API over plain HTTP. Requests are made with
urllib in the event loop's default executor so several calls (one status
request per sound, commands, liveness probes) can be in flight at once.

No retries happen here: a failed call is simply attempted again on the next
polling tick.
"""

import asyncio
import http.client
import json
import urllib.error
import urllib.request
from typing import Any

from soundctrl.api.protocol import (
    NetworkError,
    PlayResult,
    ProtocolError,
    StopResult,
    parse_catalog,
    parse_status,
)
from soundctrl.models.sound import Sound

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3000

USER_AGENT = "SoundCTRL/1.0"


class SoundByteClient:
    """Async client for the SoundByte HTTP API.

    The timeout is kept short so that a lost server is noticed quickly
    instead of blocking polling loops on slow failures.

    Example:
        client = SoundByteClient("192.168.1.50", 3000)
        sounds = await client.fetch_catalog()
        result = await client.play(sounds[0].id)
        print(f"{result.name} is now {result.action}")
    """

    _DEFAULT_TIMEOUT: float = 1.0

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            host: Server hostname or IP address.
            port: HTTP port (default 3000).
            timeout: Per-request timeout in seconds.
        """
        self._host = host
        self._port = port
        self._timeout = timeout

    @property
    def host(self) -> str:
        """Return server host."""
        return self._host

    @property
    def port(self) -> int:
        """Return server port."""
        return self._port

    @property
    def timeout(self) -> float:
        """Return per-request timeout in seconds."""
        return self._timeout

    @property
    def base_url(self) -> str:
        """Return the server base URL."""
        return f"http://{self._host}:{self._port}"

    async def fetch_catalog(self) -> list[Sound]:
        """Get the sound catalog (GET /api/sounds).

        Returns:
            Sounds in server order.

        Raises:
            NetworkError: If the request fails.
            ProtocolError: If the response is malformed.
        """
        data = await self._request("GET", "/api/sounds")
        return parse_catalog(data)

    async def fetch_playback_status(self, sound_id: int) -> bool:
        """Get whether one sound is playing (GET /api/status/{id}).

        Args:
            sound_id: ID of the sound.

        Returns:
            True if the sound is playing.
        """
        data = await self._request("GET", f"/api/status/{sound_id}")
        return parse_status(data)

    async def play(self, sound_id: int) -> PlayResult:
        """Toggle playback of one sound (GET /api/play/{id}).

        The server plays the sound if stopped and stops it if playing;
        the resulting action is reported in the result.

        Args:
            sound_id: ID of the sound.
        """
        data = await self._request("GET", f"/api/play/{sound_id}")
        return PlayResult.from_dict(data)

    async def stop_all(self) -> StopResult:
        """Stop every playing sound (POST /api/stop)."""
        data = await self._request("POST", "/api/stop")
        return StopResult.from_dict(data)

    async def _request(self, method: str, path: str) -> Any:
        """Run a blocking request in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._fetch_json, method, path)

    def _fetch_json(self, method: str, path: str) -> Any:
        """Perform an HTTP request and decode the JSON body (blocking).

        Args:
            method: HTTP method.
            path: Request path starting with "/".

        Returns:
            Decoded JSON, or None for an empty body.

        Raises:
            NetworkError: On timeout, connection failure, malformed HTTP
                or non-2xx status.
            ProtocolError: If the body is not valid JSON.
        """
        url = f"{self.base_url}{path}"
        data = b"" if method == "POST" else None
        req = urllib.request.Request(
            url,
            data=data,
            method=method,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as e:
            raise NetworkError(f"{method} {path} failed with HTTP {e.code}") from e
        except urllib.error.URLError as e:
            raise NetworkError(f"{method} {path} failed: {e.reason}") from e
        except TimeoutError as e:
            raise NetworkError(f"{method} {path} timed out after {self._timeout}s") from e
        except http.client.HTTPException as e:
            # Not HTTP on the other end, or the connection dropped mid-body
            raise NetworkError(f"{method} {path} failed: {type(e).__name__}: {e}") from e
        except OSError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if not 200 <= status < 300:  # noqa: PLR2004
            raise NetworkError(f"{method} {path} failed with HTTP {status}")

        if not body.strip():
            return None
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProtocolError(f"{method} {path} returned invalid JSON: {e}") from e
