"""
Async HTTP client for the Canvas REST API.

Wraps httpx.AsyncClient with bearer authentication, Link-header pagination and
translation of failures into canvas_cli.errors types. Requests to the upload
storage host go out without the Canvas token.
"""
from __future__ import annotations

import logging
import typing as t

import httpx

from canvas_cli.errors import NetworkError, error_for_status, require_auth
from canvas_cli.schemas import UserRecord

if t.TYPE_CHECKING:
    from canvas_cli.config import Settings

logger = logging.getLogger(__name__)

# Timeout settings (in seconds)
STANDARD_TIMEOUT = 30.0
UPLOAD_TIMEOUT = 300.0


def _response_body(response: httpx.Response) -> t.Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def raise_for_status(response: httpx.Response) -> httpx.Response:
    """Raise the matching HttpError subclass for a 4xx/5xx response."""
    if response.status_code >= 400:
        raise error_for_status(
            response.status_code,
            _response_body(response),
            url=str(response.request.url),
            reason=response.reason_phrase,
        )
    return response


class CanvasClient:
    """Thin async wrapper over the endpoints the CLI needs."""

    def __init__(
        self,
        base_url: str,
        token: str,
        transport: t.Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = STANDARD_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._auth_headers = {"Authorization": f"Bearer {token}"}
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout,
            follow_redirects=False,
        )

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        transport: t.Optional[httpx.AsyncBaseTransport] = None,
    ) -> "CanvasClient":
        require_auth(settings)
        return cls(settings.canvas_url or "", settings.token or "", transport=transport)

    async def __aenter__(self) -> "CanvasClient":
        return self

    async def __aexit__(self, *exc_info: t.Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        authenticated: bool = True,
        **kwargs: t.Any,
    ) -> httpx.Response:
        headers = dict(self._auth_headers) if authenticated else {}
        try:
            response = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to {url} timed out: {exc}", url=url) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Could not reach {url}: {exc}", url=url) from exc
        logger.debug("%s %s -> %s", method, response.request.url.path, response.status_code)
        return response

    async def get_json(self, path: str, params: t.Optional[dict[str, t.Any]] = None) -> t.Any:
        """GET a Canvas endpoint, following pagination for list responses.

        Args:
            path: API path such as "/api/v1/courses"
            params: Query parameters for the first page; later pages use the
                    URL Canvas hands back in the Link header

        Returns:
            The decoded JSON. Lists from every page are concatenated.
        """
        response = raise_for_status(await self._send("GET", path, params=params))
        data = response.json()
        if not isinstance(data, list):
            return data

        results = list(data)
        next_url = response.links.get("next", {}).get("url")
        while next_url:
            response = raise_for_status(await self._send("GET", next_url))
            page = response.json()
            if isinstance(page, list):
                results.extend(page)
            next_url = response.links.get("next", {}).get("url")
        return results

    async def post_json(self, path: str, data: dict[str, t.Any]) -> t.Any:
        response = raise_for_status(await self._send("POST", path, json=data))
        return response.json()

    async def post_multipart(
        self,
        url: str,
        fields: dict[str, t.Any],
        file_name: str,
        file_obj: t.BinaryIO,
    ) -> httpx.Response:
        """POST form fields followed by the file to an absolute storage URL.

        The Canvas token is not sent and redirects are not followed, so the
        caller can read the Location header.
        """
        data = {key: "" if value is None else str(value) for key, value in fields.items()}
        response = await self._send(
            "POST",
            url,
            authenticated=False,
            data=data,
            files={"file": (file_name, file_obj)},
            timeout=UPLOAD_TIMEOUT,
        )
        return raise_for_status(response)

    async def get_absolute(self, url: str) -> t.Any:
        response = raise_for_status(await self._send("GET", url))
        return _response_body(response)

    async def get_user(self) -> UserRecord:
        """Identity check used by `canvas auth`."""
        return UserRecord.model_validate(await self.get_json("/api/v1/users/self"))
