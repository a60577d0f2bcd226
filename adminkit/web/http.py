"""
Minimal ASGI request/response objects for the admin application.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl


def _json_default_serializer(o):
    """Default JSON serializer for non-standard types."""
    if isinstance(o, (set, tuple)):
        return list(o)
    if hasattr(o, "isoformat"):
        return o.isoformat()
    if hasattr(o, "value"):
        return o.value
    return str(o)


class BadRequest(ValueError):
    """The request body could not be decoded."""


class Request:
    """
    HTTP request over an ASGI scope.

    The body is read once and cached.
    """

    def __init__(
        self,
        scope: Mapping[str, Any],
        receive: Callable[..., Awaitable[dict]],
        *,
        max_body_size: int = 10_485_760,  # 10 MiB
    ):
        self.scope = scope
        self._receive = receive
        self.max_body_size = max_body_size
        self.state: Dict[str, Any] = {}
        self._body: Optional[bytes] = None
        self._headers: Optional[Dict[str, str]] = None
        self._query: Optional[Dict[str, str]] = None

    @property
    def method(self) -> str:
        return self.scope.get("method", "GET")

    @property
    def path(self) -> str:
        return self.scope.get("path", "/")

    @property
    def query_string(self) -> str:
        return self.scope.get("query_string", b"").decode("utf-8")

    @property
    def client(self) -> Optional[tuple]:
        return self.scope.get("client")

    @property
    def headers(self) -> Dict[str, str]:
        if self._headers is None:
            self._headers = {
                key.decode("latin-1").lower(): value.decode("latin-1")
                for key, value in self.scope.get("headers", [])
            }
        return self._headers

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    @property
    def query_params(self) -> Dict[str, str]:
        if self._query is None:
            self._query = dict(parse_qsl(self.query_string, keep_blank_values=True))
        return self._query

    async def body(self) -> bytes:
        if self._body is None:
            chunks: List[bytes] = []
            size = 0
            more_body = True
            while more_body:
                message = await self._receive()
                if message.get("type") == "http.disconnect":
                    break
                chunk = message.get("body", b"")
                size += len(chunk)
                if size > self.max_body_size:
                    raise BadRequest(f"Request body exceeds {self.max_body_size} bytes")
                chunks.append(chunk)
                more_body = message.get("more_body", False)
            self._body = b"".join(chunks)
        return self._body

    async def json(self) -> Any:
        raw = await self.body()
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise BadRequest(f"Invalid JSON body: {exc}") from exc


class Response:
    """HTTP response with a fully buffered body."""

    def __init__(
        self,
        content: bytes | str = b"",
        status: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        media_type: Optional[str] = None,
    ):
        self.status = status
        self.body = content.encode("utf-8") if isinstance(content, str) else content
        self.headers: Dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}
        if media_type:
            self.headers["content-type"] = media_type
        self.headers.setdefault("content-type", "application/octet-stream")

    @classmethod
    def json(cls, obj: Any, status: int = 200, *, headers: Optional[Mapping[str, str]] = None) -> "Response":
        content = json.dumps(obj, default=_json_default_serializer)
        return cls(content, status, headers, "application/json; charset=utf-8")

    @classmethod
    def html(cls, content: str, status: int = 200, **kwargs) -> "Response":
        return cls(content, status, media_type="text/html; charset=utf-8", **kwargs)

    @classmethod
    def text(cls, content: str, status: int = 200, **kwargs) -> "Response":
        return cls(content, status, media_type="text/plain; charset=utf-8", **kwargs)

    def set_header(self, name: str, value: str) -> None:
        self.headers[name.lower()] = value

    def _prepare_headers(self) -> List[Tuple[bytes, bytes]]:
        headers = dict(self.headers)
        headers["content-length"] = str(len(self.body))
        return [(k.encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()]

    async def send_asgi(self, send: Callable[[dict], Awaitable[None]]) -> None:
        await send({
            "type": "http.response.start",
            "status": self.status,
            "headers": self._prepare_headers(),
        })
        await send({"type": "http.response.body", "body": self.body, "more_body": False})
