"""
Shared test fixtures and helpers for the adminkit test suite.
"""

import json
import pytest
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from adminkit.mapping import AdminModelMapper


# ============================================================================
# Request Helpers
# ============================================================================


def make_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
    scheme: str = "http",
    client: Optional[tuple] = None,
) -> dict:
    """Build a minimal ASGI HTTP scope."""
    raw_headers = []
    if headers:
        for name, value in headers:
            raw_headers.append(
                (name.encode("latin-1") if isinstance(name, str) else name,
                 value.encode("latin-1") if isinstance(value, str) else value)
            )
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8") if isinstance(query_string, str) else query_string,
        "headers": raw_headers,
        "scheme": scheme,
        "server": ("127.0.0.1", 8000),
        "client": client or ("127.0.0.1", 12345),
        "root_path": "",
    }


def make_receive(body: bytes = b"", *, chunks: Optional[List[bytes]] = None):
    """Create an ASGI receive callable from body bytes or chunked list."""
    if chunks:
        messages = []
        for i, chunk in enumerate(chunks):
            messages.append({
                "type": "http.request",
                "body": chunk,
                "more_body": i < len(chunks) - 1,
            })
    else:
        messages = [{"type": "http.request", "body": body, "more_body": False}]

    idx = 0

    async def receive():
        nonlocal idx
        if idx < len(messages):
            msg = messages[idx]
            idx += 1
            return msg
        return {"type": "http.disconnect"}

    return receive


class ResponseCapture:
    """Collects the ASGI messages sent by an application."""

    def __init__(self):
        self.messages: List[dict] = []

    async def __call__(self, message: dict):
        self.messages.append(message)

    @property
    def status(self) -> Optional[int]:
        for msg in self.messages:
            if msg["type"] == "http.response.start":
                return msg["status"]
        return None

    @property
    def headers(self) -> Dict[str, str]:
        for msg in self.messages:
            if msg["type"] == "http.response.start":
                return {k.decode("latin-1"): v.decode("latin-1") for k, v in msg["headers"]}
        return {}

    @property
    def body(self) -> bytes:
        return b"".join(
            msg.get("body", b"") for msg in self.messages
            if msg["type"] == "http.response.body"
        )

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.body)


async def call_app(
    app,
    method: str = "GET",
    path: str = "/",
    *,
    body: Any = None,
    headers: Optional[List[tuple]] = None,
) -> ResponseCapture:
    """Send one HTTP request through an ASGI app and capture the response.

    A query string may be given in ``path`` (``/api/forums/list?pageSize=2``).
    """
    path, _, query = path.partition("?")
    if body is not None and not isinstance(body, bytes):
        body = json.dumps(body).encode("utf-8")
    capture = ResponseCapture()
    await app(make_scope(method, path, query, headers=headers), make_receive(body or b""), capture)
    return capture


# ============================================================================
# Fixtures
# ============================================================================

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_mapper():
    """Admin-model mapper with a frozen clock."""
    return AdminModelMapper(now=lambda: FIXED_NOW)

