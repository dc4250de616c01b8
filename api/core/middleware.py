"""ASGI middleware: origin allow-list CORS."""

from __future__ import annotations

from starlette.datastructures import Headers
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.config import Settings


class OriginPolicyMiddleware:
    """Grants CORS to allow-listed origins and answers preflight requests.

    An allow-listed ``Origin`` is reflected back. Any other origin gets ``*``
    only when the service runs in development mode. ``OPTIONS`` requests are
    answered here with a bare 200 and never reach the routes.
    """

    CORS_HEADERS: list[tuple[bytes, bytes]] = [
        (b"access-control-allow-methods", b"GET, POST, PUT, DELETE, OPTIONS"),
        (
            b"access-control-allow-headers",
            b"Origin, X-Requested-With, Content-Type, Accept, Authorization",
        ),
        (b"access-control-allow-credentials", b"true"),
    ]

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        self.app = app
        self.allowed_origins = frozenset(settings.allowed_origin_list)
        self.allow_any_origin = settings.is_development

    def _response_headers(self, origin: str | None) -> list[tuple[bytes, bytes]]:
        headers = list(self.CORS_HEADERS)
        if origin and origin in self.allowed_origins:
            # Reflected grants differ per Origin
            headers.append((b"access-control-allow-origin", origin.encode("latin-1")))
            headers.append((b"vary", b"Origin"))
        elif self.allow_any_origin:
            headers.append((b"access-control-allow-origin", b"*"))
        return headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        cors_headers = self._response_headers(origin)

        if scope["method"] == "OPTIONS":
            response = Response(status_code=200)
            response.raw_headers.extend(cors_headers)
            await response(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.extend(cors_headers)
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)
