"""Access logging for the asset server."""

import logging
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import quote

from litestar.enums import ScopeType
from litestar.middleware import AbstractMiddleware

if TYPE_CHECKING:
    from litestar.types import Message, Receive, Scope, Send

__all__ = ("AccessLogMiddleware", "format_client", "request_uri", "sanitize_log_value")

access_logger = logging.getLogger("litestar_vite_assets.access")


def sanitize_log_value(value: str) -> str:
    """Strip carriage returns and line feeds so a value cannot forge log lines.

    Returns:
        The value without ``\\r`` and ``\\n`` characters.
    """
    return value.replace("\n", "").replace("\r", "")


def request_uri(scope: "Scope") -> str:
    """Rebuild the request URI (escaped path plus query) from an ASGI scope.

    Returns:
        The request URI as sent by the client.
    """
    scope_dict = cast("dict[str, Any]", scope)
    raw_path: "bytes | None" = scope_dict.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else quote(scope_dict.get("path", "/"))
    query: bytes = scope_dict.get("query_string", b"")
    return f"{path}?{query.decode('latin-1')}" if query else path


def format_client(scope: "Scope") -> str:
    """Format the remote address of an ASGI scope as ``host:port``.

    Returns:
        The remote address, or ``-`` when the server did not provide one.
    """
    client = cast("dict[str, Any]", scope).get("client")
    if not client:
        return "-"
    host, port = client
    return f"{host}:{port}"


class AccessLogMiddleware(AbstractMiddleware):
    """Log one access line per request with the final status code.

    The status is taken from the ``http.response.start`` message sent by the
    wrapped application and defaults to 200 when none is sent.
    """

    scopes = {ScopeType.HTTP}

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        status = 200

        async def send_wrapper(message: "Message") -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            scope_dict = cast("dict[str, Any]", scope)
            access_logger.info(
                "%s - HTTP/%s %s %s (%d)",
                format_client(scope),
                scope_dict.get("http_version", "1.1"),
                scope_dict.get("method", ""),
                sanitize_log_value(request_uri(scope)),
                status,
            )
