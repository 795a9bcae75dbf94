"""Dual-mode asset server.

:class:`AssetServer` is the ASGI application mounted under the configured URL
prefix. In development it serves the frontend project tree directly; in
production it serves the build output directory (``dist``) inside it. In both
modes it refuses hidden paths, never lists directories, and answers a small
set of support files (the React refresh preamble) from bundled resources.
"""

import logging
from typing import TYPE_CHECKING, Any, cast

import anyio
from litestar.response.base import ASGIResponse

from litestar_vite_assets.fs import GuardedFileStore
from litestar_vite_assets.handler._files import FileServer, SupportFiles, not_found_response
from litestar_vite_assets.handler._logging import AccessLogMiddleware, sanitize_log_value

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Receive, Scope, Send

    from litestar_vite_assets.config import ViteConfig
    from litestar_vite_assets.fs import FileStore

__all__ = ("AssetServer", "restore_mount_path")

logger = logging.getLogger("litestar_vite_assets")

_WRITE_ERRORS = (OSError, anyio.ClosedResourceError, anyio.BrokenResourceError)


def restore_mount_path(mount_path: str, path: str) -> str:
    """Put a mount path back in front of the path Litestar handed to a static mount.

    Static mounts receive the request path with the mount path removed
    (``/src/main.ts`` mounted at ``/src`` arrives as ``/main.ts``, and the mount
    path itself arrives as ``/``). A root mount hands over the path without
    its leading slash.

    Args:
        mount_path: The path the server is mounted at, e.g. ``/src``.
        path: The remaining path from the scope.

    Returns:
        The full request path.
    """
    full_path = f"{mount_path.rstrip('/')}{path}"
    return full_path if full_path.startswith("/") else f"/{full_path}"


class AssetServer:
    """Serve frontend assets for a resolved :class:`~litestar_vite_assets.config.ViteConfig`.

    The request path is reduced by ``strip_prefix`` exactly once, here; the
    inner file server receives the already-stripped path. With the default
    ``"/"`` the URL path maps straight onto the serving root, which is how Vite
    lays out both the project tree (``/src/main.ts``) and the build output
    (``/assets/index-4f2a1c.js``). Pass the mount path instead when the server
    is mounted somewhere that is not part of the file layout.

    When the server is mounted, pass ``mount_path`` as well: the mount consumes
    its path before the request gets here, and the server puts it back so the
    prefix is still stripped only once.
    """

    __slots__ = (
        "_development_app",
        "_production_app",
        "config",
        "mount_path",
        "root",
        "strip_prefix",
        "support_files",
    )

    def __init__(
        self,
        config: "ViteConfig",
        support_files: "SupportFiles | None" = None,
        strip_prefix: str = "/",
        mount_path: str = "",
    ) -> None:
        """Initialize the asset server.

        Args:
            config: The configuration. It is resolved here if it was not already.
            support_files: Support file table. Defaults to the files bundled with the package.
            strip_prefix: Prefix removed from the request path before lookup.
            mount_path: Path the server is mounted at, empty when it receives full request paths.
        """
        self.config = config.resolve()
        self.root: "FileStore" = GuardedFileStore(config.store())
        self.support_files = support_files if support_files is not None else SupportFiles()
        self.strip_prefix = strip_prefix or "/"
        self.mount_path = mount_path
        self._development_app: "ASGIApp" = AccessLogMiddleware(FileServer(self.root))
        self._production_app: "ASGIApp | None" = None
        if config.is_production:
            self._production_app = self._create_production_app()

    def _create_production_app(self) -> "ASGIApp | None":
        try:
            dist = self.root.sub(self.config.assets_path.strip("/"))
        except ValueError as exc:
            logger.warning("Cannot serve assets from %r: %s", self.config.assets_path, exc)
            return None
        return AccessLogMiddleware(FileServer(dist))

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] == "websocket":
            await send({"type": "websocket.close", "code": 1000, "reason": ""})
            return
        if scope["type"] != "http":
            return

        path: str = scope["path"]
        if self.mount_path:
            path = restore_mount_path(self.mount_path, path)
        if not path.startswith(self.strip_prefix):
            await not_found_response()(scope, receive, send)
            return

        rest = path[len(self.strip_prefix) :]
        parts = rest.split("/")

        # Hidden files and directories (and "..") are never served.
        if any(part.startswith(".") for part in parts):
            await not_found_response()(scope, receive, send)
            return

        filename = parts[-1]
        if filename in self.support_files:
            await self._serve_support_file(filename, scope, receive, send)
            return

        if self.config.debug:
            self._log_root(path)

        if self.config.is_production:
            app = self._production_app
            if app is None:
                await not_found_response()(scope, receive, send)
                return
        else:
            app = self._development_app

        child_scope = cast("Scope", {**cast("dict[str, Any]", scope), "path": f"/{rest}"})
        await app(child_scope, receive, send)

    async def _serve_support_file(self, filename: str, scope: "Scope", receive: "Receive", send: "Send") -> None:
        try:
            body, content_type = self.support_files.load(filename)
        except OSError as exc:
            logger.error("Could not load support file %r: %s", filename, exc)
            await not_found_response()(scope, receive, send)
            return

        try:
            await ASGIResponse(body=body, media_type=content_type)(scope, receive, send)
        except _WRITE_ERRORS as exc:
            logger.warning("Could not write support file %r: %s", filename, exc)

    def _log_root(self, path: str) -> None:
        logger.debug("Entered asset store for %s", sanitize_log_value(path))
        try:
            entries = self.root.listdir(".")
        except OSError as exc:
            logger.debug("Could not read the asset directory: %s", exc)
            return
        for entry in entries:
            logger.debug("  %s", entry)
