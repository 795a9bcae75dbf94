"""Litestar plugin mounting the Vite asset server."""

from typing import TYPE_CHECKING

from litestar.cli._utils import console  # pyright: ignore[reportPrivateImportUsage]
from litestar.handlers import asgi
from litestar.plugins import InitPluginProtocol
from litestar.types import Receive, Scope, Send

from litestar_vite_assets.config import ViteConfig
from litestar_vite_assets.handler import AssetServer

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

    from litestar_vite_assets.handler import SupportFiles

__all__ = ("ViteAssetsPlugin", "mount_path")


def mount_path(url_prefix: str) -> str:
    """Build the mount path for a URL prefix.

    Args:
        url_prefix: The configured URL prefix, e.g. ``/src/``.

    Returns:
        The mount path, e.g. ``/src``.
    """
    return f"/{url_prefix.strip('/')}"


class ViteAssetsPlugin(InitPluginProtocol):
    """Serve a Vite frontend from a Litestar application.

    The configuration is resolved when the application is created. A broken
    frontend manifest therefore fails application startup instead of the
    first request.
    """

    __slots__ = ("_asset_server", "_config", "_support_files")

    def __init__(self, config: "ViteConfig | None" = None, support_files: "SupportFiles | None" = None) -> None:
        """Initialize ``ViteAssetsPlugin``.

        Args:
            config: configuration to use. The default configuration will be used if it is not provided.
            support_files: Optional replacement for the bundled support files.
        """
        if config is None:
            config = ViteConfig()
        self._config = config
        self._support_files = support_files
        self._asset_server: "AssetServer | None" = None

    @property
    def config(self) -> ViteConfig:
        return self._config

    @property
    def asset_server(self) -> AssetServer:
        """The ASGI application serving the assets, created on first access.

        Returns:
            The asset server.
        """
        if self._asset_server is None:
            config = self._config.resolve()
            self._asset_server = AssetServer(
                config,
                support_files=self._support_files,
                mount_path=mount_path(config.url_prefix),
            )
        return self._asset_server

    def on_app_init(self, app_config: "AppConfig") -> "AppConfig":
        """Mount the asset server under the configured URL prefix.

        Args:
            app_config: The :class:`AppConfig <.config.app.AppConfig>` instance.

        Returns:
            The updated application configuration.
        """
        server = self.asset_server

        # A static mount hands over the path without the mount prefix; the server restores it.
        @asgi(
            path=server.mount_path,
            name="vite_assets",
            is_static=True,
            copy_scope=True,
            opt={"exclude_from_auth": True},
        )
        async def vite_assets(scope: Scope, receive: Receive, send: Send) -> None:
            await server(scope, receive, send)

        app_config.route_handlers.append(vite_assets)
        self._print_banner()
        return app_config

    def _print_banner(self) -> None:
        config = self._config
        if config.is_production:
            dist = f"{config.project_path}/{config.assets_path}"
            console.rule(f"[yellow]Serving built assets from `{dist}` at {config.url_prefix}[/]", align="left")
            return
        platform = config.platform or "unknown"
        console.rule(
            f"[yellow]Serving {platform} sources from `{config.project_path}` at {config.url_prefix} "
            f"(Vite dev server {config.dev_server_base_url})[/]",
            align="left",
        )
