"""Litestar-Vite-Assets: serve Vite frontends from Litestar.

In development the frontend project tree is served as-is, with defaults
(framework, entry point, dev server port) inferred from ``package.json``. In
production the built output directory is served instead.

Basic usage:
    from litestar import Litestar
    from litestar_vite_assets import ViteAssetsPlugin, ViteConfig

    app = Litestar(
        plugins=[ViteAssetsPlugin(config=ViteConfig(project_path="frontend"))],
    )
"""

from litestar_vite_assets.config import ViteConfig
from litestar_vite_assets.fs import (
    DirectoryFileStore,
    FileStore,
    GuardedFileStore,
    MappingFileStore,
    ResourceFileStore,
    StoreFileSystem,
)
from litestar_vite_assets.handler import AccessLogMiddleware, AssetServer, SupportFiles
from litestar_vite_assets.plugin import ViteAssetsPlugin
from litestar_vite_assets.profile import FrameworkProfile, analyze_package_json

__all__ = (
    "AccessLogMiddleware",
    "AssetServer",
    "DirectoryFileStore",
    "FileStore",
    "FrameworkProfile",
    "GuardedFileStore",
    "MappingFileStore",
    "ResourceFileStore",
    "StoreFileSystem",
    "SupportFiles",
    "ViteAssetsPlugin",
    "ViteConfig",
    "analyze_package_json",
)
