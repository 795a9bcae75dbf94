"""Asset serving public API.

This package provides the :class:`AssetServer` ASGI application and the
pieces it is assembled from.
"""

from litestar_vite_assets.handler._files import FileServer, SupportFile, SupportFiles
from litestar_vite_assets.handler._logging import AccessLogMiddleware
from litestar_vite_assets.handler._server import AssetServer

__all__ = ("AccessLogMiddleware", "AssetServer", "FileServer", "SupportFile", "SupportFiles")
