"""File serving from a file store, and bundled support files."""

import logging
import mimetypes
import posixpath
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from litestar.exceptions import NotFoundException
from litestar.response.base import ASGIResponse
from litestar.static_files import StaticFiles

from litestar_vite_assets.config._constants import default_content_types  # pyright: ignore[reportPrivateUsage]
from litestar_vite_assets.fs import ResourceFileStore, StoreFileSystem

if TYPE_CHECKING:
    from collections.abc import Mapping

    from litestar.types import Receive, Scope, Send

    from litestar_vite_assets.fs import FileStore

__all__ = (
    "DEFAULT_SUPPORT_FILES",
    "FileServer",
    "SupportFile",
    "SupportFiles",
    "guess_content_type",
    "not_found_response",
)

logger = logging.getLogger("litestar_vite_assets")

_STORE_ROOT = "/"
_NOT_FOUND_BODY = b"404 page not found\n"
_METHOD_NOT_ALLOWED_BODY = b"405 method not allowed\n"
_ALLOWED_METHODS = frozenset({"GET", "HEAD"})


def not_found_response() -> ASGIResponse:
    """Build the standard plain-text not-found page.

    Returns:
        The response.
    """
    return ASGIResponse(
        body=_NOT_FOUND_BODY,
        media_type="text/plain",
        status_code=404,
        headers={"x-content-type-options": "nosniff"},
    )


def guess_content_type(name: str, content_types: "Mapping[str, str] | None" = None) -> str:
    """Pick a content type for a file name.

    Args:
        name: File name or store path.
        content_types: Extension to content type overrides. Defaults to :func:`default_content_types`.

    Returns:
        The content type.
    """
    table = content_types if content_types is not None else default_content_types()
    extension = posixpath.splitext(name)[1].lower()
    if extension in table:
        return table[extension]
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"


class FileServer:
    """ASGI application serving files from a store.

    Lookups are delegated to Litestar's :class:`~litestar.static_files.StaticFiles`
    in HTML mode over a :class:`~litestar_vite_assets.fs.StoreFileSystem`: the
    request ``path`` is resolved below the store root and directories are served
    through their ``index.html``. Anything that cannot be served is answered with
    the standard not-found page. A ``404.html`` at the store root is served for
    missing files, with status 404, the way ``StaticFiles`` does it.
    """

    __slots__ = ("content_types", "static_files", "store")

    def __init__(self, store: "FileStore", content_types: "Mapping[str, str] | None" = None) -> None:
        self.store = store
        self.content_types = dict(content_types) if content_types is not None else default_content_types()
        self.static_files = StaticFiles(
            is_html_mode=True,
            directories=[_STORE_ROOT],
            file_system=StoreFileSystem(store),
            resolve_symlinks=False,
        )

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        scope_dict = cast("dict[str, Any]", scope)
        method = scope_dict.get("method", "GET")
        if method not in _ALLOWED_METHODS:
            response = ASGIResponse(
                body=_METHOD_NOT_ALLOWED_BODY,
                media_type="text/plain",
                status_code=405,
                headers={"allow": "GET, HEAD"},
            )
            await response(scope, receive, send)
            return

        path = scope_dict.get("path", "/")
        try:
            file_response = await self.static_files.handle(path=path, is_head_response=method == "HEAD")
        except NotFoundException as exc:
            logger.debug("Asset %r not served: %s", path, exc)
            await not_found_response()(scope, receive, send)
            return

        # mimetypes has no JavaScript type for .ts or .tsx; the table maps them.
        file_response.headers["content-type"] = guess_content_type(str(file_response.file_path), self.content_types)
        await file_response(scope, receive, send)


@dataclass(frozen=True)
class SupportFile:
    """A bundled file served under a fixed name regardless of the serving root."""

    resource: str
    """Path of the file inside the support store."""
    content_type: str


DEFAULT_SUPPORT_FILES: "dict[str, SupportFile]" = {
    "preamble.js": SupportFile(resource="react/preamble.js", content_type="application/javascript"),
}


class SupportFiles:
    """Read-only table of support files keyed by request file name.

    The default store is the ``static`` directory bundled with this package;
    pass another store (for example a :class:`~litestar_vite_assets.fs.MappingFileStore`)
    to substitute the content.
    """

    __slots__ = ("_files", "_store")

    def __init__(
        self,
        store: "FileStore | None" = None,
        files: "Mapping[str, SupportFile] | None" = None,
    ) -> None:
        self._store = store if store is not None else ResourceFileStore.from_package("litestar_vite_assets", "static")
        self._files = dict(files) if files is not None else dict(DEFAULT_SUPPORT_FILES)

    def __contains__(self, filename: object) -> bool:
        return filename in self._files

    def load(self, filename: str) -> tuple[bytes, str]:
        """Read a support file.

        Args:
            filename: The requested file name, e.g. ``preamble.js``.

        Raises:
            KeyError: If ``filename`` is not a support file.

        Returns:
            The file content and its content type.
        """
        entry = self._files[filename]
        return self._store.read_bytes(entry.resource), entry.content_type
