"""Hierarchical file stores for serving frontend assets.

A file store is a small read-only view over a tree of files addressed by
slash-separated, unrooted names (``"src/main.ts"``; ``"."`` is the root).
Three stores ship with the package:

- :class:`DirectoryFileStore`: a live directory on disk (the frontend project tree).
- :class:`ResourceFileStore`: files bundled inside an installed Python package.
- :class:`MappingFileStore`: an in-memory mapping of names to bytes.

:class:`GuardedFileStore` wraps any of them and refuses to expose directories
that do not contain an ``index.html`` file. :class:`StoreFileSystem` adapts a
store to the Litestar file system protocol so it can back ``StaticFiles``.
"""

import io
import posixpath
import stat
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any, Protocol, cast, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from importlib.resources.abc import Traversable

    from litestar.types import PathType
    from litestar.types.file_types import FileInfo as LitestarFileInfo

__all__ = (
    "INDEX_FILE",
    "DirectoryFileStore",
    "FileInfo",
    "FileStore",
    "GuardedFileStore",
    "MappingFileStore",
    "ResourceFileStore",
    "StoreFileSystem",
    "correct_store_root",
    "join_name",
    "valid_path",
)

INDEX_FILE = "index.html"


def valid_path(name: str) -> bool:
    """Report whether ``name`` is a valid store path.

    Valid names are unrooted, slash-separated and contain no empty, ``.`` or
    ``..`` elements. The single name ``"."`` denotes the store root.

    Elements holding a backslash or a colon are rejected as well: on Windows
    those are separators and drive or stream markers, and ``pathlib`` would
    turn ``src\\..\\.env`` or ``D:/x`` into a path outside the store.

    Returns:
        True when the name can be used with a file store.
    """
    if name == ".":
        return True
    if not name or name.startswith("/"):
        return False
    return all(part not in {"", ".", ".."} and "\\" not in part and ":" not in part for part in name.split("/"))


def join_name(name: str, child: str) -> str:
    """Join a child element onto a store path.

    Returns:
        The joined store path.
    """
    return child if name == "." else f"{name}/{child}"


def _not_found(name: str) -> FileNotFoundError:
    return FileNotFoundError(f"no such file in store: {name!r}")


@dataclass(frozen=True)
class FileInfo:
    """Result of a :meth:`FileStore.stat` call."""

    name: str
    is_dir: bool
    size: int = 0
    """Size of a file in bytes; ``0`` for directories."""
    mtime: "float | None" = None
    """Modification time, when the store knows it."""


@runtime_checkable
class FileStore(Protocol):
    """Read-only hierarchical file store."""

    @property
    def embedded(self) -> bool:
        """True for stores bundled with the application rather than read from a live tree."""
        ...

    def stat(self, name: str) -> FileInfo:
        """Describe the entry at ``name``; raises :class:`FileNotFoundError` when absent."""
        ...

    def read_bytes(self, name: str) -> bytes:
        """Return the contents of the file at ``name``."""
        ...

    def listdir(self, name: str = ".") -> list[str]:
        """Return the sorted entry names of the directory at ``name``."""
        ...

    def sub(self, name: str) -> "FileStore":
        """Return a store rooted at the directory ``name``; raises :class:`ValueError` for invalid names."""
        ...


class DirectoryFileStore:
    """A live directory tree on the local filesystem."""

    __slots__ = ("root",)

    def __init__(self, root: "str | Path") -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirectoryFileStore({str(self.root)!r})"

    @property
    def embedded(self) -> bool:
        return False

    def _resolve(self, name: str) -> Path:
        if not valid_path(name):
            raise _not_found(name)
        return self.root if name == "." else self.root.joinpath(*name.split("/"))

    def stat(self, name: str) -> FileInfo:
        st = self._resolve(name).stat()
        is_dir = stat.S_ISDIR(st.st_mode)
        return FileInfo(
            name=posixpath.basename(name),
            is_dir=is_dir,
            size=0 if is_dir else st.st_size,
            mtime=float(st.st_mtime),
        )

    def read_bytes(self, name: str) -> bytes:
        return self._resolve(name).read_bytes()

    def listdir(self, name: str = ".") -> list[str]:
        return sorted(entry.name for entry in self._resolve(name).iterdir())

    def sub(self, name: str) -> "DirectoryFileStore":
        if not valid_path(name):
            msg = f"Invalid sub-store name: {name!r}"
            raise ValueError(msg)
        if name == ".":
            return self
        return DirectoryFileStore(self._resolve(name))


class ResourceFileStore:
    """Files bundled inside an installed Python package.

    This is the store to use when the built frontend ships inside a wheel. The
    manifest of a bundled project lives under ``<project_path>/package.json``.
    """

    __slots__ = ("root",)

    def __init__(self, root: "Traversable") -> None:
        self.root = root

    def __repr__(self) -> str:
        return f"ResourceFileStore({self.root!r})"

    @classmethod
    def from_package(cls, package: str, *parts: str) -> "ResourceFileStore":
        """Create a store over a directory bundled in ``package``.

        Args:
            package: Importable package name.
            *parts: Path segments below the package root.

        Returns:
            A store rooted at the bundled directory.
        """
        root = files(package)
        for part in parts:
            root = root / part
        return cls(root)

    @property
    def embedded(self) -> bool:
        return True

    def _resolve(self, name: str) -> "Traversable":
        if not valid_path(name):
            raise _not_found(name)
        node = self.root
        if name != ".":
            for part in name.split("/"):
                node = node / part
        return node

    def stat(self, name: str) -> FileInfo:
        node = self._resolve(name)
        if node.is_dir():
            return FileInfo(name=posixpath.basename(name), is_dir=True)
        if node.is_file():
            # Traversable has no stat(); bundled files are small.
            return FileInfo(name=posixpath.basename(name), is_dir=False, size=len(node.read_bytes()))
        raise _not_found(name)

    def read_bytes(self, name: str) -> bytes:
        node = self._resolve(name)
        if not node.is_file():
            raise _not_found(name)
        return node.read_bytes()

    def listdir(self, name: str = ".") -> list[str]:
        node = self._resolve(name)
        if not node.is_dir():
            raise _not_found(name)
        return sorted(entry.name for entry in node.iterdir())

    def sub(self, name: str) -> "ResourceFileStore":
        if not valid_path(name):
            msg = f"Invalid sub-store name: {name!r}"
            raise ValueError(msg)
        if name == ".":
            return self
        return ResourceFileStore(self._resolve(name))


class MappingFileStore:
    """An in-memory store built from a ``{name: content}`` mapping.

    Directories are implied by the names of the files they contain.
    """

    __slots__ = ("_files",)

    def __init__(self, files: "Mapping[str, bytes | str]") -> None:
        normalized: dict[str, bytes] = {}
        for name, content in files.items():
            clean = name.strip("/")
            if not valid_path(clean) or clean == ".":
                msg = f"Invalid file name: {name!r}"
                raise ValueError(msg)
            normalized[clean] = content.encode("utf-8") if isinstance(content, str) else content
        self._files = normalized

    def __repr__(self) -> str:
        return f"MappingFileStore({sorted(self._files)!r})"

    @property
    def embedded(self) -> bool:
        return True

    def _is_dir(self, name: str) -> bool:
        if name == ".":
            return True
        prefix = f"{name}/"
        return any(key.startswith(prefix) for key in self._files)

    def stat(self, name: str) -> FileInfo:
        if not valid_path(name):
            raise _not_found(name)
        if name in self._files:
            return FileInfo(name=posixpath.basename(name), is_dir=False, size=len(self._files[name]))
        if self._is_dir(name):
            return FileInfo(name=posixpath.basename(name), is_dir=True)
        raise _not_found(name)

    def read_bytes(self, name: str) -> bytes:
        try:
            return self._files[name]
        except KeyError:
            raise _not_found(name) from None

    def listdir(self, name: str = ".") -> list[str]:
        if not valid_path(name) or not self._is_dir(name):
            raise _not_found(name)
        prefix = "" if name == "." else f"{name}/"
        return sorted({key[len(prefix) :].split("/", 1)[0] for key in self._files if key.startswith(prefix)})

    def sub(self, name: str) -> "MappingFileStore":
        if not valid_path(name):
            msg = f"Invalid sub-store name: {name!r}"
            raise ValueError(msg)
        if name == ".":
            return self
        prefix = f"{name}/"
        return MappingFileStore({
            key[len(prefix) :]: value for key, value in self._files.items() if key.startswith(prefix)
        })


class GuardedFileStore:
    """A view that never exposes a directory without an ``index.html``.

    Stat-ing a directory that lacks a direct ``index.html`` child raises
    :class:`FileNotFoundError`, so a file server built on this store can never
    render a directory listing. Everything else is passed through unchanged.
    """

    __slots__ = ("_store",)

    def __init__(self, store: FileStore) -> None:
        self._store = store

    def __repr__(self) -> str:
        return f"GuardedFileStore({self._store!r})"

    @property
    def embedded(self) -> bool:
        return self._store.embedded

    def stat(self, name: str) -> FileInfo:
        info = self._store.stat(name)
        if info.is_dir:
            # Have an index file or go home.
            self._store.stat(join_name(name, INDEX_FILE))
        return info

    def read_bytes(self, name: str) -> bytes:
        return self._store.read_bytes(name)

    def listdir(self, name: str = ".") -> list[str]:
        return self._store.listdir(name)

    def sub(self, name: str) -> "GuardedFileStore":
        return GuardedFileStore(self._store.sub(name))


class StoreFileSystem:
    """Expose a :class:`FileStore` through Litestar's ``FileSystemProtocol``.

    ``StaticFiles`` addresses files by absolute paths below the directories it
    serves; this adapter is meant to be served from ``"/"`` so that the path
    ``/src/main.ts`` becomes the store name ``src/main.ts``. Any store error is
    reported as :class:`FileNotFoundError`, which ``StaticFiles`` turns into a
    not-found response instead of a server or authorization error.
    """

    __slots__ = ("store",)

    def __init__(self, store: FileStore) -> None:
        self.store = store

    def __repr__(self) -> str:
        return f"StoreFileSystem({self.store!r})"

    @staticmethod
    def store_name(path: "PathType") -> str:
        """Convert an absolute ``StaticFiles`` path into a store name.

        Returns:
            The store name, ``"."`` for the root.
        """
        name = PurePath(path).as_posix().lstrip("/")
        return name or "."

    def info(self, path: "PathType", **kwargs: Any) -> "LitestarFileInfo":
        name = self.store_name(path)
        try:
            entry = self.store.stat(name)
        except (OSError, ValueError) as exc:
            raise FileNotFoundError(name) from exc
        info: dict[str, Any] = {
            "created": entry.mtime or 0.0,
            "gid": 0,
            "ino": 0,
            "islink": False,
            "mode": (stat.S_IFDIR | 0o555) if entry.is_dir else (stat.S_IFREG | 0o444),
            "name": str(path),
            "nlink": 1,
            "size": entry.size,
            "type": "directory" if entry.is_dir else "file",
            "uid": 0,
        }
        # Without a known mtime the etag is derived from path and size only.
        if entry.mtime is not None:
            info["mtime"] = entry.mtime
        return cast("LitestarFileInfo", info)

    def open(self, file: "PathType", mode: str = "rb", buffering: int = -1) -> io.BytesIO:
        name = self.store_name(file)
        try:
            return io.BytesIO(self.store.read_bytes(name))
        except (OSError, ValueError) as exc:
            raise FileNotFoundError(name) from exc


def correct_store_root(store: FileStore, project_path: str) -> FileStore:
    """Point a store at the frontend project.

    Bundled stores hold the project under ``project_path``; live directory
    stores are already rooted at the project.

    Args:
        store: The configured file store.
        project_path: The frontend project path.

    Returns:
        A store whose root is the frontend project.
    """
    if not store.embedded:
        return store
    return store.sub(posixpath.normpath(project_path.strip("/")))
