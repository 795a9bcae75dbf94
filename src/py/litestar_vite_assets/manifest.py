"""Frontend ``package.json`` loading.

The manifest is read through a :class:`~litestar_vite_assets.fs.FileStore` so
the same code handles a live project tree and a bundled one.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from litestar.exceptions import SerializationException
from litestar.serialization import decode_json

from litestar_vite_assets.exceptions import ManifestNotFoundError, ManifestParseError

if TYPE_CHECKING:
    from litestar_vite_assets.fs import FileStore

__all__ = ("PACKAGE_JSON", "PackageDescriptor", "parse_package_json", "read_package_json")

PACKAGE_JSON = "package.json"


def _empty_mapping() -> dict[str, str]:
    return {}


@dataclass(frozen=True)
class PackageDescriptor:
    """Parsed form of a frontend ``package.json``.

    Only the keys needed to recognise a Vite project are kept.
    """

    name: str = ""
    version: str = ""
    type: str = ""
    scripts: dict[str, str] = field(default_factory=_empty_mapping)
    dependencies: dict[str, str] = field(default_factory=_empty_mapping)
    dev_dependencies: dict[str, str] = field(default_factory=_empty_mapping)

    @classmethod
    def from_dict(cls, payload: "dict[str, Any]") -> "PackageDescriptor":
        """Build a descriptor from a decoded ``package.json`` object.

        Unknown keys are ignored and missing ones take their empty default.

        Args:
            payload: The decoded JSON object.

        Raises:
            TypeError: If a known key holds a value of the wrong shape.

        Returns:
            The package descriptor.
        """
        return cls(
            name=_string_field(payload, "name"),
            version=_string_field(payload, "version"),
            type=_string_field(payload, "type"),
            scripts=_mapping_field(payload, "scripts"),
            dependencies=_mapping_field(payload, "dependencies"),
            dev_dependencies=_mapping_field(payload, "devDependencies"),
        )


def _string_field(payload: "dict[str, Any]", key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"{key!r} must be a string, got {type(value).__name__}"
        raise TypeError(msg)
    return value


def _mapping_field(payload: "dict[str, Any]", key: str) -> dict[str, str]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"{key!r} must be an object, got {type(value).__name__}"
        raise TypeError(msg)
    mapping = cast("dict[str, Any]", value)
    for name, spec in mapping.items():
        if not isinstance(spec, str):
            msg = f"{key}.{name} must be a string, got {type(spec).__name__}"
            raise TypeError(msg)
    return cast("dict[str, str]", dict(mapping))


def parse_package_json(content: "bytes | str", manifest_path: str = PACKAGE_JSON) -> PackageDescriptor:
    """Parse raw ``package.json`` content.

    Args:
        content: The raw manifest content.
        manifest_path: Path used in error messages.

    Raises:
        ManifestParseError: If the content is not JSON or not a package descriptor.

    Returns:
        The package descriptor.
    """
    try:
        payload = decode_json(content)
    except SerializationException as exc:
        raise ManifestParseError(manifest_path, str(exc)) from exc

    if not isinstance(payload, dict):
        raise ManifestParseError(manifest_path, f"expected a JSON object, got {type(payload).__name__}")

    try:
        return PackageDescriptor.from_dict(cast("dict[str, Any]", payload))
    except TypeError as exc:
        raise ManifestParseError(manifest_path, str(exc)) from exc


def read_package_json(store: "FileStore", manifest_path: str = PACKAGE_JSON) -> PackageDescriptor:
    """Read and parse ``package.json`` at the root of ``store``.

    Args:
        store: A store rooted at the frontend project (see
            :func:`~litestar_vite_assets.fs.correct_store_root`).
        manifest_path: Path used in error messages.

    Raises:
        ManifestNotFoundError: If the manifest cannot be read.

    Returns:
        The package descriptor.
    """
    try:
        content = store.read_bytes(PACKAGE_JSON)
    except OSError as exc:
        raise ManifestNotFoundError(manifest_path) from exc
    return parse_package_json(content, manifest_path)
