"""Litestar-Vite-Assets exception classes."""

__all__ = [
    "LitestarViteAssetsError",
    "ManifestNotFoundError",
    "ManifestParseError",
    "NotAViteProjectError",
]


class LitestarViteAssetsError(Exception):
    """Base exception for Litestar-Vite-Assets related errors."""


class ManifestNotFoundError(LitestarViteAssetsError, FileNotFoundError):
    """Raised when the frontend ``package.json`` cannot be read."""

    def __init__(self, manifest_path: str) -> None:
        """Initialize the exception.

        Args:
            manifest_path: Store-relative path of the manifest that was looked up.
        """
        super().__init__(
            f"Frontend manifest not found at {manifest_path!r}. Is the project path pointing at a Vite project?"
        )
        self.manifest_path = manifest_path


class ManifestParseError(LitestarViteAssetsError):
    """Raised when ``package.json`` is not a valid package descriptor."""

    def __init__(self, manifest_path: str, reason: str) -> None:
        super().__init__(f"Could not parse frontend manifest at {manifest_path!r}: {reason}")
        self.manifest_path = manifest_path


class NotAViteProjectError(LitestarViteAssetsError):
    """Raised when the manifest does not declare ``vite`` as a dev dependency."""

    def __init__(self, name: "str | None" = None) -> None:
        project = f"{name!r}" if name else "the frontend project"
        super().__init__(f"Invalid configuration: {project} does not list 'vite' in devDependencies.")
