"""Constants and utility functions for configuration."""

__all__ = (
    "DEFAULT_ASSETS_PATH",
    "DEFAULT_DEV_SERVER_DOMAIN",
    "DEFAULT_DEV_URL_PREFIX",
    "DEFAULT_PORT_V2",
    "DEFAULT_PORT_V3",
    "DEFAULT_PROD_URL_PREFIX",
    "DEFAULT_PROJECT_PATH",
    "DEFAULT_VITE_VERSION",
    "TRUE_VALUES",
    "default_content_types",
)

TRUE_VALUES = {"True", "true", "1", "yes", "Y", "T"}

DEFAULT_VITE_VERSION = "5"
"""Vite major version assumed when the manifest does not pin a parseable one."""
DEFAULT_PORT_V2 = "3000"
DEFAULT_PORT_V3 = "5173"
DEFAULT_PROJECT_PATH = "frontend"
DEFAULT_ASSETS_PATH = "dist"
DEFAULT_DEV_URL_PREFIX = "/src/"
DEFAULT_PROD_URL_PREFIX = "/assets/"
DEFAULT_DEV_SERVER_DOMAIN = "localhost"


def default_content_types() -> dict[str, str]:
    """Default content-type mappings keyed by file extension.

    Returns:
        Dictionary mapping file extensions to MIME types.
    """
    return {
        ".js": "application/javascript",
        ".mjs": "application/javascript",
        ".cjs": "application/javascript",
        ".jsx": "application/javascript",
        ".ts": "application/javascript",
        ".tsx": "application/javascript",
        ".css": "text/css",
        ".html": "text/html",
        ".json": "application/json",
        ".map": "application/json",
        ".svg": "image/svg+xml",
        ".png": "image/png",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".webp": "image/webp",
        ".ico": "image/x-icon",
        ".woff2": "font/woff2",
        ".woff": "font/woff",
    }
