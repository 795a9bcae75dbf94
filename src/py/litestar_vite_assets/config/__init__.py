"""Litestar-Vite-Assets Configuration.

:class:`ViteConfig` holds the settings an operator can supply and the defaults
the resolver fills in. Resolution is "fill if empty": each pass only sets
fields that are still unset, so operator values always win and calling a pass
twice changes nothing.

Example usage::

    # Development: defaults are inferred from frontend/package.json
    config = ViteConfig()
    config.resolve()
    config.entry_point  # "src/main.tsx" for a React + TypeScript project

    # Production: serve frontend/dist under /assets/
    config = ViteConfig(environment="production")
    config.resolve()
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from litestar_vite_assets.config._constants import (  # pyright: ignore[reportPrivateUsage]
    DEFAULT_ASSETS_PATH,
    DEFAULT_DEV_SERVER_DOMAIN,
    DEFAULT_DEV_URL_PREFIX,
    DEFAULT_PORT_V2,
    DEFAULT_PORT_V3,
    DEFAULT_PROD_URL_PREFIX,
    DEFAULT_PROJECT_PATH,
    DEFAULT_VITE_VERSION,
    TRUE_VALUES,
)
from litestar_vite_assets.fs import DirectoryFileStore, correct_store_root
from litestar_vite_assets.manifest import PACKAGE_JSON, read_package_json
from litestar_vite_assets.profile import analyze_package_json

if TYPE_CHECKING:
    from litestar_vite_assets.fs import FileStore
    from litestar_vite_assets.profile import FrameworkProfile

logger = logging.getLogger("litestar_vite_assets")

__all__ = ("TRUE_VALUES", "ViteConfig")

PRODUCTION = "production"
DEVELOPMENT = "development"


@dataclass
class ViteConfig:
    """Configuration for serving a Vite frontend.

    Attributes:
        project_path: Path of the frontend project. For a live directory store this is the
            directory itself; for a bundled store it is the sub-directory holding the project.
        environment: ``"development"`` or ``"production"``. Any other value behaves as development.
        https: Use ``https`` for the Vite dev server URL.
        dev_server_domain: Vite dev server host name.
        dev_server_port: Vite dev server port.
        url_prefix: URL path the asset server is mounted under.
        assets_path: Name of the build output directory inside the project (production).
        vite_version: Vite version used to pick defaults (major version is enough).
        platform: Framework name (``vue``, ``react``, ``preact``, ``svelte``, ``lit``, ``vanilla``).
        entry_point: Entry point script relative to the project root.
        file_store: Store holding the frontend files. Defaults to the ``project_path`` directory.
        debug: Log diagnostic details for every asset request.
        dev_defaults: The framework profile detected from ``package.json`` (development only).
    """

    project_path: str = field(default_factory=lambda: os.getenv("VITE_PROJECT_PATH", ""))
    environment: str = field(default_factory=lambda: os.getenv("VITE_ENVIRONMENT", DEVELOPMENT))
    https: bool = field(default_factory=lambda: os.getenv("VITE_HTTPS", "False") in TRUE_VALUES)
    dev_server_domain: str = field(default_factory=lambda: os.getenv("VITE_DEV_SERVER_DOMAIN", ""))
    dev_server_port: str = field(default_factory=lambda: os.getenv("VITE_DEV_SERVER_PORT", ""))
    url_prefix: str = field(default_factory=lambda: os.getenv("VITE_URL_PREFIX", ""))
    assets_path: str = field(default_factory=lambda: os.getenv("VITE_ASSETS_PATH", ""))
    vite_version: str = ""
    platform: str = ""
    entry_point: str = ""
    file_store: "FileStore | None" = None
    debug: bool = field(default_factory=lambda: os.getenv("VITE_DEBUG", "False") in TRUE_VALUES)
    dev_defaults: "FrameworkProfile | None" = field(default=None, init=False)

    _resolved: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION

    @property
    def is_resolved(self) -> bool:
        return self._resolved

    @property
    def dev_server_base_url(self) -> str:
        """The Vite dev server URL, e.g. ``http://localhost:5173``."""
        protocol = "https" if self.https else "http"
        return f"{protocol}://{self.dev_server_domain}:{self.dev_server_port}"

    def store(self) -> "FileStore":
        """Return the store rooted at the frontend project.

        Returns:
            The configured store, pointed at ``project_path`` when it is a bundled store.
        """
        if self.file_store is None:
            self.file_store = DirectoryFileStore(self.project_path or DEFAULT_PROJECT_PATH)
        return correct_store_root(self.file_store, self.project_path or DEFAULT_PROJECT_PATH)

    def resolve(self) -> "ViteConfig":
        """Run the defaults pass matching :attr:`environment`, once.

        Concurrent callers block until the first pass has finished, so none of
        them observes a partially populated configuration.

        Returns:
            This configuration.
        """
        if self._resolved:
            return self
        with self._lock:
            if not self._resolved:
                if self.is_production:
                    self.set_production_defaults()
                else:
                    self.set_development_defaults()
                self._resolved = True
        return self

    def set_development_defaults(self) -> None:
        """Fill unset fields from the frontend ``package.json``.

        The manifest is read once; later calls keep the detected defaults and
        do nothing.

        Raises:
            ManifestNotFoundError: If ``package.json`` cannot be read.
            ManifestParseError: If ``package.json`` is not a package descriptor.
            NotAViteProjectError: If the project does not depend on Vite.
        """
        if self.dev_defaults is not None:
            return
        if not self.project_path:
            self.project_path = DEFAULT_PROJECT_PATH

        manifest_path = f"{self.project_path.rstrip('/')}/{PACKAGE_JSON}"
        package = read_package_json(self.store(), manifest_path)
        defaults = analyze_package_json(package)
        self.dev_defaults = defaults
        logger.debug("Detected %s frontend (vite %s) at %s", defaults.platform, defaults.vite_version, manifest_path)

        version = self._resolve_vite_version(defaults)

        if not self.platform:
            self.platform = defaults.platform
        if not self.entry_point:
            self.entry_point = defaults.entry_point
        if not self.url_prefix:
            # Vite's default
            self.url_prefix = DEFAULT_DEV_URL_PREFIX
        if not self.dev_server_port:
            self.dev_server_port = DEFAULT_PORT_V2 if version.split(".", 1)[0] == "2" else DEFAULT_PORT_V3
        if not self.dev_server_domain:
            self.dev_server_domain = DEFAULT_DEV_SERVER_DOMAIN

    def set_production_defaults(self) -> None:
        """Fill unset fields for serving a built frontend.

        The production pass trusts the pre-built output and never reads ``package.json``.
        """
        if not self.project_path:
            self.project_path = DEFAULT_PROJECT_PATH
        if not self.assets_path:
            self.assets_path = DEFAULT_ASSETS_PATH
        if not self.url_prefix:
            self.url_prefix = DEFAULT_PROD_URL_PREFIX

    def _resolve_vite_version(self, defaults: "FrameworkProfile") -> str:
        if not self.vite_version:
            self.vite_version = defaults.vite_major_version or DEFAULT_VITE_VERSION
        return self.vite_version
