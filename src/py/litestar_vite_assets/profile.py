"""Framework detection for Vite projects.

:func:`analyze_package_json` inspects a :class:`~litestar_vite_assets.manifest.PackageDescriptor`
and returns exactly one framework profile. Candidates are checked in a fixed
priority order (``vue``, ``react``, ``preact``, ``svelte``, ``lit``) and the
first declared one wins; projects declaring none of them are vanilla.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, cast

from litestar_vite_assets.exceptions import NotAViteProjectError

if TYPE_CHECKING:
    from litestar_vite_assets.manifest import PackageDescriptor

__all__ = (
    "SUPPORTED_FRAMEWORKS",
    "FrameworkProfile",
    "LitProfile",
    "PreactProfile",
    "ReactProfile",
    "SvelteProfile",
    "VanillaProfile",
    "VueProfile",
    "analyze_package_json",
    "default_entry_point",
    "parse_semver",
)

VITE_PACKAGE = "vite"
TYPESCRIPT_PACKAGE = "typescript"
SUPPORTED_FRAMEWORKS = ("vue", "react", "preact", "svelte", "lit")

_SEMVER = re.compile(r"\^*((\d+)\.\d+\.\d+)", re.ASCII)


def parse_semver(version: str) -> tuple[str, str]:
    """Split a dependency version into its major and full parts.

    Accepts ``major.minor.patch`` with optional leading carets. Anything else
    (``~4.1.0``, ``latest``, ``4.x``) yields empty strings.

    Args:
        version: The version range from ``package.json``.

    Returns:
        A ``(major, full)`` tuple, e.g. ``("4", "4.1.0")`` for ``"^4.1.0"``.
    """
    match = _SEMVER.fullmatch(version)
    if match is None:
        return "", ""
    return match.group(2), match.group(1)


def default_entry_point(platform: str, has_typescript: bool) -> str:
    """Return the conventional Vite entry point for a platform.

    Args:
        platform: A framework name or ``"vanilla"``.
        has_typescript: Whether the project uses TypeScript.

    Returns:
        The entry point path relative to the project root, or an empty string for Lit.
    """
    match platform:
        case "vue" | "svelte":
            return "src/main.ts" if has_typescript else "src/main.js"
        case "react" | "preact":
            return "src/main.tsx" if has_typescript else "src/main.jsx"
        case "lit":
            # Lit setups vary too much to guess an entry point.
            return ""
        case _:
            # create-vite's vanilla template keeps JS at the project root and TS under src/.
            return "src/main.ts" if has_typescript else "main.js"


@dataclass(frozen=True)
class _BaseProfile:
    platform: ClassVar[str]

    vite_version: str = ""
    """Full Vite version, e.g. ``4.1.0``."""
    vite_major_version: str = ""
    has_typescript: bool = False
    entry_point: str = ""

    @property
    def is_vanilla(self) -> bool:
        return False

    def as_dict(self) -> dict[str, Any]:
        """Render the profile for template and tag-generation consumers.

        Returns:
            The profile as a flat dictionary; empty optional values are omitted.
        """
        data: dict[str, Any] = {
            "vite_version": self.vite_version,
            "vite_major_version": self.vite_major_version,
            "package_type": self.platform,
            "entry_point": self.entry_point,
            "has_ts": self.has_typescript,
        }
        if self.is_vanilla:
            data["is_vanilla"] = True
        return data


@dataclass(frozen=True)
class _FrameworkBase(_BaseProfile):
    version: str = ""
    """Full framework version, e.g. ``18.2.0``."""
    major_version: str = ""

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        if self.major_version:
            data["major_version"] = self.major_version
        if self.version:
            data[f"{self.platform}_version"] = self.version
        return data


@dataclass(frozen=True)
class VueProfile(_FrameworkBase):
    """A Vue project."""

    platform: ClassVar[str] = "vue"

    @property
    def vue_version(self) -> str:
        return self.version


@dataclass(frozen=True)
class ReactProfile(_FrameworkBase):
    """A React project."""

    platform: ClassVar[str] = "react"

    @property
    def react_version(self) -> str:
        return self.version


@dataclass(frozen=True)
class PreactProfile(_FrameworkBase):
    """A Preact project."""

    platform: ClassVar[str] = "preact"

    @property
    def preact_version(self) -> str:
        return self.version


@dataclass(frozen=True)
class SvelteProfile(_FrameworkBase):
    """A Svelte project (``svelte`` is declared in devDependencies)."""

    platform: ClassVar[str] = "svelte"

    @property
    def svelte_version(self) -> str:
        return self.version


@dataclass(frozen=True)
class LitProfile(_FrameworkBase):
    """A Lit project. No entry point is inferred."""

    platform: ClassVar[str] = "lit"

    @property
    def lit_version(self) -> str:
        return self.version


@dataclass(frozen=True)
class VanillaProfile(_BaseProfile):
    """A Vite project without a recognised framework."""

    platform: ClassVar[str] = "vanilla"

    @property
    def is_vanilla(self) -> bool:
        return True


FrameworkProfile = VueProfile | ReactProfile | PreactProfile | SvelteProfile | LitProfile | VanillaProfile

_FRAMEWORK_PROFILES: dict[str, type[_FrameworkBase]] = {
    "vue": VueProfile,
    "react": ReactProfile,
    "preact": PreactProfile,
    "svelte": SvelteProfile,
    "lit": LitProfile,
}


def analyze_package_json(package: "PackageDescriptor") -> FrameworkProfile:
    """Infer the framework profile of a Vite project.

    Args:
        package: The parsed ``package.json``.

    Raises:
        NotAViteProjectError: If ``vite`` is not declared in devDependencies.

    Returns:
        The detected framework profile.
    """
    vite_spec = package.dev_dependencies.get(VITE_PACKAGE)
    if vite_spec is None:
        raise NotAViteProjectError(package.name)

    vite_major, vite_full = parse_semver(vite_spec)
    has_typescript = TYPESCRIPT_PACKAGE in package.dev_dependencies

    for name in SUPPORTED_FRAMEWORKS:
        # svelte puts nothing in dependencies; it is only ever a dev dependency.
        declared = package.dev_dependencies if name == "svelte" else package.dependencies
        spec = declared.get(name)
        if spec is None:
            continue
        major, full = parse_semver(spec)
        profile = _FRAMEWORK_PROFILES[name](
            vite_version=vite_full,
            vite_major_version=vite_major,
            has_typescript=has_typescript,
            entry_point=default_entry_point(name, has_typescript),
            version=full,
            major_version=major,
        )
        return cast("FrameworkProfile", profile)

    return VanillaProfile(
        vite_version=vite_full,
        vite_major_version=vite_major,
        has_typescript=has_typescript,
        entry_point=default_entry_point(VanillaProfile.platform, has_typescript),
    )
