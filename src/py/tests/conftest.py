from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from litestar.serialization import encode_json

# Environment variables that may affect test behavior - clear before each test
_VITE_ENV_VARS = [
    "VITE_PROJECT_PATH",
    "VITE_ENVIRONMENT",
    "VITE_HTTPS",
    "VITE_DEV_SERVER_DOMAIN",
    "VITE_DEV_SERVER_PORT",
    "VITE_URL_PREFIX",
    "VITE_ASSETS_PATH",
    "VITE_DEBUG",
]

REACT_TS_PACKAGE: dict[str, Any] = {
    "name": "frontend",
    "private": True,
    "version": "0.0.0",
    "type": "module",
    "scripts": {"dev": "vite", "build": "tsc && vite build"},
    "dependencies": {"react": "18.2.0", "react-dom": "18.2.0"},
    "devDependencies": {"vite": "^4.1.0", "typescript": "1.0.0", "@vitejs/plugin-react": "^3.1.0"},
}


@pytest.fixture(autouse=True)
def clean_vite_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear Vite-related environment variables before each test for isolation."""
    for var in _VITE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def write_package_json() -> Callable[[Path, "dict[str, Any]"], Path]:
    """Return a helper writing ``package.json`` into a directory."""

    def _write(directory: Path, payload: "dict[str, Any]") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "package.json"
        path.write_bytes(encode_json(payload))
        return path

    return _write


@pytest.fixture
def frontend_dir(tmp_path: Path, write_package_json: Callable[[Path, "dict[str, Any]"], Path]) -> Path:
    """Create a React + TypeScript Vite project with a built ``dist`` directory.

    Returns:
        The project directory.
    """
    root = tmp_path / "frontend"
    write_package_json(root, REACT_TS_PACKAGE)
    (root / "index.html").write_text("<!DOCTYPE html><html><body><div id='root'></div></body></html>")
    (root / "src" / "components").mkdir(parents=True)
    (root / "src" / "main.tsx").write_text("console.log('dev entry')\n")
    (root / "src" / "components" / "App.tsx").write_text("export default function App() {}\n")
    (root / "src" / "widgets").mkdir()
    (root / "src" / "widgets" / "index.html").write_text("<p>widgets</p>")
    (root / ".env").write_text("SECRET_KEY=hunter2\n")
    (root / ".git").mkdir()
    (root / ".git" / "config").write_text("[core]\n")
    (root / "src" / ".cache").mkdir()
    (root / "src" / ".cache" / "state.js").write_text("cached\n")
    (root / "dist" / "assets").mkdir(parents=True)
    (root / "dist" / "index.html").write_text("<!DOCTYPE html><html><body>built</body></html>")
    (root / "dist" / "assets" / "index-4f2a1c.js").write_text("console.log('built')\n")
    (root / "dist" / "assets" / "index-4f2a1c.css").write_text("body{margin:0}\n")
    return root
