import logging
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import anyio
import httpx
import pytest

from litestar_vite_assets.config import ViteConfig
from litestar_vite_assets.fs import MappingFileStore
from litestar_vite_assets.handler import AssetServer, SupportFiles
from litestar_vite_assets.handler._files import guess_content_type
from litestar_vite_assets.handler._server import restore_mount_path

pytestmark = pytest.mark.anyio

NOT_FOUND = "404 page not found\n"

ClientFactory = Callable[[AssetServer], httpx.AsyncClient]


@pytest.fixture
async def make_client() -> AsyncGenerator[ClientFactory, None]:
    clients: list[httpx.AsyncClient] = []

    def _make(server: AssetServer) -> httpx.AsyncClient:
        transport = httpx.ASGITransport(app=server, client=("203.0.113.7", 4242))
        client = httpx.AsyncClient(transport=transport, base_url="http://testserver")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def dev_server(frontend_dir: Path) -> AssetServer:
    return AssetServer(ViteConfig(project_path=str(frontend_dir)))


@pytest.fixture
def prod_server(frontend_dir: Path) -> AssetServer:
    return AssetServer(ViteConfig(project_path=str(frontend_dir), environment="production"))


async def call_asgi(app: Any, path: str, method: str = "GET", raw_path: "bytes | None" = None) -> list[dict[str, Any]]:
    """Drive the app with a hand-built scope; httpx would normalize dot segments away."""
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": raw_path if raw_path is not None else path.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": [],
        "client": ("203.0.113.7", 4242),
        "server": ("testserver", 80),
    }
    messages: list[dict[str, Any]] = []
    response_complete = anyio.Event()
    request_sent = False

    async def receive() -> dict[str, Any]:
        nonlocal request_sent
        if not request_sent:
            request_sent = True
            return {"type": "http.request", "body": b"", "more_body": False}
        # Streaming responses listen for the disconnect until the body is out.
        await response_complete.wait()
        return {"type": "http.disconnect"}

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)
        if message["type"] == "http.response.body" and not message.get("more_body", False):
            response_complete.set()

    await app(scope, receive, send)
    return messages


async def test_development_serves_project_sources(dev_server: AssetServer, make_client: ClientFactory) -> None:
    response = await make_client(dev_server).get("/src/main.tsx")

    assert response.status_code == 200
    assert response.text == "console.log('dev entry')\n"
    assert response.headers["content-type"] == "application/javascript"
    assert "etag" in response.headers
    assert "last-modified" in response.headers


async def test_development_serves_project_index(dev_server: AssetServer, make_client: ClientFactory) -> None:
    response = await make_client(dev_server).get("/")

    assert response.status_code == 200
    assert "<div id='root'>" in response.text
    assert response.headers["content-type"].startswith("text/html")


@pytest.mark.parametrize("path", ["/.env", "/.git/config", "/src/.cache/state.js", "/.git/"])
@pytest.mark.parametrize("environment", ["development", "production"])
async def test_hidden_segments_are_not_found(
    frontend_dir: Path, make_client: ClientFactory, path: str, environment: str
) -> None:
    server = AssetServer(ViteConfig(project_path=str(frontend_dir), environment=environment))

    response = await make_client(server).get(path)

    assert response.status_code == 404
    assert response.text == NOT_FOUND
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert response.headers["x-content-type-options"] == "nosniff"


@pytest.mark.parametrize("path", ["/src/../package.json", "/../frontend/package.json", "/assets/./index-4f2a1c.js"])
async def test_dot_segments_are_not_found(dev_server: AssetServer, prod_server: AssetServer, path: str) -> None:
    for server in (dev_server, prod_server):
        messages = await call_asgi(server, path)

        assert messages[0]["status"] == 404
        assert messages[1]["body"] == NOT_FOUND.encode()


@pytest.mark.parametrize("path", ["/src\\..\\package.json", "/src\\.env", "/C:/Windows/win.ini", "/src/D:main.tsx"])
async def test_windows_path_syntax_is_not_found(dev_server: AssetServer, path: str) -> None:
    messages = await call_asgi(dev_server, path)

    assert messages[0]["status"] == 404
    assert messages[1]["body"] == NOT_FOUND.encode()


async def test_directory_without_index_is_not_listed(dev_server: AssetServer, make_client: ClientFactory) -> None:
    client = make_client(dev_server)

    for path in ("/src/components", "/src/components/", "/src/"):
        response = await client.get(path)
        assert response.status_code == 404
        assert response.text == NOT_FOUND
        assert "App.tsx" not in response.text


async def test_directory_with_index_serves_the_index(dev_server: AssetServer, make_client: ClientFactory) -> None:
    response = await make_client(dev_server).get("/src/widgets")

    assert response.status_code == 200
    assert response.text == "<p>widgets</p>"
    assert response.headers["content-type"].startswith("text/html")


async def test_missing_file_is_not_found(dev_server: AssetServer, make_client: ClientFactory) -> None:
    response = await make_client(dev_server).get("/src/missing.ts")

    assert response.status_code == 404
    assert response.text == NOT_FOUND


@pytest.mark.parametrize("environment", ["development", "production"])
async def test_preamble_is_served_from_bundled_resources(
    frontend_dir: Path, make_client: ClientFactory, environment: str
) -> None:
    assert not list(frontend_dir.rglob("preamble.js"))
    server = AssetServer(ViteConfig(project_path=str(frontend_dir), environment=environment))

    response = await make_client(server).get("/src/nested/preamble.js")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/javascript"
    assert "injectIntoGlobalHook" in response.text


async def test_preamble_can_be_substituted(frontend_dir: Path, make_client: ClientFactory) -> None:
    support_files = SupportFiles(store=MappingFileStore({"react/preamble.js": "// custom preamble"}))
    server = AssetServer(ViteConfig(project_path=str(frontend_dir)), support_files=support_files)

    response = await make_client(server).get("/preamble.js")

    assert response.text == "// custom preamble"
    assert response.headers["content-type"] == "application/javascript"


async def test_unreadable_support_file_is_not_found(
    frontend_dir: Path, make_client: ClientFactory, caplog: pytest.LogCaptureFixture
) -> None:
    support_files = SupportFiles(store=MappingFileStore({"other/file.js": ""}))
    server = AssetServer(ViteConfig(project_path=str(frontend_dir)), support_files=support_files)

    with caplog.at_level(logging.ERROR, logger="litestar_vite_assets"):
        response = await make_client(server).get("/src/preamble.js")

    assert response.status_code == 404
    assert response.text == NOT_FOUND
    assert "Could not load support file 'preamble.js'" in caplog.text


async def test_production_serves_build_output(prod_server: AssetServer, make_client: ClientFactory) -> None:
    client = make_client(prod_server)

    script = await client.get("/assets/index-4f2a1c.js")
    stylesheet = await client.get("/assets/index-4f2a1c.css")
    index = await client.get("/")

    assert script.status_code == 200
    assert script.text == "console.log('built')\n"
    assert script.headers["content-type"] == "application/javascript"
    assert stylesheet.headers["content-type"] == "text/css"
    assert index.text.endswith("built</body></html>")


async def test_production_does_not_serve_sources(prod_server: AssetServer, make_client: ClientFactory) -> None:
    client = make_client(prod_server)

    assert (await client.get("/src/main.tsx")).status_code == 404
    assert (await client.get("/package.json")).status_code == 404
    # dist/assets has no index.html
    assert (await client.get("/assets/")).status_code == 404


async def test_production_with_invalid_assets_path(
    frontend_dir: Path, make_client: ClientFactory, caplog: pytest.LogCaptureFixture
) -> None:
    config = ViteConfig(project_path=str(frontend_dir), environment="production", assets_path="../elsewhere")

    with caplog.at_level(logging.WARNING, logger="litestar_vite_assets"):
        server = AssetServer(config)
    response = await make_client(server).get("/assets/index-4f2a1c.js")

    assert response.status_code == 404
    assert "Cannot serve assets from '../elsewhere'" in caplog.text


async def test_path_outside_strip_prefix_is_not_found(frontend_dir: Path) -> None:
    server = AssetServer(ViteConfig(project_path=str(frontend_dir)), strip_prefix="/static/")

    outside = await call_asgi(server, "/src/main.tsx")
    inside = await call_asgi(server, "/static/src/main.tsx")

    assert outside[0]["status"] == 404
    assert inside[0]["status"] == 200
    assert inside[1]["body"] == b"console.log('dev entry')\n"


@pytest.mark.parametrize(
    ("mount_path", "path", "expected"),
    [
        ("/src", "/main.tsx", "/src/main.tsx"),
        ("/src", "/", "/src/"),
        ("/src/", "/components/App.tsx", "/src/components/App.tsx"),
        ("/src", "foo/main.tsx", "/srcfoo/main.tsx"),
        ("/", "src/main.tsx", "/src/main.tsx"),
        ("/", "/", "/"),
    ],
)
def test_restore_mount_path(mount_path: str, path: str, expected: str) -> None:
    assert restore_mount_path(mount_path, path) == expected


async def test_mounted_server_restores_the_prefix(frontend_dir: Path) -> None:
    server = AssetServer(ViteConfig(project_path=str(frontend_dir)), mount_path="/src")

    source = await call_asgi(server, "/main.tsx")
    mount_root = await call_asgi(server, "/")

    assert source[0]["status"] == 200
    assert source[1]["body"] == b"console.log('dev entry')\n"
    # "/src/" has no index.html
    assert mount_root[0]["status"] == 404


async def test_production_not_found_page(frontend_dir: Path, make_client: ClientFactory) -> None:
    (frontend_dir / "dist" / "404.html").write_text("<h1>lost</h1>")
    server = AssetServer(ViteConfig(project_path=str(frontend_dir), environment="production"))

    response = await make_client(server).get("/assets/index-deadbeef.js")

    assert response.status_code == 404
    assert response.text == "<h1>lost</h1>"
    assert response.headers["content-type"].startswith("text/html")


async def test_head_sends_headers_only(dev_server: AssetServer, make_client: ClientFactory) -> None:
    response = await make_client(dev_server).head("/src/main.tsx")

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["content-length"] == str(len("console.log('dev entry')\n"))


async def test_other_methods_are_not_allowed(dev_server: AssetServer, make_client: ClientFactory) -> None:
    response = await make_client(dev_server).post("/src/main.tsx")

    assert response.status_code == 405
    assert response.headers["allow"] == "GET, HEAD"


async def test_access_log_line(
    dev_server: AssetServer, make_client: ClientFactory, caplog: pytest.LogCaptureFixture
) -> None:
    client = make_client(dev_server)

    with caplog.at_level(logging.INFO, logger="litestar_vite_assets.access"):
        await client.get("/src/main.tsx")
        await client.get("/src/missing.ts")

    lines = [record.getMessage() for record in caplog.records if record.name == "litestar_vite_assets.access"]
    assert lines == [
        "203.0.113.7:4242 - HTTP/1.1 GET /src/main.tsx (200)",
        "203.0.113.7:4242 - HTTP/1.1 GET /src/missing.ts (404)",
    ]


async def test_access_log_strips_line_breaks(dev_server: AssetServer, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="litestar_vite_assets.access"):
        await call_asgi(dev_server, "/src/x.js", raw_path=b"/src/x.js\r\n203.0.113.9:1 - HTTP/1.1 GET /forged (200)")

    (record,) = [record for record in caplog.records if record.name == "litestar_vite_assets.access"]
    message = record.getMessage()
    assert "\r" not in message
    assert "\n" not in message
    assert message.endswith("(404)")


async def test_debug_listing_does_not_alter_response(
    frontend_dir: Path, make_client: ClientFactory, caplog: pytest.LogCaptureFixture
) -> None:
    server = AssetServer(ViteConfig(project_path=str(frontend_dir), debug=True))

    with caplog.at_level(logging.DEBUG, logger="litestar_vite_assets"):
        response = await make_client(server).get("/src/main.tsx")

    assert response.status_code == 200
    assert response.text == "console.log('dev entry')\n"
    assert "Entered asset store for /src/main.tsx" in caplog.text
    assert "package.json" in caplog.text


async def test_debug_listing_failure_does_not_alter_response(
    tmp_path: Path, make_client: ClientFactory, caplog: pytest.LogCaptureFixture
) -> None:
    config = ViteConfig(project_path=str(tmp_path / "missing"), environment="production", debug=True)
    server = AssetServer(config)

    with caplog.at_level(logging.DEBUG, logger="litestar_vite_assets"):
        response = await make_client(server).get("/assets/app.js")

    assert response.status_code == 404
    assert response.text == NOT_FOUND
    assert "Could not read the asset directory" in caplog.text


async def test_websocket_scope_is_closed(dev_server: AssetServer) -> None:
    messages: list[dict[str, Any]] = []

    async def receive() -> dict[str, Any]:
        return {"type": "websocket.connect"}

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    await dev_server({"type": "websocket", "path": "/src/main.tsx"}, receive, send)  # type: ignore[arg-type]

    assert messages == [{"type": "websocket.close", "code": 1000, "reason": ""}]


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("src/main.tsx", "application/javascript"),
        ("assets/index.mjs", "application/javascript"),
        ("assets/index.CSS", "text/css"),
        ("favicon.ico", "image/x-icon"),
        ("data.unknown-extension", "application/octet-stream"),
    ],
)
def test_guess_content_type(name: str, expected: str) -> None:
    assert guess_content_type(name) == expected
