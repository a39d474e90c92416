from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from aiohttp import web

from pruxy.config import (
    LoggingConfig,
    PrinterConfig,
    PruxyConfig,
    ServerConfig,
)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class FakePrinter:
    """Records every request and answers from per-path handlers."""

    def __init__(self) -> None:
        self.port = 0
        self.requests: list[dict[str, Any]] = []
        self._handlers: dict[str, Handler] = {}

    def make_url(self, path: str = "/") -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"http://127.0.0.1:{self.port}{path}"

    def route(self, path: str, handler: Handler) -> None:
        self._handlers[path] = handler

    def json(self, path: str, payload: Any, *, status: int = 200) -> None:
        async def _handler(request: web.Request) -> web.StreamResponse:
            return web.json_response(payload, status=status)

        self.route(path, _handler)

    def status(self, path: str, status: int, text: Optional[str] = None) -> None:
        async def _handler(request: web.Request) -> web.StreamResponse:
            return web.Response(status=status, text=text)

        self.route(path, _handler)

    async def dispatch(self, request: web.Request) -> web.StreamResponse:
        body = await request.read()
        self.requests.append(
            {
                "method": request.method,
                "path": request.path,
                "query": request.query_string,
                "headers": dict(request.headers),
                "body": body,
            }
        )
        handler = self._handlers.get(request.path, _echo)
        return await handler(request)


async def _echo(request: web.Request) -> web.StreamResponse:
    body = await request.read()
    return web.json_response(
        {
            "method": request.method,
            "path": request.path,
            "query": request.query_string,
            "body": body.decode("utf-8"),
        },
        status=200,
        headers={"X-Printer": "fake"},
    )


@pytest_asyncio.fixture
async def printer(unused_tcp_port_factory):
    fake = FakePrinter()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.dispatch)

    runner = web.AppRunner(app)
    await runner.setup()

    fake.port = unused_tcp_port_factory()
    site = web.TCPSite(runner, "127.0.0.1", fake.port)
    await site.start()

    try:
        yield fake
    finally:
        await runner.cleanup()


def build_config(
    address: str,
    *,
    bind: str = "127.0.0.1:0",
    timeout_seconds: float = 2.0,
    metrics_path: str = "/metrics",
) -> PruxyConfig:
    return PruxyConfig(
        printer=PrinterConfig(
            address=address,
            username="maker",
            password="secret",
            timeout_seconds=timeout_seconds,
        ),
        server=ServerConfig(bind=bind, metrics_path=metrics_path),
        logging=LoggingConfig(),
        path=Path("pruxy.cfg"),
    )


@pytest.fixture
def make_config() -> Callable[..., PruxyConfig]:
    return build_config


@pytest.fixture
def printer_config(printer: FakePrinter) -> PrinterConfig:
    return build_config(printer.make_url("/")).printer
