"""Main application entry-point for pruxy."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional

import aiohttp
from aiohttp import web

from .adapters import PrusaLinkClient, create_session
from .collector import SnapshotCollector
from .config import PruxyConfig
from .core import SnapshotSource
from .exposition import render
from .logging import configure_logging
from .proxy import Forwarder

LOGGER = logging.getLogger(__name__)

COLLECTOR_KEY = web.AppKey("collector", SnapshotCollector)
FORWARDER_KEY = web.AppKey("forwarder", Forwarder)


async def handle_metrics(request: web.Request) -> web.Response:
    collector = request.app[COLLECTOR_KEY]
    samples = await collector.collect()
    body, content_type = render(samples, request.headers.get("Accept"))
    # content_type carries parameters, which the content_type= argument rejects
    return web.Response(body=body, headers={"Content-Type": content_type})


async def handle_proxy(request: web.Request) -> web.StreamResponse:
    return await request.app[FORWARDER_KEY].handle(request)


class PruxyApp:
    """Coordinates the HTTP listener and the printer sessions.

    The snapshot source and the forwarding session can be injected for
    testing; by default both are built from the printer configuration.
    """

    def __init__(
        self,
        config: PruxyConfig,
        *,
        source: Optional[SnapshotSource] = None,
        proxy_session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config
        self._source = source
        self._proxy_session = proxy_session
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    def build_application(self) -> web.Application:
        # Forwarded uploads are buffered whole so they can be replayed after
        # the digest challenge; no request size cap.
        app = web.Application(client_max_size=0)
        app.cleanup_ctx.append(self._printer_context)
        app.router.add_get(self._config.server.metrics_path, handle_metrics)
        app.router.add_route("*", "/{tail:.*}", handle_proxy)
        return app

    async def _printer_context(self, app: web.Application) -> AsyncIterator[None]:
        printer = self._config.printer
        source = self._source or PrusaLinkClient(printer)
        proxy_session = self._proxy_session or create_session(
            printer, auto_decompress=False
        )

        app[COLLECTOR_KEY] = SnapshotCollector(
            source, timeout=printer.timeout_seconds
        )
        app[FORWARDER_KEY] = Forwarder(printer.address, proxy_session)
        try:
            yield
        finally:
            if self._source is None:
                await source.aclose()
            if self._proxy_session is None:
                await proxy_session.close()

    async def start(self) -> None:
        server = self._config.server
        self._runner = web.AppRunner(self.build_application())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, server.host, server.port)
        await self._site.start()
        LOGGER.info(
            "Listening on %s (metrics at %s, forwarding to %s)",
            server.bind,
            server.metrics_path,
            self._config.printer.address,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
        self._site = None
        self._runner = None

    async def run(self) -> None:
        await self.start()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            LOGGER.info("pruxy received shutdown signal")
            raise
        finally:
            await self.stop()

    @classmethod
    def serve(cls, config: PruxyConfig) -> None:
        instance = cls(config)
        configure_logging(config.logging)
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("pruxy received shutdown signal")
