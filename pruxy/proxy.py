"""Relay arbitrary requests to the printer with injected credentials."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

import aiohttp
from aiohttp import web
from multidict import CIMultiDict

from .adapters import join_url

LOGGER = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

# The session computes these itself or signs the request with its own credentials.
_INBOUND_DROPPED = HOP_BY_HOP_HEADERS | {"host", "content-length", "authorization"}


def _filter_headers(
    headers: Mapping[str, str], dropped: frozenset[str]
) -> CIMultiDict[str]:
    filtered: CIMultiDict[str] = CIMultiDict()
    for name, value in headers.items():
        if name.lower() not in dropped:
            filtered.add(name, value)
    return filtered


class Forwarder:
    """Stateless request relay towards a single upstream base address."""

    def __init__(self, address: str, session: aiohttp.ClientSession) -> None:
        self._address = address
        self._session = session

    async def handle(self, request: web.Request) -> web.StreamResponse:
        try:
            url = join_url(
                self._address, request.rel_url.raw_path, request.rel_url.raw_query_string
            )
        except ValueError as exc:
            return _error_response(exc)

        try:
            body = await request.read()
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as exc:
            return _error_response(exc)

        headers = _filter_headers(request.headers, _INBOUND_DROPPED)

        try:
            async with self._session.request(
                request.method,
                url,
                headers=headers,
                data=body or None,
                allow_redirects=False,
            ) as upstream:
                response = web.StreamResponse(
                    status=upstream.status, reason=upstream.reason
                )
                response.headers.extend(
                    _filter_headers(upstream.headers, HOP_BY_HOP_HEADERS)
                )
                await response.prepare(request)
                try:
                    async for chunk in upstream.content.iter_chunked(CHUNK_SIZE):
                        await response.write(chunk)
                    await response.write_eof()
                except (aiohttp.ClientError, ConnectionError, asyncio.TimeoutError) as exc:
                    # Status line already sent; abort the connection.
                    LOGGER.warning(
                        "Relaying %s %s interrupted: %s", request.method, url, exc
                    )
                    if request.transport is not None:
                        request.transport.close()
                return response
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            LOGGER.warning("Forwarding %s %s failed: %s", request.method, url, exc)
            return _error_response(exc)


def _error_response(exc: BaseException) -> web.Response:
    message = str(exc) or type(exc).__name__
    return web.Response(status=500, text=message + "\n")
