"""PrusaLink adapter providing authenticated HTTP helpers."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

import aiohttp

from .. import constants
from ..config import PrinterConfig
from ..core import JobInfo, PayloadError, PrinterInfo, PrinterStatus, UpstreamError

LOGGER = logging.getLogger(__name__)

_NO_CONTENT = object()


def create_session(
    config: PrinterConfig, *, auto_decompress: bool = True
) -> aiohttp.ClientSession:
    """Build a pooled client session that signs every request with Digest auth.

    Timeouts are applied per call, so the session itself has none.
    """

    auth = aiohttp.DigestAuthMiddleware(config.username, config.password)
    return aiohttp.ClientSession(
        middlewares=(auth,),
        timeout=aiohttp.ClientTimeout(total=None),
        auto_decompress=auto_decompress,
        cookie_jar=aiohttp.DummyCookieJar(),
    )


def join_url(base: str, path: str, query: str = "") -> str:
    """Append ``path`` to the path of ``base``, keeping a single separator."""

    parsed = urlsplit(base)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"invalid upstream address: {base!r}")

    joined = parsed.path.rstrip("/") + "/" + path.lstrip("/")
    return urlunsplit((parsed.scheme, parsed.netloc, joined, query, ""))


class PrusaLinkClient:
    """Non-blocking reader for the PrusaLink v1 JSON API."""

    def __init__(
        self,
        config: PrinterConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config
        self._base_url = config.address
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def fetch_info(
        self, timeout: float = constants.DEFAULT_TIMEOUT_SECONDS
    ) -> PrinterInfo:
        payload = await self._get_json(constants.INFO_PATH, timeout)
        return PrinterInfo.from_payload(payload)

    async def fetch_status(
        self, timeout: float = constants.DEFAULT_TIMEOUT_SECONDS
    ) -> PrinterStatus:
        payload = await self._get_json(constants.STATUS_PATH, timeout)
        return PrinterStatus.from_payload(payload)

    async def fetch_job(
        self, timeout: float = constants.DEFAULT_TIMEOUT_SECONDS
    ) -> Optional[JobInfo]:
        """Fetch the active job.

        Returns:
            The decoded job, or None when the printer answers 204 No Content,
            which PrusaLink uses to signal that no job is running.

        Raises:
            asyncio.TimeoutError: If the request exceeds timeout.
            UpstreamError: If the printer answers with any other non-200 status.
            PayloadError: If the body is not a valid job document.
        """

        response = await self._get_json(
            constants.JOB_PATH, timeout, allow_no_content=True
        )
        if response is _NO_CONTENT:
            return None
        return JobInfo.from_payload(response)

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = create_session(self.config)
            self._owns_session = True
        return self._session

    async def _get_json(
        self, path: str, timeout: float, *, allow_no_content: bool = False
    ) -> Any:
        session = await self._ensure_session()
        url = join_url(self._base_url, path)

        try:
            async with asyncio.timeout(timeout):
                async with session.get(url) as response:
                    if allow_no_content and response.status == 204:
                        return _NO_CONTENT
                    if response.status != 200:
                        raise UpstreamError(
                            f"status code: {response.status}", status=response.status
                        )
                    body = await response.read()
        except asyncio.TimeoutError:
            LOGGER.debug("PrusaLink request timed out after %.1fs (url=%s)", timeout, url)
            raise

        try:
            return json.loads(body)
        except ValueError as exc:
            LOGGER.debug("Undecodable PrusaLink response (url=%s): %s", url, exc)
            raise PayloadError(f"{path}: invalid JSON") from exc

