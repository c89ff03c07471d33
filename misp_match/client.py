"""MISP restSearch client."""

import asyncio
import json
import logging

import aiohttp
from yarl import URL

from misp_match.config import MatchConfig
from misp_match.errors import RequestBuildError, ResponseReadError, TransportError

logger = logging.getLogger("misp_match.client")


def build_search_query(term: str, return_format: str) -> dict[str, str]:
    """Build the restSearch request body for a free-text search."""
    return {"searchall": term, "returnFormat": return_format}


class MISPSearchClient:
    """Issues a single free-text search against a MISP instance."""

    def __init__(self, config: MatchConfig) -> None:
        self._url = config.url
        self._content_type = config.content_type
        self._authorization = config.authorization
        self._return_format = config.return_format
        self._verify_ssl = config.verify_ssl
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        self._session: aiohttp.ClientSession | None = None

    def _check_url(self) -> URL:
        try:
            url = URL(self._url)
        except (TypeError, ValueError) as e:
            raise RequestBuildError(f"invalid MISP url {self._url!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise RequestBuildError(f"invalid MISP url {self._url!r}")
        return url

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            # TLS policy is scoped to this client's connector only
            connector = aiohttp.TCPConnector(ssl=self._verify_ssl)
            if not self._verify_ssl:
                logger.debug("TLS certificate verification disabled for MISP client")
            self._session = aiohttp.ClientSession(
                connector=connector, timeout=self._timeout
            )
        return self._session

    async def search(self, term: str) -> bytes:
        """
        Search MISP for the given term.

        Makes exactly one attempt. The body is returned unparsed.

        Args:
            term: Free-text search value (e.g. a file name)

        Returns:
            Raw response body

        Raises:
            RequestBuildError: If the request cannot be constructed
            TransportError: On connection, TLS or timeout failure
            ResponseReadError: If the response body cannot be read
        """
        url = self._check_url()
        payload = json.dumps(build_search_query(term, self._return_format)).encode()
        headers = {
            "Content-Type": self._content_type,
            "Authorization": self._authorization,
        }

        session = await self._get_session()
        try:
            async with session.post(url, data=payload, headers=headers) as resp:
                if resp.status >= 400:
                    logger.warning(f"MISP search returned HTTP {resp.status}")
                try:
                    body = await resp.read()
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    raise ResponseReadError(f"error reading MISP response: {e}") from e
        except aiohttp.InvalidURL as e:
            raise RequestBuildError(f"invalid MISP url {self._url!r}: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"MISP request failed: {e!r}") from e

        logger.debug(f"MISP search for {term!r} returned {len(body)} bytes")
        return body

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
