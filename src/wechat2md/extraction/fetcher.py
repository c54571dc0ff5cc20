# ABOUTME: Single-document HTTP GET with anti-block headers, timeout and redirect limits
# ABOUTME: Classifies httpx transport failures so only timeouts, resets, DNS and aborted reads are retried

import asyncio
import socket

import httpx

from wechat2md.config import Config
from wechat2md.errors import NetworkError, NetworkErrorKind
from wechat2md.extraction.user_agents import UserAgentRotator
from wechat2md.utils.logging import get_logger
from wechat2md.utils.retry import RetryState, SleepFunc, call_with_retry

DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "temporary failure in name resolution",
    "no address associated",
    "name resolution",
)


def _cause_chain(error: BaseException):
    seen = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_transport_error(error: Exception, url: str | None = None) -> NetworkError:
    """Map an httpx (or socket) exception onto a NetworkError kind."""
    message = str(error) or type(error).__name__
    lowered = message.lower()

    kind = NetworkErrorKind.OTHER
    if isinstance(error, httpx.TimeoutException):
        kind = NetworkErrorKind.TIMEOUT
    elif isinstance(error, httpx.TooManyRedirects):
        kind = NetworkErrorKind.OTHER
    else:
        for link in _cause_chain(error):
            if isinstance(link, socket.gaierror):
                kind = NetworkErrorKind.DNS_FAILURE
                break
            if isinstance(link, ConnectionResetError):
                kind = NetworkErrorKind.CONNECTION_RESET
                break
            if isinstance(link, (ConnectionAbortedError, BrokenPipeError)):
                kind = NetworkErrorKind.CONNECTION_ABORTED
                break
            if isinstance(link, TimeoutError):
                kind = NetworkErrorKind.TIMEOUT
                break
        else:
            if any(marker in lowered for marker in DNS_FAILURE_MARKERS):
                kind = NetworkErrorKind.DNS_FAILURE
            elif "reset" in lowered:
                kind = NetworkErrorKind.CONNECTION_RESET
            elif isinstance(error, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)):
                # Peer dropped the connection mid-stream
                kind = NetworkErrorKind.CONNECTION_ABORTED

    return NetworkError(kind, f"{kind.value}: {message}", url=url, cause=error)


class DocumentFetcher:
    """Fetch raw HTML documents from the platform."""

    def __init__(
        self,
        config: Config,
        client: httpx.AsyncClient | None = None,
        rotator: UserAgentRotator | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.config = config
        self.rotator = rotator or UserAgentRotator(config.user_agents)
        # TLS verification follows config.verify_tls, off by default for the platform's certificate quirks
        self.http_client = client or httpx.AsyncClient(  # Allow for dependency injection
            timeout=httpx.Timeout(config.request_timeout),
            follow_redirects=True,
            max_redirects=config.max_redirects,
            verify=config.verify_tls,
        )
        self._sleep = sleep
        self.logger = get_logger(__name__)

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> str:
        """Perform one GET of ``url``.

        Raises:
            NetworkError: On transport failure, or with kind ``http_status`` for 4xx/5xx responses
        """
        request_headers = headers or self.rotator.headers()

        try:
            response = await self.http_client.get(url, headers=request_headers, follow_redirects=True)
        except httpx.HTTPError as e:
            raise classify_transport_error(e, url) from e
        except OSError as e:
            raise classify_transport_error(e, url) from e

        if response.status_code >= 400:
            self.logger.warning("Document request returned error status", url=url, status_code=response.status_code)
            raise NetworkError(
                NetworkErrorKind.HTTP_STATUS,
                f"HTTP {response.status_code} for {url}",
                url=url,
                status_code=response.status_code,
            )

        self.logger.debug(
            "Fetched document",
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response.text

    async def fetch_with_retry(self, url: str, state: RetryState | None = None) -> str:
        """Fetch ``url``, retrying retryable transport errors with linear backoff."""
        return await call_with_retry(
            self.fetch,
            url,
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            sleep=self._sleep,
            state=state,
        )

    async def close(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> "DocumentFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
