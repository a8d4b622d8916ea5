"""HTTP page fetcher."""

import asyncio
import logging
import socket
import time

import httpx

from config import Settings
from errors import FetchError, FetchErrorKind, ValidationError
from fetcher.page import FetchedPage
from fetcher.screenshot import ScreenshotCapturer

logger = logging.getLogger(__name__)

# Resolver messages seen when the cause chain does not keep the gaierror
_DNS_ERROR_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)


class PageFetcher:
    """
    Fetches a page's HTML (and optionally a screenshot).

    Every failure surfaces as a FetchError with a distinct kind. The
    fetcher never retries; that is up to the caller.
    """

    def __init__(
        self,
        settings: Settings,
        screenshotter: ScreenshotCapturer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.screenshotter = screenshotter
        self.transport = transport

    async def fetch(self, url: str) -> FetchedPage:
        """
        Fetch the page at `url`.

        Args:
            url: Absolute http(s) URL, already validated

        Returns:
            FetchedPage snapshot

        Raises:
            FetchError: On DNS, connection, timeout, status or size failures
            ValidationError: If httpx cannot build a request for `url`
        """
        started = time.perf_counter()
        try:
            final_url, status_code, html = await asyncio.wait_for(
                self._get(url), timeout=self.settings.fetch_timeout
            )
        except asyncio.TimeoutError:
            raise FetchError(
                FetchErrorKind.TIMEOUT,
                f"Timed out after {self.settings.fetch_timeout}s fetching {url}",
            )

        load_time = round(time.perf_counter() - started, 3)
        screenshot = await self._capture_screenshot(final_url)

        logger.info(f"Fetched {url} ({status_code}, {len(html)} chars in {load_time}s)")
        return FetchedPage(
            url=url,
            final_url=final_url,
            status_code=status_code,
            html=html,
            screenshot=screenshot,
            load_time=load_time,
        )

    async def _get(self, url: str) -> tuple[str, int, str]:
        """Stream the response body, enforcing the size limit."""
        limit = self.settings.max_response_bytes

        async with httpx.AsyncClient(
            timeout=self.settings.fetch_timeout,
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            headers={"User-Agent": self.settings.user_agent},
            transport=self.transport,
        ) as client:
            try:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise FetchError(
                            FetchErrorKind.HTTP_STATUS,
                            f"{url} returned HTTP {response.status_code}",
                            status_code=response.status_code,
                        )

                    declared = response.headers.get("content-length")
                    if declared and declared.isdigit() and int(declared) > limit:
                        raise FetchError(
                            FetchErrorKind.TOO_LARGE,
                            f"{url} declares {declared} bytes (limit {limit})",
                        )

                    body = bytearray()
                    async for chunk in response.aiter_bytes():
                        body.extend(chunk)
                        if len(body) > limit:
                            raise FetchError(
                                FetchErrorKind.TOO_LARGE,
                                f"{url} exceeded {limit} bytes",
                            )

                    encoding = response.encoding or "utf-8"
                    return str(response.url), response.status_code, body.decode(encoding, errors="replace")

            except httpx.TooManyRedirects:
                raise FetchError(
                    FetchErrorKind.TOO_MANY_REDIRECTS,
                    f"{url} redirected more than {self.settings.max_redirects} times",
                )
            except httpx.TimeoutException:
                raise FetchError(FetchErrorKind.TIMEOUT, f"Timeout fetching {url}")
            except httpx.ConnectError as e:
                if _is_dns_failure(e):
                    raise FetchError(FetchErrorKind.DNS, f"Could not resolve host for {url}")
                raise FetchError(FetchErrorKind.CONNECT, f"Could not connect to {url}: {e}")
            except httpx.TransportError as e:
                raise FetchError(FetchErrorKind.CONNECT, f"Transport error fetching {url}: {e}")
            except (httpx.InvalidURL, UnicodeError) as e:
                raise ValidationError(f"Cannot request {url!r}: {e}")

    async def _capture_screenshot(self, url: str) -> str | None:
        """Screenshots are optional; a failed capture never fails the fetch."""
        if self.screenshotter is None:
            return None

        try:
            return await asyncio.wait_for(
                self.screenshotter.capture(url),
                timeout=self.settings.screenshot_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Screenshot of {url} timed out")
        except Exception as e:
            logger.warning(f"Screenshot of {url} failed: {e}")
        return None


def _is_dns_failure(exc: BaseException) -> bool:
    """Walk the exception chain looking for a resolver failure."""
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        if any(marker in str(current).lower() for marker in _DNS_ERROR_MARKERS):
            return True
        current = current.__cause__ or current.__context__
    return False
