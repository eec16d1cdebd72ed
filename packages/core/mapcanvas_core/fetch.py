"""Default HTTP fetch collaborator for image and GIF URLs."""

from __future__ import annotations

import logging
import urllib.error
import urllib.request

from mapcanvas_renderer.errors import FetchError

from .config import FetchConfig

logger = logging.getLogger("mapcanvas.fetch")

_ALLOWED_SCHEMES = ("http", "https")


class HttpFetcher:
    """Single-shot GET with a browser User-Agent. Some image hosts reject urllib's default one."""

    def __init__(self, config: FetchConfig | None = None) -> None:
        self.config = config or FetchConfig()

    def __call__(self, url: str) -> bytes:
        return self.fetch(url)

    def fetch(self, url: str) -> bytes:
        scheme = url.split(":", 1)[0].lower() if ":" in url else ""
        if scheme not in _ALLOWED_SCHEMES:
            raise FetchError(f"Unsupported URL scheme: {url}")

        req = urllib.request.Request(url, headers={"User-Agent": self.config.user_agent})
        limit = self.config.max_bytes
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout_s) as resp:
                data = resp.read(limit + 1)
        except urllib.error.HTTPError as exc:
            logger.warning("fetch failed url=%s status=%s", url, exc.code, extra={"event": "fetch_http_error"})
            raise FetchError(f"HTTP {exc.code} fetching {url}") from exc
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.warning("fetch failed url=%s error=%s", url, exc, extra={"event": "fetch_error"})
            raise FetchError(f"Could not fetch {url}: {exc}") from exc

        if len(data) > limit:
            raise FetchError(f"Response from {url} exceeds {limit} bytes")
        logger.info("fetched url=%s bytes=%d", url, len(data), extra={"event": "fetch_ok"})
        return data
