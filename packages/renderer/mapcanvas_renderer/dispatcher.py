"""Dispatch a content request to its decoder and wrap the result in a renderer."""

from __future__ import annotations

import logging
from typing import Hashable, Iterable

from .errors import CanvasError, FetchError, LayoutError, UnsupportedKind
from .gif import decode_gif
from .image import Fetch, decode_image, decode_image_bytes
from .models import AnimationSpec, ContentKind, ContentRequest, RenderOptions
from .renderer import MapRenderer
from .text import decode_animated_text, decode_text

logger = logging.getLogger("mapcanvas.dispatch")


class Dispatcher:
    """Builds renderers from content requests.

    Holds no per-request state; one instance may serve any number of requests.
    Decode and fetch happen here, before a renderer exists, so renderers never
    block on I/O.
    """

    def __init__(self, options: RenderOptions | None = None, fetch: Fetch | None = None) -> None:
        self.options = options or RenderOptions()
        self._fetch = fetch

    def _fetch_bytes(self, url: str) -> bytes:
        if self._fetch is None:
            raise FetchError(f"No fetch collaborator configured for {url}")
        try:
            return self._fetch(url)
        except FetchError:
            raise
        except OSError as exc:
            raise FetchError(f"Could not fetch {url}: {exc}") from exc

    def _decode(self, kind: ContentKind, payload: bytes | str) -> AnimationSpec:
        opts = self.options
        if kind is ContentKind.IMAGE:
            if isinstance(payload, str):
                canvas = decode_image(payload, self._fetch_bytes, opts.width, opts.height)
            else:
                canvas = decode_image_bytes(payload, opts.width, opts.height)
            return AnimationSpec.still(canvas)
        if kind is ContentKind.TEXT:
            return AnimationSpec.still(decode_text(_as_text(payload), opts.text, opts.width, opts.height))
        if kind is ContentKind.ANIMATED_TEXT:
            return decode_animated_text(_as_text(payload), opts.animated_text, opts.text, opts.width, opts.height)
        if kind is ContentKind.GIF:
            data = self._fetch_bytes(payload) if isinstance(payload, str) else payload
            return decode_gif(data, opts.width, opts.height, opts.gif)
        raise UnsupportedKind(f"Unsupported content kind: {kind!r}")

    def dispatch(
        self,
        kind: ContentKind,
        payload: bytes | str,
        consumers: Iterable[Hashable] = (),
    ) -> MapRenderer:
        consumers = frozenset(consumers)
        try:
            spec = self._decode(kind, payload)
        except CanvasError as exc:
            logger.warning(
                "dispatch failed kind=%s error=%s: %s",
                getattr(kind, "value", kind),
                type(exc).__name__,
                exc,
                extra={"event": "dispatch_failed"},
            )
            raise

        renderer = MapRenderer(spec, kind=kind)
        renderer.attach_all(consumers)
        logger.info(
            "dispatched kind=%s frames=%d repeat=%s consumers=%d",
            kind.value,
            spec.frame_count,
            spec.repeat.mode.value,
            len(consumers),
            extra={"event": "dispatch_ok"},
        )
        return renderer

    def dispatch_request(self, request: ContentRequest) -> MapRenderer:
        return self.dispatch(request.kind, request.payload, request.consumers)


def _as_text(payload: bytes | str) -> str:
    if isinstance(payload, bytes):
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise LayoutError(f"Text payload is not valid UTF-8: {exc}") from exc
    return payload
