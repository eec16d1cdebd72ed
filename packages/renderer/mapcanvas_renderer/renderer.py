"""Pull-based renderer advancing an AnimationSpec for a set of consumers."""

from __future__ import annotations

from typing import Hashable, Iterable

from .models import AnimationSpec, Canvas, ContentKind, RendererState, RepeatMode


class MapRenderer:
    """Owns one AnimationSpec and its cursor.

    ``advance`` and ``current_canvas`` never block and are meant to be called
    from a single tick driver. Not thread safe on its own.
    """

    def __init__(self, spec: AnimationSpec, kind: ContentKind | None = None) -> None:
        self._spec = spec
        self.kind = kind
        self._state = RendererState.READY
        self._consumers: set[Hashable] = set()
        self._index = 0
        self._elapsed_ms = 0
        self._remaining = spec.repeat.cycles
        self._frame_changes = 0

    @property
    def spec(self) -> AnimationSpec:
        return self._spec

    @property
    def state(self) -> RendererState:
        return self._state

    @property
    def consumers(self) -> frozenset:
        return frozenset(self._consumers)

    @property
    def frame_index(self) -> int:
        return self._index

    @property
    def remaining_cycles(self) -> int | None:
        return self._remaining

    @property
    def frame_changes(self) -> int:
        """Incremented every time the visible frame index moves."""
        return self._frame_changes

    def attach(self, consumer: Hashable) -> bool:
        if self._state is RendererState.DETACHED:
            return False
        added = consumer not in self._consumers
        self._consumers.add(consumer)
        if self._state is RendererState.READY:
            self._state = RendererState.ACTIVE
        return added

    def attach_all(self, consumers: Iterable[Hashable]) -> None:
        for consumer in consumers:
            self.attach(consumer)

    def detach(self, consumer: Hashable) -> bool:
        removed = consumer in self._consumers
        self._consumers.discard(consumer)
        # A READY renderer has never had consumers; only close() ends it.
        if not self._consumers and self._state is not RendererState.READY:
            self._state = RendererState.DETACHED
        return removed

    def close(self) -> None:
        self._consumers.clear()
        self._state = RendererState.DETACHED

    def current_canvas(self) -> Canvas:
        if self._state is RendererState.DETACHED:
            raise RuntimeError("Renderer is detached")
        return self._spec.frames[self._index].canvas

    def advance(self, elapsed_ms: int | float) -> None:
        if self._state is not RendererState.ACTIVE:
            return
        if elapsed_ms < 0:
            raise ValueError("Elapsed time must not be negative")

        self._elapsed_ms += elapsed_ms
        while self._state is RendererState.ACTIVE:
            delay = self._spec.frames[self._index].delay_ms
            if self._elapsed_ms < delay:
                break
            self._elapsed_ms -= delay
            self._step()
            if delay == 0:
                # A zero-delay frame is shown for at least one tick.
                self._elapsed_ms = 0
                break

    def _step(self) -> None:
        if self._index + 1 < self._spec.frame_count:
            self._index += 1
            self._frame_changes += 1
            return

        repeat = self._spec.repeat
        if repeat.mode is RepeatMode.FOREVER:
            self._wrap()
            return

        self._remaining -= 1
        if self._remaining > 0:
            self._wrap()
        else:
            self._state = RendererState.EXHAUSTED
            self._elapsed_ms = 0

    def _wrap(self) -> None:
        if self._index != 0:
            self._frame_changes += 1
        self._index = 0

    def __repr__(self) -> str:
        kind = self.kind.value if self.kind else None
        return (
            f"MapRenderer(kind={kind}, state={self._state.value}, frame={self._index}/{self._spec.frame_count}, "
            f"consumers={len(self._consumers)})"
        )
