"""
Reactive preview rendering.

Keeps a live ParameterSet and re-renders the component whenever it changes.
Writes are coalesced: every mutation restarts a short debounce timer and only
the trailing edge triggers a render, so a burst of edits costs one render.

Usage::

    renderer = ReactiveRenderer(template, on_render=push_to_preview)
    await renderer.start()
    renderer.params["title"] = "Hello"
    renderer.params["bg"]["value"] = "#000"    # nested writes are observed too
    renderer.patch("overlay.opacity", 0.4)

Each render works on a deep snapshot taken when the timer fires. Renders are
numbered; a render that finishes after a newer one was started is discarded.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping, MutableMapping
from typing import Any

from sectionkit.core.config import SectionkitConfig
from sectionkit.core.defaults import delete_path, extract_defaults, set_path
from sectionkit.core.ir import RenderedOutput, RenderOptions
from sectionkit.render.renderer import render_component

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.1

RenderFn = Callable[
    [str, Mapping[str, Any], RenderOptions],
    RenderedOutput | Awaitable[RenderedOutput],
]


def _unwrap(value: Any) -> Any:
    if isinstance(value, ObservableParams):
        return value.to_dict()
    return value


class ObservableParams(MutableMapping[str, Any]):
    """Mutable view over a parameter dict that reports every write.

    Reading a nested dict returns a further view sharing the same callback,
    so ``params["bg"]["value"] = x`` is observed as well.
    """

    def __init__(self, data: dict[str, Any], on_change: Callable[[], None]):
        self._data = data
        self._on_change = on_change

    def __getitem__(self, key: str) -> Any:
        value = self._data[key]
        if isinstance(value, dict):
            return ObservableParams(value, self._on_change)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = _unwrap(value)
        self._on_change()

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._on_change()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ObservableParams({self._data!r})"

    def to_dict(self) -> dict[str, Any]:
        """Deep, detached copy of the current values."""
        return copy.deepcopy(self._data)


class ReactiveRenderer:
    """Debounced re-rendering of one component as its parameters change."""

    def __init__(
        self,
        template: str,
        params: Mapping[str, Any] | None = None,
        options: RenderOptions | None = None,
        *,
        on_render: Callable[[RenderedOutput], None] | None = None,
        render: RenderFn = render_component,
        debounce: float | None = None,
        config: SectionkitConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.template = template
        self.options = options or RenderOptions(overlay_patch=True)
        self.on_render = on_render
        self.last_output: RenderedOutput | None = None
        self.render_count = 0

        if debounce is None:
            debounce = config.reactive.debounce_seconds if config else DEFAULT_DEBOUNCE_SECONDS
        self._debounce = debounce
        self._render = render
        self._loop = loop

        data = copy.deepcopy(dict(params)) if params is not None else extract_defaults(template)
        self._data: dict[str, Any] = data
        self._params = ObservableParams(self._data, self._schedule)

        self._timer: asyncio.TimerHandle | None = None
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def params(self) -> ObservableParams:
        """Live parameters; writes schedule a render."""
        return self._params

    @property
    def pending(self) -> bool:
        """True while a debounced render is waiting to fire."""
        return self._timer is not None

    def patch(self, path: str, value: Any) -> None:
        """Set a dotted-path parameter, e.g. ``patch("bg.value", "#fff")``."""
        set_path(self._data, path, _unwrap(value))
        self._schedule()

    def remove(self, path: str) -> bool:
        """Delete a dotted-path parameter; returns whether it existed."""
        removed = delete_path(self._data, path)
        if removed:
            self._schedule()
        return removed

    async def start(self) -> RenderedOutput | None:
        """Render immediately and wait for the result."""
        self._fire()
        await self.drain()
        return self.last_output

    def flush(self) -> None:
        """Fire a pending debounced render now instead of at the trailing edge."""
        if self._timer is not None:
            self._timer.cancel()
            self._fire()

    async def drain(self) -> None:
        """Wait for every in-flight render to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop reacting to writes and wait for in-flight renders."""
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        await self.drain()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _schedule(self) -> None:
        if self._closed:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._get_loop().call_later(self._debounce, self._fire)

    def _fire(self) -> None:
        self._timer = None
        if self._closed:
            return
        self._generation += 1
        snapshot = copy.deepcopy(self._data)
        task = self._get_loop().create_task(self._run(self._generation, snapshot))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, generation: int, snapshot: dict[str, Any]) -> None:
        try:
            result = self._render(self.template, snapshot, self.options)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.error("Reactive render %d failed", generation, exc_info=True)
            return

        if generation != self._generation:
            logger.debug("Dropping stale render %d (latest is %d)", generation, self._generation)
            return

        self.last_output = result
        self.render_count += 1
        if self.on_render is not None:
            self.on_render(result)
