from __future__ import annotations
import asyncio
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar
from logger import log

T = TypeVar("T")


class LoadState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class ResourceLoad(Generic[T]):
    """
    One remote dataset the wizard depends on (quota, images or nodes).

    ``start()`` fires the fetch as its own task; the result lands in ``value``
    (READY) or ``error`` (FAILED). Every start bumps ``generation`` and a
    finishing fetch only applies its result if its generation is still current,
    so ``detach()`` or a newer ``retry()`` silently retires older fetches.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        on_change: Callable[["ResourceLoad[T]"], None],
    ) -> None:
        self.name = name
        self._fetch = fetch
        self._on_change = on_change
        self.state = LoadState.PENDING
        self.value: Optional[T] = None
        self.error = ""
        self.generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def ready(self) -> bool:
        return self.state is LoadState.READY

    @property
    def failed(self) -> bool:
        return self.state is LoadState.FAILED

    @property
    def pending(self) -> bool:
        return self.state is LoadState.PENDING

    def start(self) -> asyncio.Task:
        self.generation += 1
        self.state = LoadState.PENDING
        self.value = None
        self.error = ""
        self._task = asyncio.create_task(self._run(self.generation))
        return self._task

    def retry(self) -> asyncio.Task:
        log.info("Reloading %s", self.name)
        task = self.start()
        self._on_change(self)
        return task

    def detach(self) -> None:
        """Invalidate any in-flight fetch without cancelling it."""
        self.generation += 1

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _run(self, generation: int) -> None:
        try:
            value = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if generation != self.generation:
                log.debug("Dropping stale %s failure (gen %d): %s", self.name, generation, e)
                return
            self.state = LoadState.FAILED
            self.error = str(e) or type(e).__name__
            log.warning("Loading %s failed: %s", self.name, self.error)
        else:
            if generation != self.generation:
                log.debug("Dropping stale %s result (gen %d)", self.name, generation)
                return
            self.value = value
            self.state = LoadState.READY
            log.info("Loaded %s", self.name)
        self._on_change(self)
