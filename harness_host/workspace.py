"""
Workspace backed by the local file system.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from harness_common.host import Workspace

T = TypeVar("T")


class LocalWorkspace(Workspace):
    """A workspace entry on the machine running the harness."""

    def __init__(self, path: Path | str):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def child(self, name: str) -> "LocalWorkspace":
        return LocalWorkspace(self._path / name)

    def exists(self) -> bool:
        return self._path.exists()

    async def act(self, func: Callable[[Path], T | Awaitable[T]]) -> T:
        # Coroutine functions run on the event loop, plain callables in a thread
        if inspect.iscoroutinefunction(func):
            return await func(self._path)
        result = await asyncio.to_thread(func, self._path)
        if inspect.isawaitable(result):
            return await result
        return result

    def __repr__(self) -> str:
        return f"LocalWorkspace({str(self._path)!r})"
