"""
Meter store implementations.

The meter is loaded and saved as a whole record. Stores never hand out
references to their internal state, so a caller mutating a loaded meter
cannot change what is persisted until it calls ``save``.
"""

from __future__ import annotations

import fcntl  # advisory cross-process lock on Unix
import json
import os
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import jsonschema

from ..concurrency import run_sync_or_undo
from ..config_schema import METER_SCHEMA
from ..errors import ErrorContext, LedgerCorruptedError, LedgerWriteError
from .types import MeterState


class MeterStore(ABC):
    """Abstract interface for meter persistence."""

    @abstractmethod
    async def load(self) -> MeterState | None:
        """Load the persisted meter, or None if nothing has been persisted yet."""
        ...

    @abstractmethod
    async def save(self, state: MeterState) -> None:
        """Persist the whole meter record."""
        ...

    @asynccontextmanager
    async def lock(self) -> AsyncIterator[None]:
        """Hold exclusive access for a load-check-save cycle.

        The base implementation is a no-op; single-process stores rely on the
        meter's own asyncio lock.
        """
        yield


class InMemoryMeterStore(MeterStore):
    """In-memory meter store.

    Suitable for testing and for embedding the meter in a single process.
    """

    def __init__(self, state: MeterState | None = None):
        self._data: dict[str, Any] | None = state.to_dict() if state else None
        self.save_count = 0

    async def load(self) -> MeterState | None:
        if self._data is None:
            return None
        return MeterState.from_dict(json.loads(json.dumps(self._data)))

    async def save(self, state: MeterState) -> None:
        self._data = json.loads(json.dumps(state.to_dict()))
        self.save_count += 1

    @property
    def raw(self) -> dict[str, Any] | None:
        """The persisted record as it would appear on disk."""
        return self._data


class _FileLock:
    """Exclusive ``flock`` held on a sidecar lock file."""

    def __init__(self, path: Path):
        self.path = path
        self._fd: int | None = None

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError:
            os.close(fd)
            raise
        self._fd = fd

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None


class FileMeterStore(MeterStore):
    """JSON file meter store.

    A missing file means a first run and loads as None. A file that exists but
    cannot be parsed raises ``LedgerCorruptedError`` instead of being replaced,
    since that would silently discard spend history.

    Writes go to a temp file that is then renamed over the target, so a
    crash mid-write never leaves a partial record.
    """

    def __init__(self, path: str | Path, *, use_lock: bool = False):
        self.path = Path(path)
        self.use_lock = use_lock
        self.lock_path = self.path.with_name(f"{self.path.name}.lock")

    async def load(self) -> MeterState | None:
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise LedgerCorruptedError(
                f"Budget meter is not valid UTF-8: {e}",
                context=ErrorContext(path=str(self.path)),
                cause=e,
            ) from e

        try:
            data = json.loads(raw)
            jsonschema.validate(instance=data, schema=METER_SCHEMA)
        except json.JSONDecodeError as e:
            raise LedgerCorruptedError(
                f"Budget meter is not valid JSON: {e}",
                context=ErrorContext(path=str(self.path)),
                cause=e,
            ) from e
        except jsonschema.ValidationError as e:
            raise LedgerCorruptedError(
                f"Budget meter has an invalid shape: {e.message}",
                context=ErrorContext(path=str(self.path)),
                cause=e,
            ) from e

        return MeterState.from_dict(data)

    async def save(self, state: MeterState) -> None:
        tmp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")
        payload = json.dumps(state.to_dict(), indent=2, ensure_ascii=False)

        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise LedgerWriteError(
                f"Failed to save budget meter: {e}",
                context=ErrorContext(path=str(self.path)),
                cause=e,
            ) from e

    @asynccontextmanager
    async def lock(self) -> AsyncIterator[None]:
        if not self.use_lock:
            yield
            return

        file_lock = _FileLock(self.lock_path)
        await run_sync_or_undo(file_lock.acquire, lambda _: file_lock.release())
        try:
            yield
        finally:
            file_lock.release()


__all__ = [
    "MeterStore",
    "InMemoryMeterStore",
    "FileMeterStore",
]
