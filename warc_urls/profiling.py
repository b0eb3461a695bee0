"""Optional CPU profiling of a run."""

from __future__ import annotations

import cProfile
import functools
import pstats
from contextlib import contextmanager
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterator, TypeVar

from .errors import ProfileError
from .logging_conf import component_logger

T = TypeVar("T")


class ThreadProfiles:
    """Collect one ``cProfile.Profile`` per stage task and merge them on dump.

    ``cProfile`` only sees the thread that enabled it, so every task submitted
    through :meth:`wrap` gets its own profiler on its executor thread.
    """

    def __init__(self) -> None:
        self._profiles: list[cProfile.Profile] = []
        self._lock = Lock()

    def add(self, profiler: cProfile.Profile) -> None:
        with self._lock:
            self._profiles.append(profiler)

    def wrap(self, fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def _profiled(*args: Any, **kwargs: Any) -> T:
            profiler = cProfile.Profile()
            try:
                profiler.enable()
            except ValueError:
                # interpreters where cProfile hooks sys.monitoring allow one
                # active profiler, and that one already covers every thread
                return fn(*args, **kwargs)
            try:
                return fn(*args, **kwargs)
            finally:
                profiler.disable()
                self.add(profiler)

        return _profiled

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)

    def dump(self, path: Path) -> None:
        with self._lock:
            profiles = list(self._profiles)
        pstats.Stats(*profiles).dump_stats(str(path))


@contextmanager
def cpu_profile(path: Path | None) -> Iterator[ThreadProfiles | None]:
    """Profile the enclosed block and dump merged ``pstats`` data to ``path``.

    The output file is created up front so an unwritable path fails before
    any work starts. Executors must wrap their tasks with the yielded
    collector's :meth:`ThreadProfiles.wrap` for stage threads to show up.
    With ``path=None`` this is a no-op.
    """

    if path is None:
        yield None
        return
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb"):
            pass
    except OSError as exc:
        raise ProfileError(f"cannot create profile file {path}: {exc}") from exc

    profiles = ThreadProfiles()
    profiler = cProfile.Profile()
    profiler.enable()
    try:
        yield profiles
    finally:
        profiler.disable()
        profiles.add(profiler)
        profiles.dump(path)
        component_logger("profiling").debug("profile_written", path=str(path), profiles=len(profiles))


__all__ = ["ThreadProfiles", "cpu_profile"]
