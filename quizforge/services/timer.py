from __future__ import annotations

import asyncio
import random
import time
from typing import Callable, Dict, Optional


class QuizTimer:
    """Stopwatch for time spent on a quiz."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._started: Optional[float] = None
        self._elapsed = 0.0

    def start(self) -> None:
        self._started = self._clock()

    def stop(self) -> None:
        if self._started is not None:
            self._elapsed += self._clock() - self._started
            self._started = None

    def reset(self) -> None:
        self._started = None
        self._elapsed = 0.0

    @property
    def running(self) -> bool:
        return self._started is not None

    def elapsed(self) -> float:
        if self._started is not None:
            return self._elapsed + (self._clock() - self._started)
        return self._elapsed

    def display(self) -> str:
        total = int(self.elapsed())
        return f"{total // 60}:{total % 60:02d}"


class LoadingProgress:
    """Simulated progress for a pending generation call.

    Ticks on a repeating asyncio task. ``start`` cancels any ticker already
    running, and ``finish`` always lands on 100% hidden, so two tickers never
    overlap and the final state does not depend on how the call ended.
    """

    def __init__(
        self,
        interval: float = 0.7,
        max_step: float = 6.0,
        ceiling: float = 95.0,
        rng: Optional[random.Random] = None,
    ):
        self.interval = interval
        self.max_step = max_step
        self.ceiling = ceiling
        self._rng = rng or random.Random()
        self._task: Optional[asyncio.Task] = None
        self.percent = 0.0
        self.visible = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.cancel()
        self.percent = 0.0
        self.visible = True
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def tick(self) -> None:
        if self.percent < self.ceiling:
            self.percent = min(self.ceiling, self.percent + self._rng.random() * self.max_step)

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def finish(self) -> None:
        self.cancel()
        self.percent = 100.0
        self.visible = False

    def snapshot(self) -> Dict[str, object]:
        pct = int(self.percent)
        return {"percent": pct, "visible": self.visible, "label": f"Loading {pct}%"}
