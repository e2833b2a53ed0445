# aurora_planner/infra/scheduler/loop.py
from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


JobFn = Callable[[], Awaitable[object]]


@dataclass
class PeriodicJob:
    name: str
    interval_seconds: float
    fn: JobFn
    next_run: float = 0.0
    run_count: int = 0
    last_error: Optional[str] = None
    # background jobs run as their own task so slow runs do not hold up the others
    background: bool = False
    task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()


@dataclass
class SchedulerConfig:
    tick_seconds: float = 5.0
    jobs: Dict[str, float] = field(default_factory=dict)


class PeriodicLoop:
    """
    name -> coroutine run every interval.
    Jobs are registered in the composition root; a failing job is logged and
    retried at its next interval. A background job is skipped while its
    previous run is still going.
    """

    def __init__(self, cfg: Optional[SchedulerConfig] = None, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._cfg = cfg or SchedulerConfig()
        self._jobs: Dict[str, PeriodicJob] = {}
        self._monotonic = monotonic
        self._stop = asyncio.Event()

    def register(
        self,
        name: str,
        interval_seconds: float,
        fn: JobFn,
        run_immediately: bool = True,
        background: bool = False,
    ) -> None:
        interval = self._cfg.jobs.get(name, interval_seconds)
        first = 0.0 if run_immediately else self._monotonic() + interval
        self._jobs[name] = PeriodicJob(
            name=name, interval_seconds=interval, fn=fn, next_run=first, background=background
        )

    @property
    def jobs(self) -> Dict[str, PeriodicJob]:
        return dict(self._jobs)

    def stop(self) -> None:
        self._stop.set()

    async def run_forever(self) -> None:
        try:
            while not self._stop.is_set():
                await self.tick()
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self._cfg.tick_seconds)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.cancel_background()

    async def cancel_background(self) -> None:
        for job in self._jobs.values():
            if job.running:
                job.task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await job.task

    async def tick(self) -> None:
        now = self._monotonic()
        for job in list(self._jobs.values()):
            if job.next_run > now:
                continue
            if job.background:
                if job.running:
                    continue
                self._schedule_next(job, now)
                job.task = asyncio.create_task(self._execute_one(job))
            else:
                self._schedule_next(job, now)
                await self._execute_one(job)

    @staticmethod
    def _schedule_next(job: PeriodicJob, now: float) -> None:
        # keep the cadence anchored to the previous slot so tick jitter does not add up
        anchored = job.next_run + job.interval_seconds
        job.next_run = anchored if anchored > now else now + job.interval_seconds

    async def _execute_one(self, job: PeriodicJob) -> None:
        try:
            await job.fn()
            job.run_count += 1
            job.last_error = None
        except Exception as e:
            # never crash the bot because of scheduler, but log errors
            job.last_error = str(e)
            logger.error(f"Job execution failed: job={job.name}, error={e}", exc_info=True)
