from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from .cleanup import purge_stale_content
from .completion_client import CompletionClient
from .db import SessionLocal
from .errors import AppError
from .models import DailyQuote, FactOfTheDay, utcnow
from .pipeline import (
	generate_and_store_idioms,
	generate_and_store_words,
	generate_daily_quote,
	generate_fact_of_the_day,
	find_today,
	mark_word_of_the_day,
)
from .settings import settings

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"

Job = Callable[[Session, Any], Awaitable[Any]]


@dataclass(frozen=True)
class Schedule:
	kind: str
	hour: int
	minute: int = 0
	# None means every day; otherwise 0=Monday ... 6=Sunday
	weekday: Optional[int] = None


SCHEDULES: List[Schedule] = [
	Schedule("words", hour=0, minute=0),
	Schedule("quote", hour=0, minute=5),
	Schedule("fact", hour=0, minute=10),
	Schedule("cleanup", hour=3, minute=0, weekday=6),
]


def next_run_at(now: datetime, schedule: Schedule) -> datetime:
	candidate = now.replace(hour=schedule.hour, minute=schedule.minute, second=0, microsecond=0)
	if schedule.weekday is not None:
		candidate += timedelta(days=(schedule.weekday - now.weekday()) % 7)
	if candidate <= now:
		candidate += timedelta(days=7 if schedule.weekday is not None else 1)
	return candidate


async def _words_job(db: Session, client: Any) -> Any:
	result = await generate_and_store_words(db, client, count=settings.word_batch_size)
	mark_word_of_the_day(db, result.created)
	return result.as_dict()


async def _idioms_job(db: Session, client: Any) -> Any:
	result = await generate_and_store_idioms(db, client, count=settings.idiom_batch_size)
	return result.as_dict()


async def _quote_job(db: Session, client: Any) -> Any:
	return find_today(db, DailyQuote) or await generate_daily_quote(db, client)


async def _fact_job(db: Session, client: Any) -> Any:
	return find_today(db, FactOfTheDay) or await generate_fact_of_the_day(db, client)


async def _cleanup_job(db: Session, client: Any) -> Any:
	return purge_stale_content(db)


JOBS: Dict[str, Job] = {
	"words": _words_job,
	"idioms": _idioms_job,
	"quote": _quote_job,
	"fact": _fact_job,
	"cleanup": _cleanup_job,
}

# Jobs that never call the completion API
OFFLINE_JOBS = {"cleanup"}


class JobRunner:
	"""Runs generation jobs one at a time per kind."""

	def __init__(
		self,
		jobs: Optional[Dict[str, Job]] = None,
		*,
		session_factory: Callable[[], Session] = SessionLocal,
		client_factory: Callable[[], Any] = CompletionClient,
	) -> None:
		self.jobs = dict(jobs or JOBS)
		self.session_factory = session_factory
		self.client_factory = client_factory
		self._locks: Dict[str, asyncio.Lock] = {}
		self._state: Dict[str, str] = {kind: IDLE for kind in self.jobs}
		self._tasks: List[asyncio.Task] = []

	def lock_for(self, kind: str) -> asyncio.Lock:
		if kind not in self._locks:
			self._locks[kind] = asyncio.Lock()
		return self._locks[kind]

	def state(self, kind: str) -> str:
		return self._state.get(kind, IDLE)

	def states(self) -> Dict[str, str]:
		return dict(self._state)

	async def run(self, kind: str, *, raise_errors: bool = True) -> Any:
		"""Run one job. Scheduled callers pass raise_errors=False."""
		job = self.jobs[kind]
		async with self.lock_for(kind):
			self._state[kind] = RUNNING
			logger.info("Job %s started", kind)
			db = self.session_factory()
			client = None
			try:
				if kind not in OFFLINE_JOBS:
					client = self.client_factory()
				result = await job(db, client)
				logger.info("Job %s finished: %s", kind, result)
				return result
			except AppError:
				if raise_errors:
					raise
				logger.exception("Job %s failed; waiting for next trigger", kind)
				return None
			finally:
				self._state[kind] = IDLE
				if client is not None and hasattr(client, "aclose"):
					await client.aclose()
				db.close()

	async def _loop(self, schedule: Schedule) -> None:
		while True:
			now = utcnow()
			delay = (next_run_at(now, schedule) - now).total_seconds()
			await asyncio.sleep(delay)
			try:
				await self.run(schedule.kind, raise_errors=False)
			except Exception:
				# Anything outside the error taxonomy must not kill the loop
				logger.exception("Scheduled job %s crashed", schedule.kind)

	def start(self, schedules: Optional[List[Schedule]] = None) -> None:
		for schedule in schedules or SCHEDULES:
			self._tasks.append(asyncio.create_task(self._loop(schedule)))
		logger.info("Scheduler started with %d jobs", len(self._tasks))

	async def stop(self) -> None:
		for task in self._tasks:
			task.cancel()
		await asyncio.gather(*self._tasks, return_exceptions=True)
		self._tasks.clear()


job_runner = JobRunner()


def get_job_runner() -> JobRunner:
	return job_runner
