"""Fixed-window rate limiting keyed by client address and route.

The counters live in a ``RateLimitStore`` owned by the application
(``app.state.rate_limiter``) so a multi-process deployment can swap the
in-memory store for a shared one.
"""
from __future__ import annotations
import math
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from fastapi import FastAPI, Request

from .errors import RateLimitError
from .settings import settings


@dataclass
class WindowState:
	count: int
	reset_at: float


class RateLimitStore(Protocol):
	def hit(self, key: str, now: float, window: float) -> WindowState: ...

	def purge_expired(self, now: float) -> int: ...

	def reset(self) -> None: ...


class InMemoryRateLimitStore:
	def __init__(self) -> None:
		self._windows: Dict[str, WindowState] = {}
		self._lock = threading.Lock()

	def hit(self, key: str, now: float, window: float) -> WindowState:
		with self._lock:
			state = self._windows.get(key)
			if state is None or now > state.reset_at:
				state = WindowState(count=0, reset_at=now + window)
				self._windows[key] = state
			state.count += 1
			return WindowState(state.count, state.reset_at)

	def purge_expired(self, now: float) -> int:
		with self._lock:
			expired = [k for k, v in self._windows.items() if now > v.reset_at]
			for k in expired:
				del self._windows[k]
			return len(expired)

	def reset(self) -> None:
		with self._lock:
			self._windows.clear()

	def __len__(self) -> int:
		return len(self._windows)


class RateLimiter:
	def __init__(
		self,
		store: Optional[RateLimitStore] = None,
		*,
		max_requests: Optional[int] = None,
		window_seconds: Optional[float] = None,
		cleanup_probability: float = 0.01,
		clock: Callable[[], float] = time.time,
		rng: Callable[[], float] = random.random,
	) -> None:
		self.store = store if store is not None else InMemoryRateLimitStore()
		self.max_requests = max_requests if max_requests is not None else settings.rate_limit_max_requests
		self.window_seconds = window_seconds if window_seconds is not None else settings.rate_limit_window_seconds
		self.cleanup_probability = cleanup_probability
		self._clock = clock
		self._rng = rng

	def check(self, key: str) -> WindowState:
		now = self._clock()
		state = self.store.hit(key, now, self.window_seconds)
		if state.count > self.max_requests:
			raise RateLimitError("Rate limit exceeded", retryAfter=math.ceil(state.reset_at - now))
		if self._rng() < self.cleanup_probability:
			self.store.purge_expired(now)
		return state

	def reset(self) -> None:
		self.store.reset()


def client_key(request: Request) -> str:
	forwarded = request.headers.get("x-forwarded-for")
	if forwarded:
		address = forwarded.split(",")[0].strip()
	else:
		address = request.headers.get("x-real-ip") or (request.client.host if request.client else "unknown")
	return f"{address}:{request.url.path}"


def init_rate_limiter(app: FastAPI, limiter: Optional[RateLimiter] = None) -> RateLimiter:
	app.state.rate_limiter = limiter or RateLimiter()
	return app.state.rate_limiter


async def rate_limit(request: Request) -> None:
	limiter: Optional[RateLimiter] = getattr(request.app.state, "rate_limiter", None)
	if limiter is not None:
		limiter.check(client_key(request))
