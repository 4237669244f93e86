from __future__ import annotations
import logging
import httpx
from typing import Any, AsyncIterator, Dict, List, Optional
from .errors import UpstreamError
from .prompts import SAMPLING, ContentType, build_messages
from .settings import settings

logger = logging.getLogger(__name__)


class CompletionClient:
	"""Chat-completions client for Groq's OpenAI-compatible API."""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.groq_api_key
		self.base_url = (base_url or settings.groq_base_url).rstrip("/") + "/chat/completions"
		self.models = {"main": settings.groq_model, "creative": settings.groq_model_creative}
		self._headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
		}
		self._client = httpx.AsyncClient(timeout=timeout or settings.completion_timeout_seconds, transport=transport)

	async def generate(self, content_type: ContentType, **params: Any) -> str:
		sampling = SAMPLING[content_type]
		messages = build_messages(content_type, **params)
		logger.info("Requesting %s completion", content_type.value)
		return await self.complete(
			messages,
			model=self.models[sampling.tier],
			temperature=sampling.temperature,
			top_p=sampling.top_p,
			max_tokens=sampling.max_tokens,
		)

	async def complete(
		self,
		messages: List[Dict[str, str]],
		*,
		model: str,
		temperature: float,
		top_p: float,
		max_tokens: int,
	) -> str:
		payload: Dict[str, Any] = {
			"model": model,
			"messages": messages,
			"temperature": temperature,
			"top_p": top_p,
			"max_completion_tokens": max_tokens,
			"stream": False,
		}
		if not self.api_key:
			raise UpstreamError("GROQ_API_KEY is not configured")
		try:
			r = await self._client.post(self.base_url, headers=self._headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise UpstreamError(f"Completion API returned {http_err.response.status_code}") from http_err
		except httpx.RequestError as net_err:
			raise UpstreamError(f"Completion API request failed: {net_err!r}") from net_err
		try:
			data = r.json()
			content = data["choices"][0]["message"]["content"]
		except (ValueError, KeyError, IndexError, TypeError) as err:
			raise UpstreamError(f"Unexpected completion response: {r.text[:200]}") from err
		if not content or not str(content).strip():
			raise UpstreamError("Empty response from completion API")
		return str(content)

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_completion_client() -> AsyncIterator[CompletionClient]:
	client = CompletionClient()
	try:
		yield client
	finally:
		await client.aclose()
