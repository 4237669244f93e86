"""Turn raw completion text into JSON values.

Models are told to answer with bare JSON but routinely wrap it in Markdown
fences or add a sentence of commentary before or after it. The helpers here
strip the fences, then fall back to scanning for the first balanced JSON
array/object when a direct parse fails.
"""
from __future__ import annotations
import json
import re
from typing import Any, Dict, Iterator, List, Optional

from .errors import ParseError

_LEADING_FENCE = re.compile(r"^```(?:json)?[\r\n]?")
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
	if not text:
		return ""
	out = text.strip()
	out = _LEADING_FENCE.sub("", out, count=1)
	out = _TRAILING_FENCE.sub("", out, count=1)
	return out.strip()


def _balanced_end(text: str, start: int) -> Optional[int]:
	"""Index just past the bracket that closes text[start], or None.

	Brackets inside JSON string literals are ignored.
	"""
	stack: List[str] = []
	in_string = False
	escaped = False
	for i in range(start, len(text)):
		ch = text[i]
		if in_string:
			if escaped:
				escaped = False
			elif ch == "\\":
				escaped = True
			elif ch == '"':
				in_string = False
			continue
		if ch == '"':
			in_string = True
		elif ch in "[{":
			stack.append("]" if ch == "[" else "}")
		elif ch in "]}":
			if not stack or stack.pop() != ch:
				return None
			if not stack:
				return i + 1
	return None


def _array_of_objects_starts(text: str) -> Iterator[int]:
	for m in re.finditer(r"\[\s*\{", text):
		yield m.start()


def _object_starts(text: str) -> Iterator[int]:
	pos = text.find("{")
	while pos != -1:
		yield pos
		pos = text.find("{", pos + 1)


def _candidates(text: str, starts: Iterator[int]) -> Iterator[str]:
	for start in starts:
		end = _balanced_end(text, start)
		if end is not None:
			yield text[start:end]


def extract_json_array(text: str) -> str:
	"""Return the first balanced ``[{...}, ...]`` block in text, verbatim."""
	candidate = next(_candidates(text, _array_of_objects_starts(text)), None)
	if candidate is None:
		raise ParseError("no JSON array found")
	return candidate


def extract_json_object(text: str) -> str:
	"""Return the first balanced ``{...}`` block in text, verbatim."""
	candidate = next(_candidates(text, _object_starts(text)), None)
	if candidate is None:
		raise ParseError("no JSON object found")
	return candidate


def _loads(text: str) -> Any:
	try:
		return json.loads(text)
	except ValueError:
		return None


def parse_json_array(raw: str) -> List[Any]:
	text = strip_code_fences(raw)
	data = _loads(text)
	if isinstance(data, list):
		return data
	# Some models wrap the list in an object, e.g. {"words": [...]}
	if isinstance(data, dict):
		for value in data.values():
			if isinstance(value, list):
				return value
	for candidate in _candidates(text, _array_of_objects_starts(text)):
		data = _loads(candidate)
		if isinstance(data, list):
			return data
	raise ParseError("no JSON array found")


def parse_json_object(raw: str) -> Dict[str, Any]:
	text = strip_code_fences(raw)
	data = _loads(text)
	if isinstance(data, dict):
		return data
	for candidate in _candidates(text, _object_starts(text)):
		data = _loads(candidate)
		if isinstance(data, dict):
			return data
	raise ParseError("no JSON object found")
