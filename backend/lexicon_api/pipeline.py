from __future__ import annotations
import json
import logging
import random
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import PersistenceError, UpstreamError
from .llm_output import parse_json_array, parse_json_object
from .models import DailyQuote, FactOfTheDay, GrammarLesson, PronunciationGuide, Quiz, Story, VocabularyWord, utcnow
from .normalize import (
	normalize_fact,
	normalize_grammar_lesson,
	normalize_idiom_batch,
	normalize_pronunciation_guide,
	normalize_quiz,
	normalize_quote,
	normalize_story,
	normalize_word_batch,
)
from .prompts import FACT_TOPICS, WORD_CATEGORIES, ContentType
from .upsert import BatchResult, find_pronunciation_guide, store_batch, store_idiom, store_pronunciation_guide, store_word

logger = logging.getLogger(__name__)


class Completer(Protocol):
	async def generate(self, content_type: ContentType, **params: Any) -> str: ...


def _save(db: Session, row: Any) -> Any:
	try:
		db.add(row)
		db.commit()
	except SQLAlchemyError as exc:
		db.rollback()
		raise PersistenceError(f"could not store {type(row).__name__}: {exc}") from exc
	db.refresh(row)
	return row


async def generate_and_store_words(
	db: Session,
	client: Completer,
	*,
	count: int = 15,
	category: Optional[str] = None,
) -> BatchResult:
	category = category or random.choice(WORD_CATEGORIES)
	raw = await client.generate(ContentType.WORDS, count=count, category=category)
	entries = normalize_word_batch(parse_json_array(raw))
	result = store_batch(db, entries, store_word)
	logger.info("Word generation (%s): %s", category, result.as_dict())
	return result


async def generate_and_store_idioms(db: Session, client: Completer, *, count: int = 10) -> BatchResult:
	raw = await client.generate(ContentType.IDIOMS, count=count)
	entries = normalize_idiom_batch(parse_json_array(raw))
	result = store_batch(db, entries, store_idiom)
	logger.info("Idiom generation: %s", result.as_dict())
	return result


async def generate_quiz(db: Session, client: Completer, *, quiz_type: str, difficulty: str, count: int) -> Dict[str, Any]:
	words = (
		db.query(VocabularyWord)
		.filter(VocabularyWord.difficulty == difficulty)
		.order_by(VocabularyWord.created_at.desc())
		.limit(count * 2)
		.all()
	)
	raw = await client.generate(
		ContentType.QUIZ,
		quiz_type=quiz_type,
		count=count,
		words=[{"id": w.id, "text": w.text} for w in words],
	)
	questions = normalize_quiz(parse_json_object(raw))
	if not questions:
		raise UpstreamError("model returned no usable quiz questions")
	quiz = _save(db, Quiz(type=quiz_type, difficulty=difficulty, questions=json.dumps(questions, ensure_ascii=False)))
	return {"quizId": quiz.id, "type": quiz_type, "difficulty": difficulty, "questions": questions}


async def generate_daily_quote(db: Session, client: Completer) -> DailyQuote:
	raw = await client.generate(ContentType.QUOTE)
	data = normalize_quote(parse_json_object(raw))
	if data is None:
		raise UpstreamError("model returned a quote without text")
	quote = _save(db, DailyQuote(**data))
	logger.info("Generated daily quote %s", quote.id)
	return quote


async def generate_fact_of_the_day(db: Session, client: Completer, *, topic: Optional[str] = None) -> FactOfTheDay:
	topic = topic or random.choice(FACT_TOPICS)
	raw = await client.generate(ContentType.FACT, topic=topic)
	data = normalize_fact(parse_json_object(raw), topic)
	if data is None:
		raise UpstreamError("model returned a fact without text")
	fact = _save(db, FactOfTheDay(**data))
	logger.info("Generated fact of the day %s (%s)", fact.id, topic)
	return fact


async def generate_story(
	db: Session,
	client: Completer,
	*,
	theme: str,
	difficulty: str,
	words_to_include: Sequence[str] = (),
) -> Story:
	raw = await client.generate(ContentType.STORY, theme=theme, difficulty=difficulty, words_to_include=list(words_to_include))
	data = normalize_story(parse_json_object(raw))
	if data is None:
		raise UpstreamError("model returned a story without title or text")
	return _save(db, Story(theme=theme, difficulty=difficulty, **data))


async def generate_grammar_lesson(db: Session, client: Completer, *, topic: str, difficulty: str) -> GrammarLesson:
	raw = await client.generate(ContentType.GRAMMAR_LESSON, topic=topic, difficulty=difficulty)
	data = normalize_grammar_lesson(parse_json_object(raw))
	if data is None:
		raise UpstreamError("model returned a grammar lesson without a title")
	return _save(db, GrammarLesson(topic=topic, difficulty=difficulty, **data))


async def generate_pronunciation_guide(db: Session, client: Completer, *, word: str) -> PronunciationGuide:
	"""Return the stored guide for word, generating it on first request."""
	existing = find_pronunciation_guide(db, word)
	if existing is not None:
		return existing
	raw = await client.generate(ContentType.PRONUNCIATION_GUIDE, word=word)
	data = normalize_pronunciation_guide(parse_json_object(raw), word)
	if data is None:
		raise UpstreamError("model returned a pronunciation guide without IPA")
	guide = store_pronunciation_guide(db, data)
	# None means a concurrent request stored it first
	return guide or find_pronunciation_guide(db, word)


async def generate_word_association(client: Completer, *, difficulty: str) -> Dict[str, Any]:
	return parse_json_object(await client.generate(ContentType.WORD_ASSOCIATION, difficulty=difficulty))


async def generate_conversation_starters(client: Completer, *, difficulty: str) -> Dict[str, Any]:
	return parse_json_object(await client.generate(ContentType.CONVERSATION_STARTERS, difficulty=difficulty))


def mark_word_of_the_day(db: Session, words: List[VocabularyWord]) -> Optional[VocabularyWord]:
	if not words:
		return None
	word = words[0]
	word.is_word_of_the_day = True
	_save(db, word)
	return word


def start_of_today() -> datetime:
	return utcnow().replace(hour=0, minute=0, second=0, microsecond=0)


def find_today(db: Session, model: Any) -> Optional[Any]:
	"""Latest quote/fact created since 00:00 UTC."""
	return (
		db.query(model)
		.filter(model.created_at >= start_of_today())
		.order_by(model.created_at.desc())
		.first()
	)
