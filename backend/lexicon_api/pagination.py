from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query, Session, selectinload

from .errors import ValidationError
from .models import Synonym, VocabularyWord

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
SEARCH_LIMIT = 20


@dataclass
class Page:
	items: List[Any]
	next_cursor: Optional[str]
	# Approximation: true whenever the page is full, even if it was the last one
	has_more: bool


def clamp_limit(limit: Optional[int]) -> int:
	if limit is None:
		return DEFAULT_LIMIT
	return max(1, min(int(limit), MAX_LIMIT))


def paginate(query: Query, model: Any, *, cursor: Optional[str], limit: Optional[int]) -> Page:
	"""Cursor pagination over ``created_at desc, id desc``."""
	limit = clamp_limit(limit)
	if cursor:
		anchor = query.session.get(model, cursor)
		if anchor is None:
			raise ValidationError("invalid cursor")
		query = query.filter(
			or_(
				model.created_at < anchor.created_at,
				and_(model.created_at == anchor.created_at, model.id < anchor.id),
			)
		)
	items = query.order_by(model.created_at.desc(), model.id.desc()).limit(limit).all()
	next_cursor = items[-1].id if items else None
	return Page(items=items, next_cursor=next_cursor, has_more=len(items) == limit)


def _with_children(query: Query) -> Query:
	return query.options(
		selectinload(VocabularyWord.synonyms),
		selectinload(VocabularyWord.antonyms),
		selectinload(VocabularyWord.sentences),
	)


def list_words(
	db: Session,
	*,
	cursor: Optional[str] = None,
	limit: Optional[int] = None,
	difficulty: Optional[str] = None,
	category: Optional[str] = None,
) -> Page:
	query = _with_children(db.query(VocabularyWord))
	if difficulty:
		query = query.filter(VocabularyWord.difficulty == difficulty)
	if category:
		query = query.filter(VocabularyWord.category == category)
	return paginate(query, VocabularyWord, cursor=cursor, limit=limit)


def search_words(db: Session, q: str) -> List[VocabularyWord]:
	q = q.strip()
	if not q:
		raise ValidationError("Query parameter 'q' is required")
	return (
		_with_children(db.query(VocabularyWord))
		.filter(
			or_(
				VocabularyWord.text.icontains(q, autoescape=True),
				VocabularyWord.meaning_hindi.icontains(q, autoescape=True),
				VocabularyWord.meaning_gujarati.icontains(q, autoescape=True),
				VocabularyWord.synonyms.any(Synonym.text.icontains(q, autoescape=True)),
			)
		)
		.order_by(VocabularyWord.created_at.desc())
		.limit(SEARCH_LIMIT)
		.all()
	)
