"""Create-if-absent persistence for generated content.

Existing records are never updated. The existence check is only a shortcut:
the unique constraint on the natural key is what actually guards against
duplicates, and losing an insert race to it counts as "already exists".
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import PersistenceError
from .models import Antonym, Idiom, PronunciationGuide, Sentence, Synonym, VocabularyWord
from .normalize import sentence_difficulty

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
	created: List[Any] = field(default_factory=list)
	skipped: List[str] = field(default_factory=list)
	failed: List[str] = field(default_factory=list)

	def as_dict(self) -> Dict[str, int]:
		return {"created": len(self.created), "skipped": len(self.skipped), "failed": len(self.failed)}


def find_word(db: Session, text: str) -> Optional[VocabularyWord]:
	return db.query(VocabularyWord).filter(VocabularyWord.text == text.lower()).first()


def find_idiom(db: Session, text: str) -> Optional[Idiom]:
	return db.query(Idiom).filter(Idiom.text == text.lower()).first()


def find_pronunciation_guide(db: Session, word: str) -> Optional[PronunciationGuide]:
	return db.query(PronunciationGuide).filter(PronunciationGuide.word == word.lower()).first()


def _insert(db: Session, row: Any, key: str, exists: Callable[[], Any]) -> Optional[Any]:
	try:
		db.add(row)
		db.commit()
	except IntegrityError as exc:
		db.rollback()
		if exists() is not None:
			logger.info("Lost insert race for %r; treating as existing", key)
			return None
		raise PersistenceError(f"could not store {key!r}: {exc.orig}") from exc
	except SQLAlchemyError as exc:
		db.rollback()
		raise PersistenceError(f"could not store {key!r}: {exc}") from exc
	db.refresh(row)
	return row


def store_word(db: Session, entry: Dict[str, Any]) -> Optional[VocabularyWord]:
	"""Persist a normalized word with its children, or return None if it exists."""
	text = entry["text"]
	if find_word(db, text) is not None:
		logger.info("Skipping existing word: %s", text)
		return None
	fields = {k: v for k, v in entry.items() if k not in ("synonyms", "antonyms", "sentences")}
	word = VocabularyWord(**fields)
	word.synonyms = [Synonym(text=s) for s in entry.get("synonyms", [])]
	word.antonyms = [Antonym(text=a) for a in entry.get("antonyms", [])]
	word.sentences = [
		Sentence(text=s, difficulty=sentence_difficulty(i)) for i, s in enumerate(entry.get("sentences", []))
	]
	return _insert(db, word, text, lambda: find_word(db, text))


def store_idiom(db: Session, entry: Dict[str, Any]) -> Optional[Idiom]:
	text = entry["text"]
	if find_idiom(db, text) is not None:
		logger.info("Skipping existing idiom: %s", text)
		return None
	return _insert(db, Idiom(**entry), text, lambda: find_idiom(db, text))


def store_pronunciation_guide(db: Session, entry: Dict[str, Any]) -> Optional[PronunciationGuide]:
	word = entry["word"]
	if find_pronunciation_guide(db, word) is not None:
		return None
	return _insert(db, PronunciationGuide(**entry), word, lambda: find_pronunciation_guide(db, word))


def store_batch(
	db: Session,
	entries: List[Dict[str, Any]],
	store: Callable[[Session, Dict[str, Any]], Optional[Any]],
	key: str = "text",
) -> BatchResult:
	result = BatchResult()
	for entry in entries:
		try:
			row = store(db, entry)
		except PersistenceError as exc:
			logger.error("Failed to store %s: %s", entry.get(key), exc)
			result.failed.append(entry.get(key))
			continue
		if row is None:
			result.skipped.append(entry.get(key))
		else:
			result.created.append(row)
	return result
