from __future__ import annotations
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFoundError, PersistenceError, ValidationError
from .models import Badge, LearningStreak, UserProgress, VocabularyWord, utcnow

LEARNED_MILESTONES = {
	1: ("First Word", "Learned your first word"),
	10: ("Word Collector", "Learned 10 words"),
	50: ("Wordsmith", "Learned 50 words"),
	100: ("Lexicon Master", "Learned 100 words"),
}
STREAK_MILESTONES = {
	7: ("Week Streak", "Studied 7 days in a row"),
	30: ("Month Streak", "Studied 30 days in a row"),
}


def score_quiz(answers: Sequence[Dict[str, Any]]) -> int:
	"""Percentage of answers flagged ``isCorrect``, rounded half up."""
	if not answers:
		raise ValidationError("Answers array is required")
	correct = sum(1 for a in answers if isinstance(a, dict) and a.get("isCorrect") is True)
	return int(math.floor(correct * 100 / len(answers) + 0.5))


def compute_streak(timestamps: Iterable[datetime], today: Optional[date] = None) -> int:
	"""Number of consecutive study days ending today (or yesterday).

	Several reviews on one day count once; the first missing day ends the walk.
	"""
	days = {ts.date() for ts in timestamps if ts is not None}
	if not days:
		return 0
	day = today or utcnow().date()
	if day not in days:
		day -= timedelta(days=1)
	streak = 0
	while day in days:
		streak += 1
		day -= timedelta(days=1)
	return streak


def _commit(db: Session) -> None:
	try:
		db.commit()
	except SQLAlchemyError as exc:
		db.rollback()
		raise PersistenceError(f"could not save progress: {exc}") from exc


def _award(db: Session, user_id: str, name: str, description: str, owned: set) -> Optional[Badge]:
	if name in owned:
		return None
	badge = Badge(user_id=user_id, name=name, description=description)
	db.add(badge)
	owned.add(name)
	return badge


def refresh_streak_and_badges(db: Session, user_id: str, *, today: Optional[date] = None) -> List[Badge]:
	reviewed = [row[0] for row in db.query(UserProgress.last_reviewed).filter(UserProgress.user_id == user_id).all()]
	current = compute_streak(reviewed, today)
	streak = db.get(LearningStreak, user_id)
	if streak is None:
		streak = LearningStreak(user_id=user_id, current_days=0, longest_days=0)
		db.add(streak)
	streak.current_days = current
	streak.longest_days = max(streak.longest_days or 0, current)

	owned = {name for (name,) in db.query(Badge.name).filter(Badge.user_id == user_id).all()}
	learned = db.query(UserProgress).filter(UserProgress.user_id == user_id, UserProgress.is_learned.is_(True)).count()
	new_badges: List[Badge] = []
	for threshold, (name, description) in LEARNED_MILESTONES.items():
		if learned >= threshold:
			badge = _award(db, user_id, name, description, owned)
			if badge is not None:
				new_badges.append(badge)
	for threshold, (name, description) in STREAK_MILESTONES.items():
		if streak.longest_days >= threshold:
			badge = _award(db, user_id, name, description, owned)
			if badge is not None:
				new_badges.append(badge)
	_commit(db)
	return new_badges


def _get_progress(db: Session, user_id: str, word_id: str) -> Optional[UserProgress]:
	return db.query(UserProgress).filter(UserProgress.user_id == user_id, UserProgress.word_id == word_id).first()


def mark_learned(db: Session, user_id: str, word_id: str) -> UserProgress:
	if db.get(VocabularyWord, word_id) is None:
		raise NotFoundError("Word not found")
	row = _get_progress(db, user_id, word_id)
	if row is None:
		row = UserProgress(user_id=user_id, word_id=word_id, review_count=0)
		db.add(row)
	row.is_learned = True
	row.review_count = (row.review_count or 0) + 1
	row.last_reviewed = utcnow()
	_commit(db)
	refresh_streak_and_badges(db, user_id)
	db.refresh(row)
	return row


def touch_review(db: Session, user_id: str, word_id: str) -> UserProgress:
	"""Record that user saw word without marking it learned."""
	row = _get_progress(db, user_id, word_id)
	if row is None:
		row = UserProgress(user_id=user_id, word_id=word_id)
		db.add(row)
	row.last_reviewed = utcnow()
	_commit(db)
	return row


def progress_stats(rows: Sequence[UserProgress]) -> Dict[str, Any]:
	total = len(rows)
	return {
		"totalWords": total,
		"learnedWords": sum(1 for p in rows if p.is_learned),
		"streakDays": compute_streak([p.last_reviewed for p in rows]),
		"averageReviewCount": (sum(p.review_count for p in rows) / total) if total else 0,
	}
