from __future__ import annotations
from datetime import datetime, timedelta
from typing import Dict, Optional
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import PersistenceError
from .models import ANONYMOUS_USER_ID, DailyQuote, FactOfTheDay, QuizResult, utcnow
from .settings import settings


def purge_stale_content(
	db: Session,
	*,
	now: Optional[datetime] = None,
	daily_retention_days: Optional[int] = None,
	anonymous_retention_days: Optional[int] = None,
) -> Dict[str, int]:
	now = now or utcnow()
	if daily_retention_days is None:
		daily_retention_days = settings.daily_content_retention_days
	if anonymous_retention_days is None:
		anonymous_retention_days = settings.anonymous_result_retention_days
	daily_threshold = now - timedelta(days=daily_retention_days)
	anon_threshold = now - timedelta(days=anonymous_retention_days)
	removed: Dict[str, int] = {}

	try:
		for model in (DailyQuote, FactOfTheDay):
			res = db.execute(delete(model).where(model.created_at < daily_threshold))
			removed[model.__tablename__] = res.rowcount or 0

		# Results of signed-in users are kept; they feed profile stats
		res = db.execute(
			delete(QuizResult).where(QuizResult.user_id == ANONYMOUS_USER_ID, QuizResult.completed_at < anon_threshold)
		)
		removed[QuizResult.__tablename__] = res.rowcount or 0

		db.commit()
	except SQLAlchemyError as exc:
		db.rollback()
		raise PersistenceError(f"cleanup failed: {exc}") from exc
	return removed
