from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload, selectinload

from ..db import get_db
from ..errors import NotFoundError
from ..models import User, UserProgress, VocabularyWord
from ..progress import progress_stats, touch_review
from ..ratelimit import rate_limit
from ..serializers import progress_to_dict, word_to_dict
from .auth import get_current_user


router = APIRouter(tags=["progress"], dependencies=[Depends(rate_limit)])


@router.get("/progress")
async def progress(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = (
        db.query(UserProgress)
        .options(joinedload(UserProgress.word))
        .filter(UserProgress.user_id == user.id)
        .order_by(UserProgress.last_reviewed.desc())
        .all()
    )
    return {
        "data": {"progress": [progress_to_dict(p) for p in rows], "stats": progress_stats(rows)},
        "success": True,
    }


@router.get("/widget/word/next")
async def widget_next_word(userId: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(VocabularyWord).options(
        selectinload(VocabularyWord.synonyms),
        selectinload(VocabularyWord.antonyms),
        selectinload(VocabularyWord.sentences),
    )
    if userId:
        query = query.filter(~VocabularyWord.progress.any(UserProgress.user_id == userId))
    word = query.order_by(VocabularyWord.created_at.desc(), VocabularyWord.id.desc()).first()
    if word is None:
        raise NotFoundError("No word available")
    # Views are only tracked for known users
    if userId and db.get(User, userId) is not None:
        touch_review(db, userId, word.id)
    return {"data": word_to_dict(word)}
