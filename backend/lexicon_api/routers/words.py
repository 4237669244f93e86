from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, selectinload

from ..db import get_db
from ..errors import NotFoundError
from ..models import User, VocabularyWord
from ..pagination import list_words, search_words
from ..progress import mark_learned
from ..ratelimit import rate_limit
from ..serializers import word_to_dict
from .auth import get_current_user


router = APIRouter(prefix="/words", tags=["words"], dependencies=[Depends(rate_limit)])


@router.get("")
async def get_words(
    cursor: Optional[str] = None,
    limit: int = Query(default=20),
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    page = list_words(db, cursor=cursor, limit=limit, difficulty=difficulty, category=category)
    return {
        "data": [word_to_dict(w) for w in page.items],
        "nextCursor": page.next_cursor,
        "hasMore": page.has_more,
    }


@router.get("/search")
async def search(q: str = "", db: Session = Depends(get_db)):
    return {"data": [word_to_dict(w) for w in search_words(db, q)]}


@router.get("/{word_id}")
async def get_word(word_id: str, db: Session = Depends(get_db)):
    word = (
        db.query(VocabularyWord)
        .options(
            selectinload(VocabularyWord.synonyms),
            selectinload(VocabularyWord.antonyms),
            selectinload(VocabularyWord.sentences),
        )
        .filter(VocabularyWord.id == word_id)
        .first()
    )
    if word is None:
        raise NotFoundError("Word not found")
    return {"data": word_to_dict(word)}


@router.post("/{word_id}/learned")
async def learned(word_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    row = mark_learned(db, user.id, word_id)
    return {
        "message": "Word marked as learned",
        "success": True,
        "data": {"wordId": row.word_id, "reviewCount": row.review_count, "isLearned": row.is_learned},
    }
