from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..completion_client import CompletionClient, get_completion_client
from ..db import get_db
from ..errors import ValidationError
from ..models import Idiom, Story
from ..pagination import paginate
from ..pipeline import (
    generate_conversation_starters,
    generate_grammar_lesson,
    generate_pronunciation_guide,
    generate_story,
    generate_word_association,
)
from ..prompts import GRAMMAR_TOPICS
from ..ratelimit import rate_limit
from ..serializers import guide_to_dict, idiom_to_dict, lesson_to_dict, story_to_dict


router = APIRouter(tags=["content"], dependencies=[Depends(rate_limit)])

STORIES_LIMIT = 20


class StoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    theme: Optional[str] = None
    difficulty: Optional[str] = None
    words_to_include: List[str] = Field(default_factory=list, alias="wordsToInclude")


class GrammarRequest(BaseModel):
    topic: Optional[str] = None
    difficulty: Optional[str] = None


class PronunciationRequest(BaseModel):
    word: Optional[str] = None


class DifficultyRequest(BaseModel):
    difficulty: Optional[str] = None


@router.post("/stories/generate")
async def stories_generate(
    req: StoryRequest,
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    story = await generate_story(
        db,
        client,
        theme=req.theme or "adventure",
        difficulty=req.difficulty or "intermediate",
        words_to_include=[w.strip() for w in req.words_to_include if w and w.strip()],
    )
    return {"data": story_to_dict(story)}


@router.get("/stories")
async def stories(db: Session = Depends(get_db)):
    rows = db.query(Story).order_by(Story.created_at.desc()).limit(STORIES_LIMIT).all()
    return {"data": [story_to_dict(s) for s in rows]}


@router.post("/grammar/lesson")
async def grammar_lesson(
    req: GrammarRequest,
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    topic = (req.topic or "").strip()
    if not topic:
        raise ValidationError("Grammar topic is required")
    lesson = await generate_grammar_lesson(db, client, topic=topic, difficulty=req.difficulty or "intermediate")
    return {"data": lesson_to_dict(lesson)}


@router.get("/grammar/topics")
async def grammar_topics():
    return {"data": GRAMMAR_TOPICS}


@router.post("/pronunciation/guide")
async def pronunciation_guide(
    req: PronunciationRequest,
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    word = (req.word or "").strip()
    if not word:
        raise ValidationError("Word is required")
    guide = await generate_pronunciation_guide(db, client, word=word)
    return {"data": guide_to_dict(guide)}


@router.post("/games/word-association")
async def word_association(req: DifficultyRequest, client: CompletionClient = Depends(get_completion_client)):
    return {"data": await generate_word_association(client, difficulty=req.difficulty or "intermediate")}


@router.post("/conversation/starters")
async def conversation_starters(req: DifficultyRequest, client: CompletionClient = Depends(get_completion_client)):
    return {"data": await generate_conversation_starters(client, difficulty=req.difficulty or "intermediate")}


@router.get("/idioms")
async def idioms(cursor: Optional[str] = None, limit: int = Query(default=20), db: Session = Depends(get_db)):
    page = paginate(db.query(Idiom), Idiom, cursor=cursor, limit=limit)
    return {
        "data": [idiom_to_dict(i) for i in page.items],
        "nextCursor": page.next_cursor,
        "hasMore": page.has_more,
    }
