from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..completion_client import CompletionClient, get_completion_client
from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..models import ANONYMOUS_USER_ID, Quiz, QuizResult, User
from ..pipeline import generate_quiz
from ..progress import score_quiz
from ..prompts import QUIZ_TYPES
from ..ratelimit import rate_limit
from ..serializers import result_to_dict
from .auth import get_optional_user


router = APIRouter(prefix="/quiz", tags=["quiz"], dependencies=[Depends(rate_limit)])

MAX_QUESTIONS = 50


class GenerateQuizRequest(BaseModel):
    type: Optional[str] = None
    difficulty: Optional[str] = None
    count: Optional[int] = None


class SubmitQuizRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answers: Optional[List[Dict[str, Any]]] = None
    quiz_id: Optional[str] = Field(default=None, alias="quizId")


@router.get("/types")
async def quiz_types():
    return {"data": QUIZ_TYPES}


@router.post("/generate")
async def generate(
    req: GenerateQuizRequest,
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
):
    if not req.type:
        raise ValidationError("Quiz type is required")
    count = min(req.count or 10, MAX_QUESTIONS)
    if count < 1:
        raise ValidationError("count must be positive")
    quiz = await generate_quiz(
        db,
        client,
        quiz_type=req.type,
        difficulty=req.difficulty or "intermediate",
        count=count,
    )
    return {"data": quiz}


@router.post("/submit")
async def submit(
    req: SubmitQuizRequest,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not req.answers:
        raise ValidationError("Answers array is required")
    if req.quiz_id and db.get(Quiz, req.quiz_id) is None:
        raise NotFoundError("Quiz not found")
    result = QuizResult(
        user_id=user.id if user else ANONYMOUS_USER_ID,
        quiz_id=req.quiz_id,
        answers=json.dumps(req.answers, ensure_ascii=False),
        score=score_quiz(req.answers),
    )
    db.add(result)
    db.commit()
    db.refresh(result)
    return {"data": result_to_dict(result), "success": True}
