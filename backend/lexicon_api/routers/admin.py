from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Idiom, QuizResult, User, UserProgress, VocabularyWord
from ..ratelimit import rate_limit
from ..scheduler import JobRunner, get_job_runner
from .auth import require_admin


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(rate_limit), Depends(require_admin)],
)


@router.post("/generate-words")
async def generate_words(runner: JobRunner = Depends(get_job_runner)):
    result = await runner.run("words")
    return {"message": "Generated new vocabulary words.", "success": True, "data": result}


@router.post("/generate-idioms")
async def generate_idioms(runner: JobRunner = Depends(get_job_runner)):
    result = await runner.run("idioms")
    return {"message": "Generated new idioms.", "success": True, "data": result}


@router.post("/generate-daily-content")
async def generate_daily_content(runner: JobRunner = Depends(get_job_runner)):
    await runner.run("quote")
    await runner.run("fact")
    return {"message": "Generated daily content.", "success": True}


@router.post("/cleanup")
async def cleanup(runner: JobRunner = Depends(get_job_runner)):
    removed = await runner.run("cleanup")
    return {"message": "Completed data cleanup.", "success": True, "data": removed}


@router.get("/stats")
async def stats(db: Session = Depends(get_db), runner: JobRunner = Depends(get_job_runner)):
    learners = db.query(func.count(func.distinct(UserProgress.user_id))).scalar() or 0
    return {
        "success": True,
        "data": {
            "totalWords": db.query(VocabularyWord).count(),
            "totalIdioms": db.query(Idiom).count(),
            "totalQuizzes": db.query(QuizResult).count(),
            "totalUsers": db.query(User).count(),
            "activeLearners": learners,
            "jobs": runner.states(),
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        },
    }
