from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..completion_client import CompletionClient, get_completion_client
from ..db import get_db
from ..models import DailyQuote, FactOfTheDay, VocabularyWord
from ..pipeline import find_today, generate_daily_quote, generate_fact_of_the_day, start_of_today
from ..ratelimit import rate_limit
from ..scheduler import JobRunner, get_job_runner
from ..serializers import fact_to_dict, quote_to_dict, word_to_dict


router = APIRouter(prefix="/daily", tags=["daily"], dependencies=[Depends(rate_limit)])


@router.get("/quote")
async def daily_quote(
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
    runner: JobRunner = Depends(get_job_runner),
):
    quote = find_today(db, DailyQuote)
    if quote is None:
        # Same lock as the scheduled job; whoever waits re-checks instead of generating twice
        async with runner.lock_for("quote"):
            quote = find_today(db, DailyQuote)
            if quote is None:
                quote = await generate_daily_quote(db, client)
    return {"data": quote_to_dict(quote)}


@router.get("/fact")
async def daily_fact(
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(get_completion_client),
    runner: JobRunner = Depends(get_job_runner),
):
    fact = find_today(db, FactOfTheDay)
    if fact is None:
        async with runner.lock_for("fact"):
            fact = find_today(db, FactOfTheDay)
            if fact is None:
                fact = await generate_fact_of_the_day(db, client)
    return {"data": fact_to_dict(fact)}


@router.get("/word")
async def daily_word(db: Session = Depends(get_db)):
    word = (
        db.query(VocabularyWord)
        .filter(VocabularyWord.is_word_of_the_day.is_(True), VocabularyWord.created_at >= start_of_today())
        .order_by(VocabularyWord.created_at.desc())
        .first()
    )
    return {"data": word_to_dict(word) if word else None}
