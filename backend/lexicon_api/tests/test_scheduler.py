import asyncio
from datetime import datetime, timedelta

import pytest

from lexicon_api.cleanup import purge_stale_content
from lexicon_api.db import engine
from lexicon_api.errors import PersistenceError, UpstreamError
from lexicon_api.models import ANONYMOUS_USER_ID, DailyQuote, FactOfTheDay, QuizResult, VocabularyWord
from lexicon_api.prompts import ContentType
from lexicon_api.scheduler import IDLE, RUNNING, JobRunner, Schedule, next_run_at

from conftest import make_word


@pytest.mark.parametrize(
    "now,schedule,expected",
    [
        (datetime(2026, 5, 20, 0, 3), Schedule("quote", hour=0, minute=5), datetime(2026, 5, 20, 0, 5)),
        (datetime(2026, 5, 20, 0, 5), Schedule("quote", hour=0, minute=5), datetime(2026, 5, 21, 0, 5)),
        (datetime(2026, 5, 20, 12, 0), Schedule("words", hour=0), datetime(2026, 5, 21, 0, 0)),
        # 2026-05-20 is a Wednesday
        (datetime(2026, 5, 20, 12, 0), Schedule("cleanup", hour=3, weekday=6), datetime(2026, 5, 24, 3, 0)),
        (datetime(2026, 5, 24, 4, 0), Schedule("cleanup", hour=3, weekday=6), datetime(2026, 5, 31, 3, 0)),
        (datetime(2026, 5, 24, 2, 0), Schedule("cleanup", hour=3, weekday=6), datetime(2026, 5, 24, 3, 0)),
    ],
)
def test_next_run_at(now, schedule, expected):
    assert next_run_at(now, schedule) == expected


def test_words_job_stores_batch_and_marks_word_of_the_day(db, runner, fake_llm):
    fake_llm.queue(ContentType.WORDS, [{"text": "Halcyon"}, {"text": "petrichor"}])
    result = asyncio.run(runner.run("words"))

    assert result == {"created": 2, "skipped": 0, "failed": 0}
    flagged = db.query(VocabularyWord).filter_by(is_word_of_the_day=True).all()
    assert [w.text for w in flagged] == ["halcyon"]
    assert fake_llm.closed == 1
    assert runner.state("words") == IDLE


def test_quote_job_reuses_todays_quote(db, runner, fake_llm):
    fake_llm.queue(ContentType.QUOTE, {"quote": "Read widely."})
    first = asyncio.run(runner.run("quote"))
    second = asyncio.run(runner.run("quote"))
    assert first.id == second.id
    assert db.query(DailyQuote).count() == 1


def test_manual_run_propagates_failures(runner):
    with pytest.raises(UpstreamError):
        asyncio.run(runner.run("fact"))
    assert runner.state("fact") == IDLE


def test_scheduled_run_swallows_failures(db, runner):
    assert asyncio.run(runner.run("fact", raise_errors=False)) is None
    assert db.query(FactOfTheDay).count() == 0


def test_runs_of_one_kind_never_overlap(db, fake_llm):
    active = {"now": 0, "max": 0}
    seen = []

    async def slow_job(session, client):
        active["now"] += 1
        active["max"] = max(active["max"], active["now"])
        seen.append(runner.state("slow"))
        await asyncio.sleep(0.01)
        active["now"] -= 1
        return "done"

    runner = JobRunner({"slow": slow_job, "other": slow_job}, client_factory=lambda: fake_llm)

    async def main():
        return await asyncio.gather(runner.run("slow"), runner.run("slow"), runner.run("other"))

    assert asyncio.run(main()) == ["done", "done", "done"]
    # the unrelated kind may run alongside, the same kind may not
    assert active["max"] == 2
    assert seen.count(RUNNING) >= 2


def test_cleanup_respects_retention(db):
    now = datetime(2026, 5, 20, 3, 0)
    db.add_all(
        [
            DailyQuote(quote="old", created_at=now - timedelta(days=31)),
            DailyQuote(quote="fresh", created_at=now - timedelta(days=29)),
            FactOfTheDay(fact="old", created_at=now - timedelta(days=40)),
            QuizResult(user_id=ANONYMOUS_USER_ID, answers="[]", score=10, completed_at=now - timedelta(days=8)),
            QuizResult(user_id=ANONYMOUS_USER_ID, answers="[]", score=20, completed_at=now - timedelta(days=2)),
            QuizResult(user_id="someone", answers="[]", score=30, completed_at=now - timedelta(days=300)),
        ]
    )
    db.commit()
    make_word(db, "timeless", created_at=now - timedelta(days=400))

    removed = purge_stale_content(db, now=now, daily_retention_days=30, anonymous_retention_days=7)

    assert removed == {"daily_quotes": 1, "facts_of_the_day": 1, "quiz_results": 1}
    assert [q.quote for q in db.query(DailyQuote)] == ["fresh"]
    assert sorted(r.score for r in db.query(QuizResult)) == [20, 30]
    assert db.query(VocabularyWord).count() == 1


def test_cleanup_job_does_not_need_a_completion_client(db):
    def no_client():
        raise AssertionError("cleanup must not build a client")

    runner = JobRunner(client_factory=no_client)
    assert asyncio.run(runner.run("cleanup")) == {"daily_quotes": 0, "facts_of_the_day": 0, "quiz_results": 0}


def test_zero_retention_purges_everything_older_than_now(db):
    now = datetime(2026, 5, 20, 3, 0)
    db.add(DailyQuote(quote="an hour ago", created_at=now - timedelta(hours=1)))
    db.add(QuizResult(user_id=ANONYMOUS_USER_ID, answers="[]", score=5, completed_at=now - timedelta(hours=1)))
    db.commit()

    removed = purge_stale_content(db, now=now, daily_retention_days=0, anonymous_retention_days=0)

    assert removed["daily_quotes"] == 1
    assert removed["quiz_results"] == 1


def test_cleanup_database_failure_is_a_persistence_error(db):
    QuizResult.__table__.drop(bind=engine)
    with pytest.raises(PersistenceError, match="cleanup failed"):
        purge_stale_content(db)
