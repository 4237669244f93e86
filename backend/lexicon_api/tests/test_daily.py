import asyncio

import pytest

from lexicon_api.db import SessionLocal
from lexicon_api.models import DailyQuote, FactOfTheDay
from lexicon_api.prompts import ContentType
from lexicon_api.routers.daily import daily_fact, daily_quote


def run_concurrently(endpoint, runner, fake_llm, requests=2):
    sessions = [SessionLocal() for _ in range(requests)]

    async def main():
        return await asyncio.gather(*(endpoint(db=s, client=fake_llm, runner=runner) for s in sessions))

    try:
        return asyncio.run(main())
    finally:
        for s in sessions:
            s.close()


@pytest.mark.parametrize(
    "endpoint,content_type,payload,model",
    [
        (daily_quote, ContentType.QUOTE, {"quote": "Every word counts."}, DailyQuote),
        (daily_fact, ContentType.FACT, {"fact": "Honey never spoils."}, FactOfTheDay),
    ],
)
def test_concurrent_misses_generate_once(db, runner, fake_llm, endpoint, content_type, payload, model):
    fake_llm.delay = 0.05
    # a second response is available, so a duplicate generation would succeed
    fake_llm.queue(content_type, payload, payload)

    responses = run_concurrently(endpoint, runner, fake_llm)

    ids = {r["data"]["id"] for r in responses}
    assert len(ids) == 1
    assert db.query(model).count() == 1
    assert len(fake_llm.calls) == 1
