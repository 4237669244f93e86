from datetime import datetime

import pytest

from lexicon_api.errors import ValidationError
from lexicon_api.pagination import MAX_LIMIT, clamp_limit, list_words, search_words

from conftest import make_word, make_words


def test_pages_follow_the_cursor(db):
    words = make_words(db, 5)

    first = list_words(db, limit=2)
    assert [w.text for w in first.items] == ["w0", "w1"]
    assert first.next_cursor == words[1].id
    assert first.has_more

    second = list_words(db, limit=2, cursor=first.next_cursor)
    assert [w.text for w in second.items] == ["w2", "w3"]

    last = list_words(db, limit=2, cursor=second.next_cursor)
    assert [w.text for w in last.items] == ["w4"]
    assert not last.has_more


def test_ties_on_created_at_are_broken_by_id(db):
    stamp = datetime(2026, 3, 1, 9, 0, 0)
    for text in ("a", "b", "c"):
        make_word(db, text, created_at=stamp)

    seen = []
    cursor = None
    while True:
        page = list_words(db, limit=1, cursor=cursor)
        if not page.items:
            break
        seen.extend(w.id for w in page.items)
        cursor = page.next_cursor
    assert len(seen) == 3
    assert seen == sorted(seen, reverse=True)


def test_empty_table_has_no_cursor(db):
    page = list_words(db)
    assert page.items == []
    assert page.next_cursor is None
    assert not page.has_more


def test_unknown_cursor_is_rejected(db):
    with pytest.raises(ValidationError, match="invalid cursor"):
        list_words(db, cursor="does-not-exist")


def test_filters_apply_before_paging(db):
    make_word(db, "easy-one", difficulty="beginner")
    make_word(db, "hard-one", difficulty="expert", category="science")
    assert [w.text for w in list_words(db, difficulty="expert").items] == ["hard-one"]
    assert [w.text for w in list_words(db, category="science").items] == ["hard-one"]


@pytest.mark.parametrize("raw,expected", [(None, 20), (0, 1), (-5, 1), (50, 50), (1000, MAX_LIMIT)])
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw) == expected


def test_search_matches_text_meaning_and_synonyms(db):
    make_word(db, "gregarious", synonyms=["sociable"])
    make_word(db, "aloof", meaning_hindi="अलग")
    make_word(db, "100%_pure")

    assert [w.text for w in search_words(db, "GREG")] == ["gregarious"]
    assert [w.text for w in search_words(db, "sociab")] == ["gregarious"]
    assert [w.text for w in search_words(db, "अलग")] == ["aloof"]
    assert [w.text for w in search_words(db, "%_")] == ["100%_pure"]


def test_search_requires_a_query(db):
    with pytest.raises(ValidationError):
        search_words(db, "   ")
