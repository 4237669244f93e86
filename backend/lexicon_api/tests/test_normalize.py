import json

from lexicon_api.normalize import (
    normalize_idiom_batch,
    normalize_pronunciation_guide,
    normalize_quiz,
    normalize_quote,
    normalize_word,
    normalize_word_batch,
    sentence_difficulty,
)


def test_word_is_lowercased_and_lists_defaulted():
    word = normalize_word({"text": "  Pernicious ", "meaningHindi": "हानिकारक"})
    assert word["text"] == "pernicious"
    assert word["meaning_hindi"] == "हानिकारक"
    assert word["synonyms"] == []
    assert word["antonyms"] == []
    assert word["sentences"] == []
    assert word["common_mistakes"] == "[]"
    assert word["related_words"] == "[]"


def test_word_side_lists_are_serialized_and_children_cleaned():
    word = normalize_word(
        {
            "text": "cogent",
            "synonyms": ["Convincing", "", None, "Compelling"],
            "antonyms": "Weak",
            "sentences": ["Her argument was cogent."],
            "commonMistakes": [{"wrong": "cogant", "right": "cogent"}],
            "relatedWords": "cogency",
        }
    )
    assert word["synonyms"] == ["convincing", "compelling"]
    assert word["antonyms"] == ["weak"]
    assert word["sentences"] == ["Her argument was cogent."]
    assert json.loads(word["common_mistakes"]) == [{"wrong": "cogant", "right": "cogent"}]
    assert json.loads(word["related_words"]) == ["cogency"]


def test_batch_drops_entries_without_text_and_duplicates():
    batch = normalize_word_batch(
        [{"text": "Alacrity"}, {"meaningHindi": "no text"}, "garbage", {"text": "alacrity"}, {"text": "tenuous"}]
    )
    assert [w["text"] for w in batch] == ["alacrity", "tenuous"]


def test_empty_batch_is_a_no_op():
    assert normalize_word_batch([{"foo": 1}, 3]) == []


def test_sentence_difficulty_by_position():
    assert [sentence_difficulty(i) for i in range(4)] == ["intermediate", "advanced", "expert", "expert"]


def test_idioms_require_idiom_text():
    batch = normalize_idiom_batch([{"idiom": "Break The Ice", "examples": ["x"]}, {"meaning": "nothing"}])
    assert len(batch) == 1
    assert batch[0]["text"] == "break the ice"
    assert json.loads(batch[0]["examples"]) == ["x"]


def test_quiz_keeps_only_answerable_questions():
    questions = normalize_quiz(
        {
            "questions": [
                {"question": "Synonym of cogent?", "options": ["a", "b"], "correctAnswer": "a"},
                {"question": "No answer"},
                {"correctAnswer": "orphan"},
            ]
        }
    )
    assert len(questions) == 1
    assert questions[0]["options"] == ["a", "b"]
    assert normalize_quiz({"items": []}) == []


def test_single_object_types_return_none_when_unusable():
    assert normalize_quote({"author": "Anon"}) is None
    assert normalize_quote(["not", "an", "object"]) is None
    assert normalize_pronunciation_guide({"syllables": "ca-fé"}, "Cafe") is None
    guide = normalize_pronunciation_guide({"ipa": "/kæˈfeɪ/", "soundTips": None}, " Cafe ")
    assert guide["word"] == "cafe"
    assert guide["sound_tips"] == "[]"
