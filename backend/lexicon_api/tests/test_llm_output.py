import pytest

from lexicon_api.errors import ParseError, UpstreamError
from lexicon_api.llm_output import (
    extract_json_array,
    extract_json_object,
    parse_json_array,
    parse_json_object,
    strip_code_fences,
)


@pytest.mark.parametrize(
    "raw",
    [
        '```json\n[{"text": "cogent"}]\n```',
        '```json\n[{"text": "cogent"}]```',
        '  ```json\r\n[{"text": "cogent"}]\n```\n',
        '```\n[{"text": "cogent"}]\n```',
    ],
)
def test_strip_code_fences_returns_inner_content(raw):
    assert strip_code_fences(raw) == '[{"text": "cogent"}]'


def test_strip_code_fences_leaves_unfenced_text_trimmed():
    assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'
    assert strip_code_fences("") == ""


def test_strip_code_fences_only_removes_outer_fences():
    raw = '```json\n{"code": "use ``` for blocks"}\n```'
    assert strip_code_fences(raw) == '{"code": "use ``` for blocks"}'


def test_extract_json_array_ignores_commentary():
    raw = 'Here are your words:\n[{"text": "alacrity"}, {"text": "tenuous"}]\nEnjoy!'
    assert extract_json_array(raw) == '[{"text": "alacrity"}, {"text": "tenuous"}]'


def test_extract_json_array_handles_nested_arrays_and_brackets_in_strings():
    block = '[{"text": "esoteric", "synonyms": ["arcane", "obscure"], "note": "ends with ]"}]'
    raw = f"Sure [see below]: {block} -- done [1]"
    assert extract_json_array(raw) == block


def test_extract_json_array_without_array_fails():
    with pytest.raises(ParseError, match="no JSON array found"):
        extract_json_array("I could not think of any words today.")


def test_extract_json_object_skips_unbalanced_prefix():
    assert extract_json_object('note: { broken\n{"quote": "Learn."}') == '{"quote": "Learn."}'
    assert extract_json_object('The answer is {"quote": "Learn."} ok') == '{"quote": "Learn."}'


def test_parse_json_array_prefers_direct_parse_then_extraction():
    assert parse_json_array('```json\n[{"text": "a"}]\n```') == [{"text": "a"}]
    assert parse_json_array('Result: [{"text": "b"}] (2 tokens)') == [{"text": "b"}]
    assert parse_json_array('{"words": [{"text": "c"}]}') == [{"text": "c"}]


def test_parse_json_array_error_is_an_upstream_error():
    with pytest.raises(UpstreamError):
        parse_json_array("[not json at all")


def test_parse_json_object():
    assert parse_json_object('Here you go: {"fact": "Octopuses have three hearts."}') == {
        "fact": "Octopuses have three hearts."
    }
    with pytest.raises(ParseError):
        parse_json_object("[1, 2, 3]")
