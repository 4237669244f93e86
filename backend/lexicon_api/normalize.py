"""Validate and clean parsed model output before it reaches the database.

None of these functions raise: unusable entries are dropped (batch types) or
reported as ``None`` (single-object types).
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SENTENCE_DIFFICULTIES = ("intermediate", "advanced", "expert")


def _str_or_none(value: Any) -> Optional[str]:
	if value is None:
		return None
	if isinstance(value, (dict, list)):
		return json.dumps(value, ensure_ascii=False)
	text = str(value).strip()
	return text or None


def _string_list(value: Any, *, lower: bool = False) -> List[str]:
	if value is None:
		return []
	if isinstance(value, str):
		value = [value]
	if not isinstance(value, list):
		return []
	out: List[str] = []
	for item in value:
		if item is None or isinstance(item, (dict, list)):
			continue
		text = str(item).strip()
		if text:
			out.append(text.lower() if lower else text)
	return out


def _json_list(value: Any) -> str:
	"""Serialize a free-form side list for a single text column."""
	if value is None:
		value = []
	elif not isinstance(value, list):
		value = [value]
	return json.dumps(value, ensure_ascii=False)


def sentence_difficulty(index: int) -> str:
	return SENTENCE_DIFFICULTIES[min(index, len(SENTENCE_DIFFICULTIES) - 1)]


def normalize_word(entry: Any) -> Optional[Dict[str, Any]]:
	if not isinstance(entry, dict):
		return None
	text = _str_or_none(entry.get("text"))
	if not text:
		return None
	return {
		"text": text.lower(),
		"meaning_hindi": _str_or_none(entry.get("meaningHindi")),
		"meaning_gujarati": _str_or_none(entry.get("meaningGujarati")),
		"pronunciation": _str_or_none(entry.get("pronunciation")),
		"part_of_speech": _str_or_none(entry.get("partOfSpeech")),
		"difficulty": _str_or_none(entry.get("difficulty")),
		"category": _str_or_none(entry.get("category")),
		"etymology": _str_or_none(entry.get("etymology")),
		"mnemonic_trick": _str_or_none(entry.get("mnemonicTrick")),
		"common_mistakes": _json_list(entry.get("commonMistakes")),
		"related_words": _json_list(entry.get("relatedWords")),
		"synonyms": _string_list(entry.get("synonyms"), lower=True),
		"antonyms": _string_list(entry.get("antonyms"), lower=True),
		"sentences": _string_list(entry.get("sentences")),
	}


def normalize_word_batch(entries: List[Any]) -> List[Dict[str, Any]]:
	out: List[Dict[str, Any]] = []
	seen = set()
	for i, entry in enumerate(entries):
		word = normalize_word(entry)
		if word is None:
			logger.warning("Dropping word entry %d: missing text", i)
			continue
		if word["text"] in seen:
			continue
		seen.add(word["text"])
		out.append(word)
	return out


def normalize_idiom(entry: Any) -> Optional[Dict[str, Any]]:
	if not isinstance(entry, dict):
		return None
	text = _str_or_none(entry.get("idiom"))
	if not text:
		return None
	return {
		"text": text.lower(),
		"meaning": _str_or_none(entry.get("meaning")),
		"hindi_translation": _str_or_none(entry.get("hindiTranslation")),
		"gujarati_translation": _str_or_none(entry.get("gujaratiTranslation")),
		"examples": _json_list(entry.get("examples")),
		"origin": _str_or_none(entry.get("origin")),
		"difficulty": _str_or_none(entry.get("difficulty")),
		"category": _str_or_none(entry.get("category")),
	}


def normalize_idiom_batch(entries: List[Any]) -> List[Dict[str, Any]]:
	out: List[Dict[str, Any]] = []
	for i, entry in enumerate(entries):
		idiom = normalize_idiom(entry)
		if idiom is None:
			logger.warning("Dropping idiom entry %d: missing idiom", i)
			continue
		out.append(idiom)
	return out


def normalize_quiz(data: Any) -> List[Dict[str, Any]]:
	"""Return the usable questions of a quiz payload."""
	if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
		return []
	questions: List[Dict[str, Any]] = []
	for q in data["questions"]:
		if not isinstance(q, dict):
			continue
		question = _str_or_none(q.get("question"))
		answer = q.get("correctAnswer")
		if not question or answer is None or answer == "":
			continue
		questions.append({
			"question": question,
			"options": q.get("options") if isinstance(q.get("options"), list) else [],
			"correctAnswer": answer,
			"explanation": _str_or_none(q.get("explanation")),
			"difficulty": _str_or_none(q.get("difficulty")),
			"wordId": _str_or_none(q.get("wordId")),
		})
	return questions


def normalize_quote(data: Any) -> Optional[Dict[str, Any]]:
	if not isinstance(data, dict) or not _str_or_none(data.get("quote")):
		return None
	return {
		"quote": _str_or_none(data.get("quote")),
		"author": _str_or_none(data.get("author")),
		"hindi_translation": _str_or_none(data.get("hindiTranslation")),
		"gujarati_translation": _str_or_none(data.get("gujaratiTranslation")),
		"explanation": _str_or_none(data.get("explanation")),
		"relevance_to_learning": _str_or_none(data.get("relevanceToLearning")),
	}


def normalize_fact(data: Any, topic: str) -> Optional[Dict[str, Any]]:
	if not isinstance(data, dict) or not _str_or_none(data.get("fact")):
		return None
	return {
		"fact": _str_or_none(data.get("fact")),
		"topic": _str_or_none(data.get("topic")) or topic,
		"hindi_translation": _str_or_none(data.get("hindiTranslation")),
		"gujarati_translation": _str_or_none(data.get("gujaratiTranslation")),
		"explanation": _str_or_none(data.get("explanation")),
		"did_you_know": _str_or_none(data.get("didYouKnow")),
		"source": _str_or_none(data.get("source")),
	}


def normalize_story(data: Any) -> Optional[Dict[str, Any]]:
	if not isinstance(data, dict):
		return None
	title = _str_or_none(data.get("title"))
	content = _str_or_none(data.get("story"))
	if not title or not content:
		return None
	return {
		"title": title,
		"content": content,
		"moral_lesson": _str_or_none(data.get("moralLesson")),
		"vocabulary_highlights": _json_list(data.get("vocabularyHighlights")),
		"comprehension_questions": _json_list(data.get("comprehensionQuestions")),
		"hindi_summary": _str_or_none(data.get("hindiSummary")),
		"gujarati_summary": _str_or_none(data.get("gujaratiSummary")),
	}


def normalize_grammar_lesson(data: Any) -> Optional[Dict[str, Any]]:
	if not isinstance(data, dict) or not _str_or_none(data.get("title")):
		return None
	return {
		"title": _str_or_none(data.get("title")),
		"explanation": _str_or_none(data.get("explanation")),
		"rules": _json_list(data.get("rules")),
		"examples": _json_list(data.get("examples")),
		"common_mistakes": _json_list(data.get("commonMistakes")),
		"practice_exercises": _json_list(data.get("practiceExercises")),
		"tips": _json_list(data.get("tips")),
		"hindi_explanation": _str_or_none(data.get("hindiExplanation")),
		"gujarati_explanation": _str_or_none(data.get("gujaratiExplanation")),
	}


def normalize_pronunciation_guide(data: Any, word: str) -> Optional[Dict[str, Any]]:
	if not isinstance(data, dict) or not _str_or_none(data.get("ipa")):
		return None
	return {
		"word": word.strip().lower(),
		"ipa": _str_or_none(data.get("ipa")),
		"syllables": _str_or_none(data.get("syllables")),
		"stress": _str_or_none(data.get("stress")),
		"sound_tips": _json_list(data.get("soundTips")),
		"similar_sounds": _json_list(data.get("similarSounds")),
		"common_errors": _json_list(data.get("commonErrors")),
		"practice_phrase": _str_or_none(data.get("practicePhrase")),
		"audio_description": _str_or_none(data.get("audioDescription")),
	}
