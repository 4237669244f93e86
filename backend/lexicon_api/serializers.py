"""Response shapes. JSON keys are camelCase to match the public API."""
from __future__ import annotations
import json
from datetime import datetime
from typing import Any, Dict, Optional

from .models import (
	Badge,
	DailyQuote,
	FactOfTheDay,
	GrammarLesson,
	Idiom,
	PronunciationGuide,
	QuizResult,
	Story,
	User,
	UserProgress,
	VocabularyWord,
)


def _iso(value: Optional[datetime]) -> Optional[str]:
	return value.isoformat() if value else None


def _json(text: Optional[str]) -> Any:
	if not text:
		return []
	try:
		return json.loads(text)
	except ValueError:
		return []


def word_to_dict(word: VocabularyWord) -> Dict[str, Any]:
	return {
		"id": word.id,
		"text": word.text,
		"meaningHindi": word.meaning_hindi,
		"meaningGujarati": word.meaning_gujarati,
		"pronunciation": word.pronunciation,
		"partOfSpeech": word.part_of_speech,
		"difficulty": word.difficulty,
		"category": word.category,
		"etymology": word.etymology,
		"mnemonicTrick": word.mnemonic_trick,
		"commonMistakes": _json(word.common_mistakes),
		"relatedWords": _json(word.related_words),
		"isWordOfTheDay": word.is_word_of_the_day,
		"createdAt": _iso(word.created_at),
		"synonyms": [s.text for s in word.synonyms],
		"antonyms": [a.text for a in word.antonyms],
		"sentences": [{"text": s.text, "difficulty": s.difficulty} for s in word.sentences],
	}


def idiom_to_dict(idiom: Idiom) -> Dict[str, Any]:
	return {
		"id": idiom.id,
		"idiom": idiom.text,
		"meaning": idiom.meaning,
		"hindiTranslation": idiom.hindi_translation,
		"gujaratiTranslation": idiom.gujarati_translation,
		"examples": _json(idiom.examples),
		"origin": idiom.origin,
		"difficulty": idiom.difficulty,
		"category": idiom.category,
		"createdAt": _iso(idiom.created_at),
	}


def quote_to_dict(quote: DailyQuote) -> Dict[str, Any]:
	return {
		"id": quote.id,
		"quote": quote.quote,
		"author": quote.author,
		"hindiTranslation": quote.hindi_translation,
		"gujaratiTranslation": quote.gujarati_translation,
		"explanation": quote.explanation,
		"relevanceToLearning": quote.relevance_to_learning,
		"createdAt": _iso(quote.created_at),
	}


def fact_to_dict(fact: FactOfTheDay) -> Dict[str, Any]:
	return {
		"id": fact.id,
		"fact": fact.fact,
		"topic": fact.topic,
		"hindiTranslation": fact.hindi_translation,
		"gujaratiTranslation": fact.gujarati_translation,
		"explanation": fact.explanation,
		"didYouKnow": fact.did_you_know,
		"source": fact.source,
		"createdAt": _iso(fact.created_at),
	}


def story_to_dict(story: Story) -> Dict[str, Any]:
	return {
		"storyId": story.id,
		"title": story.title,
		"story": story.content,
		"theme": story.theme,
		"difficulty": story.difficulty,
		"moralLesson": story.moral_lesson,
		"vocabularyHighlights": _json(story.vocabulary_highlights),
		"comprehensionQuestions": _json(story.comprehension_questions),
		"hindiSummary": story.hindi_summary,
		"gujaratiSummary": story.gujarati_summary,
		"createdAt": _iso(story.created_at),
	}


def lesson_to_dict(lesson: GrammarLesson) -> Dict[str, Any]:
	return {
		"lessonId": lesson.id,
		"title": lesson.title,
		"topic": lesson.topic,
		"difficulty": lesson.difficulty,
		"explanation": lesson.explanation,
		"rules": _json(lesson.rules),
		"examples": _json(lesson.examples),
		"commonMistakes": _json(lesson.common_mistakes),
		"practiceExercises": _json(lesson.practice_exercises),
		"tips": _json(lesson.tips),
		"hindiExplanation": lesson.hindi_explanation,
		"gujaratiExplanation": lesson.gujarati_explanation,
	}


def guide_to_dict(guide: PronunciationGuide) -> Dict[str, Any]:
	return {
		"guideId": guide.id,
		"word": guide.word,
		"ipa": guide.ipa,
		"syllables": guide.syllables,
		"stress": guide.stress,
		"soundTips": _json(guide.sound_tips),
		"similarSounds": _json(guide.similar_sounds),
		"commonErrors": _json(guide.common_errors),
		"practicePhrase": guide.practice_phrase,
		"audioDescription": guide.audio_description,
	}


def result_to_dict(result: QuizResult) -> Dict[str, Any]:
	return {
		"id": result.id,
		"userId": result.user_id,
		"quizId": result.quiz_id,
		"answers": _json(result.answers),
		"score": result.score,
		"completedAt": _iso(result.completed_at),
	}


def progress_to_dict(row: UserProgress) -> Dict[str, Any]:
	return {
		"wordId": row.word_id,
		"word": row.word.text if row.word else None,
		"isLearned": row.is_learned,
		"reviewCount": row.review_count,
		"lastReviewed": _iso(row.last_reviewed),
	}


def badge_to_dict(badge: Badge) -> Dict[str, Any]:
	return {"name": badge.name, "description": badge.description, "earnedAt": _iso(badge.earned_at)}


def user_to_dict(user: User) -> Dict[str, Any]:
	return {"id": user.id, "name": user.name, "email": user.email, "username": user.username}
