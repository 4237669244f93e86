from __future__ import annotations
import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .db import Base


ANONYMOUS_USER_ID = "anonymous"


def _new_id() -> str:
	return uuid.uuid4().hex


def utcnow() -> datetime:
	# Naive UTC; SQLite drops tzinfo anyway
	return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
	__tablename__ = "users"
	id = Column(String(32), primary_key=True, default=_new_id)
	email = Column(String(256), unique=True, index=True, nullable=False)
	name = Column(String(128), nullable=False)
	username = Column(String(128), unique=True, nullable=True)
	password_hash = Column(String(256), nullable=False)
	created_at = Column(DateTime, default=utcnow, nullable=False)
	updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

	progress = relationship("UserProgress", back_populates="user", cascade="all, delete-orphan")
	streak = relationship("LearningStreak", uselist=False, back_populates="user", cascade="all, delete-orphan")
	badges = relationship("Badge", back_populates="user", cascade="all, delete-orphan", order_by="Badge.earned_at.desc()")


class VocabularyWord(Base):
	__tablename__ = "words"
	id = Column(String(32), primary_key=True, default=_new_id)
	# Natural key: always stored lower-cased
	text = Column(String(128), unique=True, index=True, nullable=False)
	meaning_hindi = Column(Text, nullable=True)
	meaning_gujarati = Column(Text, nullable=True)
	pronunciation = Column(String(128), nullable=True)
	part_of_speech = Column(String(64), nullable=True)
	difficulty = Column(String(32), nullable=True, index=True)
	category = Column(String(64), nullable=True, index=True)
	etymology = Column(Text, nullable=True)
	mnemonic_trick = Column(Text, nullable=True)
	common_mistakes = Column(Text, default="[]", nullable=False)  # JSON string
	related_words = Column(Text, default="[]", nullable=False)  # JSON string
	is_word_of_the_day = Column(Boolean, default=False, nullable=False)
	created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

	synonyms = relationship("Synonym", back_populates="word", cascade="all, delete-orphan")
	antonyms = relationship("Antonym", back_populates="word", cascade="all, delete-orphan")
	sentences = relationship("Sentence", back_populates="word", cascade="all, delete-orphan")
	progress = relationship("UserProgress", back_populates="word", cascade="all, delete-orphan")


class Synonym(Base):
	__tablename__ = "synonyms"
	id = Column(Integer, primary_key=True, autoincrement=True)
	word_id = Column(String(32), ForeignKey("words.id", ondelete="CASCADE"), nullable=False, index=True)
	text = Column(String(128), nullable=False)

	word = relationship("VocabularyWord", back_populates="synonyms")


class Antonym(Base):
	__tablename__ = "antonyms"
	id = Column(Integer, primary_key=True, autoincrement=True)
	word_id = Column(String(32), ForeignKey("words.id", ondelete="CASCADE"), nullable=False, index=True)
	text = Column(String(128), nullable=False)

	word = relationship("VocabularyWord", back_populates="antonyms")


class Sentence(Base):
	__tablename__ = "sentences"
	id = Column(Integer, primary_key=True, autoincrement=True)
	word_id = Column(String(32), ForeignKey("words.id", ondelete="CASCADE"), nullable=False, index=True)
	text = Column(Text, nullable=False)
	difficulty = Column(String(32), nullable=True)

	word = relationship("VocabularyWord", back_populates="sentences")


class Idiom(Base):
	__tablename__ = "idioms"
	id = Column(String(32), primary_key=True, default=_new_id)
	text = Column(String(256), unique=True, index=True, nullable=False)
	meaning = Column(Text, nullable=True)
	hindi_translation = Column(Text, nullable=True)
	gujarati_translation = Column(Text, nullable=True)
	examples = Column(Text, default="[]", nullable=False)  # JSON string
	origin = Column(Text, nullable=True)
	difficulty = Column(String(32), nullable=True)
	category = Column(String(64), nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class Quiz(Base):
	__tablename__ = "quizzes"
	id = Column(String(32), primary_key=True, default=_new_id)
	type = Column(String(64), nullable=False)
	difficulty = Column(String(32), nullable=False)
	questions = Column(Text, nullable=False)  # JSON string
	created_at = Column(DateTime, default=utcnow, nullable=False)


class QuizResult(Base):
	__tablename__ = "quiz_results"
	id = Column(String(32), primary_key=True, default=_new_id)
	# Either a users.id or ANONYMOUS_USER_ID
	user_id = Column(String(32), nullable=False, index=True)
	quiz_id = Column(String(32), nullable=True)
	answers = Column(Text, nullable=False)  # JSON string
	score = Column(Integer, nullable=False)
	completed_at = Column(DateTime, default=utcnow, nullable=False)


class DailyQuote(Base):
	__tablename__ = "daily_quotes"
	id = Column(String(32), primary_key=True, default=_new_id)
	quote = Column(Text, nullable=False)
	author = Column(String(256), nullable=True)
	hindi_translation = Column(Text, nullable=True)
	gujarati_translation = Column(Text, nullable=True)
	explanation = Column(Text, nullable=True)
	relevance_to_learning = Column(Text, nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class FactOfTheDay(Base):
	__tablename__ = "facts_of_the_day"
	id = Column(String(32), primary_key=True, default=_new_id)
	fact = Column(Text, nullable=False)
	topic = Column(String(64), nullable=True)
	hindi_translation = Column(Text, nullable=True)
	gujarati_translation = Column(Text, nullable=True)
	explanation = Column(Text, nullable=True)
	did_you_know = Column(Text, nullable=True)
	source = Column(String(256), nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class Story(Base):
	__tablename__ = "stories"
	id = Column(String(32), primary_key=True, default=_new_id)
	title = Column(String(256), nullable=False)
	content = Column(Text, nullable=False)
	theme = Column(String(64), nullable=True)
	difficulty = Column(String(32), nullable=True)
	moral_lesson = Column(Text, nullable=True)
	vocabulary_highlights = Column(Text, default="[]", nullable=False)  # JSON string
	comprehension_questions = Column(Text, default="[]", nullable=False)  # JSON string
	hindi_summary = Column(Text, nullable=True)
	gujarati_summary = Column(Text, nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class GrammarLesson(Base):
	__tablename__ = "grammar_lessons"
	id = Column(String(32), primary_key=True, default=_new_id)
	title = Column(String(256), nullable=False)
	topic = Column(String(128), nullable=False)
	difficulty = Column(String(32), nullable=True)
	explanation = Column(Text, nullable=True)
	rules = Column(Text, default="[]", nullable=False)
	examples = Column(Text, default="[]", nullable=False)
	common_mistakes = Column(Text, default="[]", nullable=False)
	practice_exercises = Column(Text, default="[]", nullable=False)
	tips = Column(Text, default="[]", nullable=False)
	hindi_explanation = Column(Text, nullable=True)
	gujarati_explanation = Column(Text, nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False)


class PronunciationGuide(Base):
	__tablename__ = "pronunciation_guides"
	id = Column(String(32), primary_key=True, default=_new_id)
	word = Column(String(128), unique=True, index=True, nullable=False)
	ipa = Column(String(128), nullable=True)
	syllables = Column(String(256), nullable=True)
	stress = Column(String(256), nullable=True)
	sound_tips = Column(Text, default="[]", nullable=False)
	similar_sounds = Column(Text, default="[]", nullable=False)
	common_errors = Column(Text, default="[]", nullable=False)
	practice_phrase = Column(Text, nullable=True)
	audio_description = Column(Text, nullable=True)
	created_at = Column(DateTime, default=utcnow, nullable=False)


class UserProgress(Base):
	__tablename__ = "user_progress"
	__table_args__ = (UniqueConstraint("user_id", "word_id", name="uq_user_progress_user_word"),)
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	word_id = Column(String(32), ForeignKey("words.id", ondelete="CASCADE"), nullable=False, index=True)
	is_learned = Column(Boolean, default=False, nullable=False)
	review_count = Column(Integer, default=0, nullable=False)
	last_reviewed = Column(DateTime, default=utcnow, nullable=False)

	user = relationship("User", back_populates="progress")
	word = relationship("VocabularyWord", back_populates="progress")


class LearningStreak(Base):
	__tablename__ = "learning_streaks"
	user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
	current_days = Column(Integer, default=0, nullable=False)
	longest_days = Column(Integer, default=0, nullable=False)
	updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

	user = relationship("User", back_populates="streak")


class Badge(Base):
	__tablename__ = "badges"
	__table_args__ = (UniqueConstraint("user_id", "name", name="uq_badges_user_name"),)
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	name = Column(String(128), nullable=False)
	description = Column(Text, nullable=True)
	earned_at = Column(DateTime, default=utcnow, nullable=False)

	user = relationship("User", back_populates="badges")
