from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence


class ContentType(str, enum.Enum):
	WORDS = "words"
	IDIOMS = "idioms"
	QUIZ = "quiz"
	QUOTE = "quote"
	FACT = "fact"
	STORY = "story"
	GRAMMAR_LESSON = "grammar_lesson"
	PRONUNCIATION_GUIDE = "pronunciation_guide"
	WORD_ASSOCIATION = "word_association"
	CONVERSATION_STARTERS = "conversation_starters"


@dataclass(frozen=True)
class Sampling:
	tier: str  # "main" or "creative"
	temperature: float
	top_p: float
	max_tokens: int


SAMPLING: Dict[ContentType, Sampling] = {
	ContentType.WORDS: Sampling("main", 0.85, 0.9, 4000),
	ContentType.IDIOMS: Sampling("main", 0.8, 1.0, 2000),
	ContentType.QUIZ: Sampling("main", 0.7, 1.0, 2000),
	ContentType.QUOTE: Sampling("creative", 0.9, 1.0, 500),
	ContentType.FACT: Sampling("main", 0.8, 1.0, 600),
	ContentType.STORY: Sampling("creative", 0.8, 1.0, 1500),
	ContentType.GRAMMAR_LESSON: Sampling("main", 0.7, 1.0, 1200),
	ContentType.PRONUNCIATION_GUIDE: Sampling("main", 0.6, 1.0, 800),
	ContentType.WORD_ASSOCIATION: Sampling("main", 0.8, 1.0, 1000),
	ContentType.CONVERSATION_STARTERS: Sampling("main", 0.8, 1.0, 1500),
}

WORD_CATEGORIES: List[str] = ["academic", "business", "technology", "science", "literature", "law", "philosophy"]
FACT_TOPICS: List[str] = ["science", "history", "technology", "nature", "space", "languages", "culture"]
QUIZ_TYPES: List[str] = [
	"multiple-choice",
	"fill-in-the-blank",
	"synonym-match",
	"definition-match",
	"sentence-completion",
]
GRAMMAR_TOPICS: List[str] = [
	"Present Perfect Tense",
	"Past Continuous",
	"Future Perfect",
	"Conditional Sentences",
	"Passive Voice",
	"Reported Speech",
	"Modal Verbs",
	"Relative Clauses",
	"Subjunctive Mood",
	"Phrasal Verbs",
	"Articles",
	"Prepositions",
]

JSON_ONLY_SYSTEM = (
	"Return only valid JSON with no explanations, no code fences, and no extra text. "
	"If you cannot provide JSON, return an empty JSON array \"[]\"."
)


def _words_prompt(count: int = 15, category: str = "academic", **_: Any) -> Sequence[str]:
	system = "You are an expert English vocabulary teacher.\n" + JSON_ONLY_SYSTEM
	user = (
		f"Generate {count} advanced-level English vocabulary words suitable for a serious learner aiming to reach C1-C2 proficiency.\n\n"
		"The words should:\n"
		"- Be moderately rare but still actively used in educated writing and speech\n"
		"- Avoid overly common/basic words like \"happy\", \"run\", \"good\", \"important\"\n"
		"- Avoid archaic or obsolete terms unless they are still academically relevant\n"
		"- Represent a variety of parts of speech\n"
		"- Be semantically diverse (not synonyms of each other)\n\n"
		"Example target difficulty: \"pernicious\", \"cogent\", \"ubiquitous\", \"alacrity\", \"tenuous\".\n\n"
		"For each word, provide:\n"
		"- text: the English word\n"
		"- meaningHindi: Hindi translation\n"
		"- meaningGujarati: Gujarati translation\n"
		"- pronunciation: IPA phonetic notation\n"
		"- partOfSpeech: noun, verb, adjective, etc.\n"
		"- difficulty: advanced\n"
		f"- category: {category}\n"
		"- etymology: brief word origin\n"
		"- synonyms: array of 3-5 synonyms\n"
		"- antonyms: array of 2-4 antonyms\n"
		"- sentences: array of 3 example sentences with increasing complexity\n"
		"- mnemonicTrick: memory technique to remember the word\n"
		"- commonMistakes: array of common usage errors\n"
		"- relatedWords: array of related vocabulary\n\n"
		"Return only a valid JSON array."
	)
	return system, user


def _idioms_prompt(count: int = 10, **_: Any) -> Sequence[str]:
	system = "You are an English teacher who explains idioms to learners.\n" + JSON_ONLY_SYSTEM
	user = (
		f"Generate {count} common English idioms and phrases that are useful for learners.\n\n"
		"For each idiom provide:\n"
		"- idiom: the idiom/phrase\n"
		"- meaning: what it means\n"
		"- hindiTranslation: Hindi equivalent or explanation\n"
		"- gujaratiTranslation: Gujarati equivalent or explanation\n"
		"- examples: 2 example sentences using the idiom\n"
		"- origin: brief history of the idiom (if known)\n"
		"- difficulty: beginner/intermediate/advanced\n"
		"- category: type of idiom (business, casual, literary, etc.)\n\n"
		"Return as JSON array."
	)
	return system, user


def _quiz_prompt(quiz_type: str = "multiple-choice", count: int = 10, words: Sequence[Dict[str, str]] = (), **_: Any) -> Sequence[str]:
	system = "You are a quiz generator for English learning. Create engaging, educational quizzes. Return only JSON."
	word_list = ", ".join(f"{w['text']} (id: {w['id']})" for w in words) or "any advanced English words"
	user = (
		f"Create a {quiz_type} quiz with {count} questions using these words: {word_list}\n\n"
		"Quiz types available:\n"
		"- multiple-choice: 4 options per question\n"
		"- fill-in-the-blank: sentences with missing words\n"
		"- synonym-match: match words with synonyms\n"
		"- definition-match: match words with definitions\n"
		"- sentence-completion: complete sentences using given words\n\n"
		"For each question provide:\n"
		"- question: the question text\n"
		"- options: array of possible answers (for multiple choice)\n"
		"- correctAnswer: the correct answer\n"
		"- explanation: why this answer is correct\n"
		"- difficulty: question difficulty level\n"
		"- wordId: ID of the word being tested\n\n"
		"Make questions challenging but fair. Return as JSON object with a questions array."
	)
	return system, user


def _quote_prompt(**_: Any) -> Sequence[str]:
	system = "Generate an inspiring, educational quote about learning, growth, or knowledge. Return only JSON."
	user = (
		"Generate one inspirational quote about learning English, personal growth, or education.\n\n"
		"Provide:\n"
		"- quote: the inspirational text\n"
		"- author: author name (can be fictional for original quotes)\n"
		"- hindiTranslation: Hindi translation\n"
		"- gujaratiTranslation: Gujarati translation\n"
		"- explanation: brief explanation of the quote's meaning\n"
		"- relevanceToLearning: how this applies to language learning\n\n"
		"Return as JSON object."
	)
	return system, user


def _fact_prompt(topic: str = "science", **_: Any) -> Sequence[str]:
	system = "You share accurate, surprising facts with English learners. Return only JSON."
	user = (
		f"Generate an interesting, educational fact about {topic}.\n\n"
		"Provide:\n"
		"- fact: the interesting fact\n"
		f"- topic: {topic}\n"
		"- hindiTranslation: Hindi translation\n"
		"- gujaratiTranslation: Gujarati translation\n"
		"- explanation: detailed explanation\n"
		"- didYouKnow: additional related information\n"
		"- source: general source type (e.g., \"Scientific Research\", \"Historical Records\")\n\n"
		"Make it engaging and educational. Return as JSON object."
	)
	return system, user


def _story_prompt(theme: str = "adventure", difficulty: str = "intermediate", words_to_include: Sequence[str] = (), **_: Any) -> Sequence[str]:
	system = "You are a creative writer specializing in educational stories for English learners. Return only JSON."
	include = ", ".join(words_to_include) if words_to_include else "any level-appropriate words"
	user = (
		f"Write an engaging {difficulty}-level story with {theme} theme.\n\n"
		f"Include these vocabulary words: {include}\n\n"
		"Story should be:\n"
		"- 200-400 words long\n"
		"- Age-appropriate and educational\n"
		"- Include moral lesson\n"
		f"- Use vocabulary appropriate for {difficulty} level\n\n"
		"Provide:\n"
		"- title: story title\n"
		"- story: the complete story text\n"
		"- moralLesson: key takeaway\n"
		"- vocabularyHighlights: array of key words used with definitions\n"
		"- comprehensionQuestions: 3 questions about the story\n"
		"- hindiSummary: brief Hindi summary\n"
		"- gujaratiSummary: brief Gujarati summary\n\n"
		"Return as JSON object."
	)
	return system, user


def _grammar_prompt(topic: str = "Articles", difficulty: str = "intermediate", **_: Any) -> Sequence[str]:
	system = "You are an expert English grammar teacher creating comprehensive lessons. Return only JSON."
	user = (
		f"Create a comprehensive grammar lesson on \"{topic}\" for {difficulty} level students.\n\n"
		"Include:\n"
		"- title: lesson title\n"
		"- explanation: clear explanation of the grammar rule\n"
		"- rules: array of key grammar rules\n"
		"- examples: array of example sentences showing correct usage\n"
		"- commonMistakes: array of common errors students make\n"
		"- practiceExercises: 5 practice questions with answers\n"
		"- tips: helpful tips for remembering the rule\n"
		"- hindiExplanation: brief Hindi explanation\n"
		"- gujaratiExplanation: brief Gujarati explanation\n\n"
		"Make it comprehensive but easy to understand. Return as JSON object."
	)
	return system, user


def _pronunciation_prompt(word: str = "", **_: Any) -> Sequence[str]:
	system = "You are a pronunciation expert helping English learners with correct pronunciation. Return only JSON."
	user = (
		f"Create a comprehensive pronunciation guide for the word \"{word}\".\n\n"
		"Include:\n"
		"- word: the target word\n"
		"- ipa: International Phonetic Alphabet notation\n"
		"- syllables: word broken into syllables\n"
		"- stress: which syllable to stress\n"
		"- soundTips: tips for pronouncing difficult sounds\n"
		"- similarSounds: words with similar pronunciation patterns\n"
		"- commonErrors: common mispronunciations to avoid\n"
		"- practicePhrase: a phrase to practice the word in context\n"
		"- audioDescription: description of how to make each sound\n\n"
		"Return as JSON object."
	)
	return system, user


def _word_association_prompt(difficulty: str = "intermediate", **_: Any) -> Sequence[str]:
	system = "You design vocabulary games for English learners. Return only JSON."
	user = (
		f"Create a word association game for {difficulty} level English learners.\n\n"
		"Generate:\n"
		"- centerWord: main word to associate with\n"
		"- associations: array of 8-10 related words\n"
		"- categories: different categories of associations (synonyms, related concepts, etc.)\n"
		"- explanations: why each word is associated\n"
		"- gameInstructions: how to play the association game\n"
		"- scoringSystem: how to score the game\n\n"
		"Return as JSON object."
	)
	return system, user


def _conversation_prompt(difficulty: str = "intermediate", **_: Any) -> Sequence[str]:
	system = "You help English learners practice speaking. Return only JSON."
	user = (
		f"Generate conversation starters for {difficulty} level English learners.\n\n"
		"Create:\n"
		"- topics: array of 10 conversation topics\n"
		"- questions: 3-5 questions for each topic\n"
		"- vocabulary: key vocabulary for each topic\n"
		"- culturalTips: cultural context for conversations\n"
		"- practiceScenarios: role-play scenarios\n\n"
		"Make them practical and engaging. Return as JSON object."
	)
	return system, user


_BUILDERS: Dict[ContentType, Callable[..., Sequence[str]]] = {
	ContentType.WORDS: _words_prompt,
	ContentType.IDIOMS: _idioms_prompt,
	ContentType.QUIZ: _quiz_prompt,
	ContentType.QUOTE: _quote_prompt,
	ContentType.FACT: _fact_prompt,
	ContentType.STORY: _story_prompt,
	ContentType.GRAMMAR_LESSON: _grammar_prompt,
	ContentType.PRONUNCIATION_GUIDE: _pronunciation_prompt,
	ContentType.WORD_ASSOCIATION: _word_association_prompt,
	ContentType.CONVERSATION_STARTERS: _conversation_prompt,
}


def build_messages(content_type: ContentType, **params: Any) -> List[Dict[str, str]]:
	system, user = _BUILDERS[content_type](**params)
	return [
		{"role": "system", "content": system},
		{"role": "user", "content": user},
	]
