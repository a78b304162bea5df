# interview_service/questions.py
import logging
from typing import Any, Dict, List, Optional

from . import config
from .errors import GenerationError, ParseError, TransportError, ValidationError
from .llm import LLMClient
from .parsing import parse_llm_json
from .prompts import build_question_prompt
from .schemas import LEVELS, Question

logger = logging.getLogger("ai-service.questions")

DEFAULT_TIME_BY_LEVEL = {
    "Easy": 30,
    "Medium": 60,
    "Hard": 120,
}

_LEVEL_LOOKUP = {level.lower(): level for level in LEVELS}


def safe_truncate(s: str, max_chars: int) -> str:
    if not s or len(s) <= max_chars:
        return s or ""
    return s[:max_chars - 3] + "..."


def validate_generation_input(resume_text: str, skills_text: str) -> None:
    """Require a usable resume (50+ chars) or skills text (3+ chars)."""
    resume_ok = len((resume_text or "").strip()) >= config.MIN_RESUME_CHARS
    skills_ok = len((skills_text or "").strip()) >= config.MIN_SKILLS_CHARS
    if not (resume_ok or skills_ok):
        raise ValidationError(
            "Please provide either a resume (min 50 chars) or skills (min 3 chars)"
        )


def _normalize_level(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    return _LEVEL_LOOKUP.get(raw.strip().lower())


def _normalize_time(raw: Any, level: str) -> int:
    if isinstance(raw, bool):
        return DEFAULT_TIME_BY_LEVEL[level]
    try:
        value = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_TIME_BY_LEVEL[level]
    return value if value > 0 else DEFAULT_TIME_BY_LEVEL[level]


def normalize_question(entry: Any) -> Optional[Question]:
    if not isinstance(entry, dict):
        return None
    level = _normalize_level(entry.get("level"))
    text = entry.get("question")
    if level is None or not isinstance(text, str) or not text.strip():
        return None
    return Question(level=level, question=text.strip(), time=_normalize_time(entry.get("time"), level))


def normalize_questions(parsed: Any) -> List[Question]:
    """Keep well-formed entries; malformed ones are dropped and logged."""
    if isinstance(parsed, dict) and isinstance(parsed.get("questions"), list):
        parsed = parsed["questions"]
    if not isinstance(parsed, list):
        raise ParseError(f"Expected a JSON array of questions, got {type(parsed).__name__}")

    questions = []
    for i, entry in enumerate(parsed, 1):
        question = normalize_question(entry)
        if question is None:
            logger.warning(f"Dropping malformed question entry {i}: {entry!r}")
            continue
        questions.append(question)
    return questions


class QuestionGenerator:
    """Turns resume and/or skills text into a fixed-size set of leveled questions."""

    def __init__(self,
                 llm: LLMClient,
                 count: int = config.QUESTION_COUNT,
                 max_attempts: int = config.QUESTION_GENERATION_ATTEMPTS,
                 max_resume_chars: int = config.MAX_RESUME_CHARS,
                 temperature: float = 0.7,
                 max_tokens: int = 2000):
        self.llm = llm
        self.count = count
        self.max_attempts = max(1, max_attempts)
        self.max_resume_chars = max_resume_chars
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate(self, resume_text: str = "", skills_text: str = "") -> List[Question]:
        """
        Generate exactly ``count`` questions.

        Extra questions are cut; a short set counts as a failed attempt.

        Raises:
            GenerationError: when no attempt produced enough questions
        """
        prompt = build_question_prompt(
            safe_truncate(resume_text or "", self.max_resume_chars),
            skills_text or "",
            self.count,
        )

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                raw = self.llm.complete(prompt, temperature=self.temperature, max_tokens=self.max_tokens)
                questions = normalize_questions(parse_llm_json(raw))
            except (ParseError, TransportError) as e:
                logger.warning(f"Question generation attempt {attempt} failed: {e}")
                last_error = e
                continue

            if len(questions) >= self.count:
                if len(questions) > self.count:
                    logger.info(f"Trimming {len(questions)} generated questions to {self.count}")
                return questions[:self.count]

            logger.warning(
                f"Question generation attempt {attempt} returned {len(questions)}/{self.count} usable questions"
            )
            last_error = GenerationError(f"Expected {self.count} questions, got {len(questions)}")

        raise GenerationError(str(last_error)) from last_error

    def summarize(self, questions: List[Question]) -> Dict[str, int]:
        counts = {level: 0 for level in LEVELS}
        for q in questions:
            counts[q.level] += 1
        return counts
