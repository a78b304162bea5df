# interview_service/scoring.py
"""
Per-answer scoring and the score arithmetic shared by the pipeline.

The model is asked for a 0-5 score. Whatever comes back is normalised:
out-of-range numbers are clamped, numeric strings are accepted, and any
other value scores 0 and is flagged.
"""
import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Sequence, Tuple

from . import config
from .errors import AssessmentError, ParseError, TransportError
from .llm import LLMClient
from .parsing import parse_llm_json
from .prompts import build_answer_prompt
from .schemas import AnswerAssessment, AnswerScore, AnswerSubmission

logger = logging.getLogger("ai-service.scoring")

SCORING_ERROR_FEEDBACK = "Error assessing this answer"


def round_half_up(value: float, digits: int = 1) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def coerce_score(raw: Any) -> Tuple[float, bool]:
    """Return (score, flagged). Non-numeric input scores 0 and is flagged."""
    if isinstance(raw, bool):
        return 0.0, True
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return 0.0, True
    else:
        return 0.0, True

    if math.isnan(value) or math.isinf(value):
        return 0.0, True
    return value, False


def clamp_score(value: float, upper: float = config.MAX_SCORE_PER_QUESTION) -> float:
    return round_half_up(max(0.0, min(float(upper), value)), 1)


def coerce_text(raw: Any) -> str:
    return raw if isinstance(raw, str) else ""


def coerce_string_list(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [raw] if raw.strip() else []
    if not isinstance(raw, list):
        return []
    items = []
    for item in raw:
        if item is None:
            continue
        text = item if isinstance(item, str) else str(item)
        if text.strip():
            items.append(text)
    return items


def normalize_answer_score(parsed: Any) -> AnswerScore:
    if not isinstance(parsed, dict):
        raise AssessmentError(f"Expected a JSON object, got {type(parsed).__name__}")

    score, flagged = coerce_score(parsed.get("score"))
    if flagged:
        logger.warning(f"Non-numeric score {parsed.get('score')!r} treated as 0")

    return AnswerScore(
        score=clamp_score(score),
        feedback=coerce_text(parsed.get("feedback")),
        strengths=coerce_string_list(parsed.get("strengths")),
        weaknesses=coerce_string_list(parsed.get("weaknesses")),
        score_flagged=flagged,
    )


def failed_assessment(item: AnswerSubmission) -> AnswerAssessment:
    """Placeholder recorded when an answer could not be scored."""
    return AnswerAssessment(
        question=item.question,
        answer=item.answer,
        level=item.level,
        score=0,
        feedback=SCORING_ERROR_FEEDBACK,
        strengths=[],
        weaknesses=[],
    )


def total_score(assessments: Sequence[AnswerAssessment]) -> float:
    return sum(a.score for a in assessments)


def max_possible_score(count: int) -> int:
    return config.MAX_SCORE_PER_QUESTION * count


def unrounded_final_score(assessments: Sequence[AnswerAssessment]) -> float:
    if not assessments:
        raise ValueError("At least one assessment is required")
    return total_score(assessments) / max_possible_score(len(assessments)) * config.FINAL_SCORE_SCALE


def compute_final_score(assessments: Sequence[AnswerAssessment]) -> float:
    """Sum of per-answer scores normalised to 0-50, one decimal."""
    return round_half_up(unrounded_final_score(assessments), 1)


class AnswerAssessor:
    """Scores one (question, answer, level) triple on a 0-5 scale."""

    def __init__(self, llm: LLMClient, temperature: float = 0.1, max_tokens: int = 1500):
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    def assess(self, question: str, answer: str, level: str) -> AnswerScore:
        prompt = build_answer_prompt(question, answer, level)
        try:
            raw = self.llm.complete(prompt, temperature=self.temperature, max_tokens=self.max_tokens)
            parsed = parse_llm_json(raw, expect=dict)
        except (ParseError, TransportError) as e:
            raise AssessmentError(f"Failed to assess answer: {e}") from e
        return normalize_answer_score(parsed)
