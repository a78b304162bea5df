# interview_service/aggregate.py
import logging
from typing import Any, Sequence

from .errors import AggregateAssessmentError, ParseError, TransportError
from .llm import LLMClient
from .parsing import parse_llm_json
from .prompts import build_aggregate_prompt
from .schemas import AggregateAssessment, AnswerAssessment
from .scoring import coerce_string_list, coerce_text, max_possible_score, total_score, unrounded_final_score

logger = logging.getLogger("ai-service.aggregate")


def normalize_aggregate(parsed: Any) -> AggregateAssessment:
    if not isinstance(parsed, dict):
        raise AggregateAssessmentError(f"Expected a JSON object, got {type(parsed).__name__}")
    return AggregateAssessment(
        overall_feedback=coerce_text(parsed.get("overallFeedback")),
        overall_strengths=coerce_string_list(parsed.get("overallStrengths")),
        overall_weaknesses=coerce_string_list(parsed.get("overallWeaknesses")),
        recommendation=coerce_text(parsed.get("recommendation")),
    )


class AggregateAssessor:
    """Cross-question synthesis: overall feedback, themes and a recommendation."""

    def __init__(self, llm: LLMClient, temperature: float = 0.2, max_tokens: int = 2000):
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    def assess(self, assessments: Sequence[AnswerAssessment]) -> AggregateAssessment:
        if not assessments:
            raise ValueError("At least one assessment is required")

        total = total_score(assessments)
        max_possible = max_possible_score(len(assessments))
        prompt = build_aggregate_prompt(
            list(assessments), total, max_possible, unrounded_final_score(assessments)
        )
        try:
            raw = self.llm.complete(prompt, temperature=self.temperature, max_tokens=self.max_tokens)
            parsed = parse_llm_json(raw, expect=dict)
        except (ParseError, TransportError) as e:
            raise AggregateAssessmentError(f"Failed to generate overall assessment: {e}") from e

        result = normalize_aggregate(parsed)
        logger.info(f"Overall assessment ready for {len(assessments)} answers")
        return result
