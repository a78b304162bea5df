# interview_service/pipeline.py
"""
Interview assessment pipeline.

One run handles one interview submission:

    VALIDATING -> SCORING_ANSWERS -> AGGREGATING -> PERSISTING -> RESPONDING

Only validation can fail the run. A failed answer is recorded with a zero
score, a failed aggregate is left out of the report, and persistence
problems are logged. The final score is always reported.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from . import config
from .aggregate import AggregateAssessor
from .errors import AssessmentError, ValidationError
from .repository import CandidateRepository
from .schemas import (LEVELS, AggregateAssessment, AnswerAssessment, AnswerSubmission,
                      InterviewResult, NumberedAssessment, StoredAnswer, SubmitAnswersResponse,
                      utcnow)
from .scoring import AnswerAssessor, compute_final_score, failed_assessment

logger = logging.getLogger("ai-service.pipeline")


class PipelineStage(str, Enum):
    VALIDATING = "validating"
    SCORING_ANSWERS = "scoring_answers"
    AGGREGATING = "aggregating"
    PERSISTING = "persisting"
    RESPONDING = "responding"


@dataclass
class PipelineReport:
    assessments: List[AnswerAssessment]
    final_score: float
    overall_assessment: Optional[AggregateAssessment] = None
    stages: List[PipelineStage] = field(default_factory=list)
    failed_items: List[int] = field(default_factory=list)
    persisted: bool = False

    def to_response(self) -> SubmitAnswersResponse:
        numbered = [
            NumberedAssessment(question_number=i, **a.model_dump())
            for i, a in enumerate(self.assessments, 1)
        ]
        return SubmitAnswersResponse(
            assessments=numbered,
            final_score=self.final_score,
            max_possible_score=config.FINAL_SCORE_SCALE,
            overall_assessment=self.overall_assessment,
        )


# ==========================================
# VALIDATION
# ==========================================

def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def validate_submissions(items: Any) -> List[AnswerSubmission]:
    """Reject the whole submission on the first malformed item."""
    if not isinstance(items, list) or not items:
        raise ValidationError(
            "questionsAndAnswers array is required with at least one question-answer pair"
        )

    submissions = []
    for item in items:
        if not isinstance(item, dict) or not all(
            _is_filled(item.get(key)) for key in ("question", "answer", "level")
        ):
            raise ValidationError(
                "Each item in questionsAndAnswers must have: question, answer, and level"
            )
        if item["level"] not in LEVELS:
            raise ValidationError("Level must be 'Easy', 'Medium', or 'Hard'")
        submissions.append(
            AnswerSubmission(question=item["question"], answer=item["answer"], level=item["level"])
        )
    return submissions


def build_summary(count: int, final_score: float, overall: Optional[AggregateAssessment]) -> str:
    summary = f"Completed {count} questions with a final score of {final_score:g}/50."
    if overall is not None and overall.recommendation:
        summary += f" {overall.recommendation}"
    return summary


def build_interview_result(assessments: List[AnswerAssessment], final_score: float,
                           overall: Optional[AggregateAssessment],
                           now: Optional[datetime] = None) -> InterviewResult:
    now = now or utcnow()
    overall_fields: Dict[str, Any] = overall.model_dump() if overall is not None else {}
    return InterviewResult(
        interview_date=now,
        answers=[StoredAnswer(timestamp=now, **a.model_dump()) for a in assessments],
        final_score=final_score,
        summary=build_summary(len(assessments), final_score, overall),
        **overall_fields,
    )


# ==========================================
# PIPELINE
# ==========================================

class AssessmentPipeline:
    def __init__(self,
                 assessor: AnswerAssessor,
                 aggregator: AggregateAssessor,
                 repository: Optional[CandidateRepository] = None,
                 workers: int = config.SCORING_WORKERS,
                 timeout: Optional[float] = config.SUBMISSION_TIMEOUT_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.assessor = assessor
        self.aggregator = aggregator
        self.repository = repository
        self.workers = max(1, workers)
        self.timeout = timeout if timeout and timeout > 0 else None
        self.clock = clock

    def run(self, items: Any, candidate_id: Optional[str] = None) -> PipelineReport:
        """
        Score a full interview submission.

        Raises:
            ValidationError: when the submission is empty or an item is malformed
        """
        stages = [PipelineStage.VALIDATING]
        submissions = validate_submissions(items)
        deadline = self.clock() + self.timeout if self.timeout else None

        stages.append(PipelineStage.SCORING_ANSWERS)
        if self.workers > 1 and len(submissions) > 1:
            assessments, failed = self._score_parallel(submissions, deadline)
        else:
            assessments, failed = self._score_sequential(submissions, deadline)

        final_score = compute_final_score(assessments)
        logger.info(
            f"Scored {len(assessments)} answers ({len(failed)} failed), final score {final_score}/50"
        )

        stages.append(PipelineStage.AGGREGATING)
        overall = self._aggregate(assessments, deadline)

        persisted = False
        if candidate_id and self.repository is not None:
            stages.append(PipelineStage.PERSISTING)
            persisted = self._persist(candidate_id, assessments, final_score, overall)

        stages.append(PipelineStage.RESPONDING)
        return PipelineReport(
            assessments=assessments,
            final_score=final_score,
            overall_assessment=overall,
            stages=stages,
            failed_items=failed,
            persisted=persisted,
        )

    def _expired(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self.clock() >= deadline

    def _score_one(self, item: AnswerSubmission) -> AnswerAssessment:
        result = self.assessor.assess(item.question, item.answer, item.level)
        return AnswerAssessment.from_score(item, result)

    def _score_sequential(self, submissions: List[AnswerSubmission], deadline: Optional[float]):
        assessments: List[AnswerAssessment] = []
        failed: List[int] = []
        for i, item in enumerate(submissions, 1):
            if self._expired(deadline):
                logger.error(f"Submission deadline passed before answer {i} was scored")
                assessments.append(failed_assessment(item))
                failed.append(i)
                continue
            try:
                assessments.append(self._score_one(item))
            except AssessmentError as e:
                logger.error(f"Error assessing answer {i}: {e}")
                assessments.append(failed_assessment(item))
                failed.append(i)
            except Exception:
                logger.exception(f"Unexpected error assessing answer {i}")
                assessments.append(failed_assessment(item))
                failed.append(i)
        return assessments, failed

    def _score_parallel(self, submissions: List[AnswerSubmission], deadline: Optional[float]):
        results: Dict[int, AnswerAssessment] = {}
        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="scoring")
        try:
            futures = {
                executor.submit(self._score_one, item): i
                for i, item in enumerate(submissions, 1)
            }
            remaining = None if deadline is None else max(0.0, deadline - self.clock())
            done, not_done = wait(futures, timeout=remaining)

            for future in done:
                i = futures[future]
                try:
                    results[i] = future.result()
                except AssessmentError as e:
                    logger.error(f"Error assessing answer {i}: {e}")
                except Exception:
                    logger.exception(f"Unexpected error assessing answer {i}")
            for future in not_done:
                future.cancel()
                logger.error(f"Submission deadline passed before answer {futures[future]} was scored")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        assessments: List[AnswerAssessment] = []
        failed: List[int] = []
        for i, item in enumerate(submissions, 1):
            if i in results:
                assessments.append(results[i])
            else:
                assessments.append(failed_assessment(item))
                failed.append(i)
        return assessments, failed

    def _aggregate(self, assessments: List[AnswerAssessment],
                   deadline: Optional[float]) -> Optional[AggregateAssessment]:
        if self._expired(deadline):
            logger.warning("Submission deadline passed, skipping overall assessment")
            return None
        try:
            return self.aggregator.assess(assessments)
        except Exception as e:
            logger.warning(f"Overall assessment unavailable: {e}")
            return None

    def _persist(self, candidate_id: str, assessments: List[AnswerAssessment],
                 final_score: float, overall: Optional[AggregateAssessment]) -> bool:
        result = build_interview_result(assessments, final_score, overall)
        try:
            candidate = self.repository.record_interview(candidate_id, result)
        except Exception:
            logger.exception(f"Error saving interview for candidate {candidate_id}")
            return False
        if candidate is None:
            logger.info(f"Candidate {candidate_id} not found, interview not saved")
            return False
        logger.info(
            f"Saved interview {len(candidate.previous_interviews)} for candidate {candidate_id}"
        )
        return True
