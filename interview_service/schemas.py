# interview_service/schemas.py
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Level = Literal["Easy", "Medium", "Hard"]
LEVELS = ("Easy", "Medium", "Hard")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==========================================
# DOMAIN
# ==========================================

class Question(CamelModel):
    level: Level
    question: str
    time: int


class AnswerSubmission(CamelModel):
    question: str
    answer: str
    level: Level


class AnswerScore(CamelModel):
    """Normalised output of scoring one answer."""

    score: float
    feedback: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    # Set when the model returned a score that was not a number
    score_flagged: bool = Field(default=False, exclude=True)


class AnswerAssessment(AnswerSubmission):
    score: float
    feedback: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    score_flagged: bool = Field(default=False, exclude=True)

    @classmethod
    def from_score(cls, item: AnswerSubmission, result: AnswerScore) -> "AnswerAssessment":
        return cls(
            question=item.question,
            answer=item.answer,
            level=item.level,
            score=result.score,
            feedback=result.feedback,
            strengths=list(result.strengths),
            weaknesses=list(result.weaknesses),
            score_flagged=result.score_flagged,
        )


class NumberedAssessment(AnswerAssessment):
    question_number: int


class StoredAnswer(AnswerAssessment):
    timestamp: datetime = Field(default_factory=utcnow)


class AggregateAssessment(CamelModel):
    overall_feedback: str = ""
    overall_strengths: List[str] = Field(default_factory=list)
    overall_weaknesses: List[str] = Field(default_factory=list)
    recommendation: str = ""


class InterviewResult(CamelModel):
    interview_date: datetime = Field(default_factory=utcnow)
    answers: List[StoredAnswer] = Field(default_factory=list)
    final_score: float
    overall_feedback: str = ""
    overall_strengths: List[str] = Field(default_factory=list)
    overall_weaknesses: List[str] = Field(default_factory=list)
    recommendation: str = ""
    summary: str = ""


class Candidate(CamelModel):
    """
    Persisted candidate document.

    The top-level answer/score fields are a denormalised copy of the most
    recent entry in ``previous_interviews``.
    """

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    answers: List[StoredAnswer] = Field(default_factory=list)
    final_score: Optional[float] = None
    summary: Optional[str] = None
    overall_feedback: Optional[str] = None
    overall_strengths: List[str] = Field(default_factory=list)
    overall_weaknesses: List[str] = Field(default_factory=list)
    recommendation: Optional[str] = None
    previous_interviews: List[InterviewResult] = Field(default_factory=list)

    @property
    def latest_interview(self) -> Optional[InterviewResult]:
        return self.previous_interviews[-1] if self.previous_interviews else None

    def record_interview(self, result: InterviewResult) -> None:
        """Append to history and mirror the entry into the latest fields."""
        self.previous_interviews.append(result)
        self.answers = list(result.answers)
        self.final_score = result.final_score
        self.summary = result.summary
        self.overall_feedback = result.overall_feedback
        self.overall_strengths = list(result.overall_strengths)
        self.overall_weaknesses = list(result.overall_weaknesses)
        self.recommendation = result.recommendation


# ==========================================
# HTTP
# ==========================================

class SubmitAnswersRequest(CamelModel):
    # Items stay loose here; the pipeline validates them and answers 400
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    questions_and_answers: Optional[List[Any]] = None
    candidate_id: Optional[str] = None


class CandidateCreateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class GenerateQuestionsResponse(CamelModel):
    success: bool = True
    questions: List[Question]
    resume_length: int
    skills_provided: bool
    message: str = "Questions generated successfully"


class SubmitAnswersResponse(CamelModel):
    success: bool = True
    assessments: List[NumberedAssessment]
    final_score: float
    max_possible_score: int = 50
    message: str = "Answers assessed successfully"
    overall_assessment: Optional[AggregateAssessment] = None
