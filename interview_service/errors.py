# interview_service/errors.py
"""
Error taxonomy for the service.

Validation errors surface as HTTP 400. Parse and transport errors surface as
HTTP 500 for question generation but are absorbed per answer while scoring.
Persistence errors are logged and never reach the client.
"""


class InterviewServiceError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(InterviewServiceError):
    """A request field is missing or malformed."""


class UnsupportedFileTypeError(ValidationError):
    def __init__(self, content_type: str = ""):
        self.content_type = content_type
        super().__init__("Unsupported file type. Use PDF, DOCX, or TXT")


class ParseError(InterviewServiceError):
    """LLM output did not contain a JSON payload."""


class TransportError(InterviewServiceError):
    """Every configured model failed to answer."""


class GenerationError(InterviewServiceError):
    """Question generation could not produce a usable question set."""


class AssessmentError(InterviewServiceError):
    """A single answer could not be scored."""


class AggregateAssessmentError(InterviewServiceError):
    """The cross-question assessment could not be produced."""


class PersistenceError(InterviewServiceError):
    """The candidate store could not be read or written."""


class ConfigurationError(InterviewServiceError, RuntimeError):
    """Required settings (such as API keys) are missing or invalid."""
