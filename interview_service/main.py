# interview_service/main.py
# AI Interview Assessment Service
#  - Technical question generation from a resume and/or skills list
#  - Per-answer LLM scoring (0-5) with partial-failure tolerance
#  - Overall assessment, final score out of 50, candidate history
import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from . import __version__, config
from .aggregate import AggregateAssessor
from .errors import (ConfigurationError, GenerationError, InterviewServiceError,
                     PersistenceError, ValidationError)
from .extraction import extract_resume_text
from .llm import LLMClient, build_llm_client
from .pipeline import AssessmentPipeline
from .questions import QuestionGenerator, validate_generation_input
from .repository import CandidateRepository, JsonCandidateRepository
from .schemas import (Candidate, CandidateCreateRequest, GenerateQuestionsResponse,
                      SubmitAnswersRequest, SubmitAnswersResponse)
from .scoring import AnswerAssessor

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("ai-service")

app = FastAPI(title="AI Interview Assessment Service", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==========================================
# DEPENDENCIES
# ==========================================

@lru_cache
def get_llm_client() -> LLMClient:
    return build_llm_client()


@lru_cache
def get_repository() -> CandidateRepository:
    return JsonCandidateRepository(config.CANDIDATE_STORE_DIR)


def get_question_generator(llm: LLMClient = Depends(get_llm_client)) -> QuestionGenerator:
    return QuestionGenerator(llm)


def get_pipeline(llm: LLMClient = Depends(get_llm_client),
                 repository: CandidateRepository = Depends(get_repository)) -> AssessmentPipeline:
    return AssessmentPipeline(
        assessor=AnswerAssessor(llm),
        aggregator=AggregateAssessor(llm),
        repository=repository,
    )


# ==========================================
# ERROR MAPPING
# ==========================================

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to generate questions", "details": str(exc)},
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Candidate store error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Server error", "details": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Service misconfigured: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Service is not configured", "details": str(exc)},
    )


# ==========================================
# INTERVIEW ENDPOINTS
# ==========================================

@app.post("/api/generate-questions", response_model=GenerateQuestionsResponse)
async def generate_questions(
    resume: Optional[UploadFile] = File(None),
    skills: Optional[str] = Form(None),
    generator: QuestionGenerator = Depends(get_question_generator),
):
    """Generate technical questions from an uploaded resume and/or a skills list."""
    skills_text = (skills or "").strip()
    resume_text = ""

    try:
        if resume is not None and resume.filename:
            contents = await resume.read()
            resume_text = await run_in_threadpool(
                extract_resume_text, contents, resume.content_type, resume.filename
            )
            logger.info(f"Extracted {len(resume_text)} chars from {resume.filename!r}")

        validate_generation_input(resume_text, skills_text)
        questions = await run_in_threadpool(generator.generate, resume_text, skills_text)
    except InterviewServiceError:
        raise
    except Exception as e:
        logger.exception("Error in generate-questions")
        raise GenerationError(str(e)) from e
    finally:
        if resume is not None:
            await resume.close()

    logger.info(f"Generated questions by level: {generator.summarize(questions)}")
    return GenerateQuestionsResponse(
        questions=questions,
        resume_length=len(resume_text),
        skills_provided=bool(skills_text),
    )


@app.post(
    "/api/submit-answer",
    response_model=SubmitAnswersResponse,
    response_model_exclude_none=True,
)
def submit_answer(req: SubmitAnswersRequest,
                  pipeline: AssessmentPipeline = Depends(get_pipeline)):
    """Score every answer of a finished interview and return the full report."""
    try:
        report = pipeline.run(req.questions_and_answers, candidate_id=req.candidate_id)
    except ValidationError:
        raise
    except Exception as e:
        logger.exception("Error in submit-answer")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to assess answers", "details": str(e)},
        )
    return report.to_response()


# ==========================================
# CANDIDATES
# ==========================================

@app.post("/candidates", response_model=Candidate, status_code=201)
def create_candidate(req: CandidateCreateRequest,
                     repository: CandidateRepository = Depends(get_repository)):
    return repository.create(name=req.name, email=req.email, phone=req.phone)


@app.get("/candidates", response_model=List[Candidate])
def list_candidates(repository: CandidateRepository = Depends(get_repository)):
    """Leaderboard: every candidate, best final score first."""
    return repository.list_candidates()


@app.get("/candidates/{candidate_id}", response_model=Candidate)
def get_candidate(candidate_id: str,
                  repository: CandidateRepository = Depends(get_repository)):
    candidate = repository.find_by_id(candidate_id)
    if candidate is None:
        return JSONResponse(status_code=404, content={"error": "Candidate record not found"})
    return candidate


# ==========================================
# SERVICE
# ==========================================

@app.get("/")
def root():
    return {"service": "AI Interview Assessment Service", "version": __version__}


@app.get("/health")
def health():
    models = [config.GROQ_MODEL] if config.LLM_PROVIDER == "groq" else config.INTERVIEW_MODELS
    return {"status": "healthy", "provider": config.LLM_PROVIDER, "models": models}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
