# interview_service/config.py
# Environment-driven settings. Values are read once at import time.
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# ==========================================
# LLM PROVIDER
# ==========================================

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openrouter").lower()

OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")

GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")

# Tried in order; the next model is used when one fails or answers empty
INTERVIEW_MODELS = _env_list(
    "INTERVIEW_MODELS",
    "meta-llama/llama-3.3-70b-instruct,"
    "qwen/qwen-2.5-coder-32b-instruct,"
    "deepseek/deepseek-r1-distill-llama-70b",
)

LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# ==========================================
# PIPELINE
# ==========================================

SUBMISSION_TIMEOUT_SECONDS = float(os.getenv("SUBMISSION_TIMEOUT_SECONDS", "300"))
SCORING_WORKERS = max(1, int(os.getenv("SCORING_WORKERS", "1")))

QUESTION_COUNT = int(os.getenv("QUESTION_COUNT", "5"))
QUESTION_GENERATION_ATTEMPTS = max(1, int(os.getenv("QUESTION_GENERATION_ATTEMPTS", "2")))
MAX_RESUME_CHARS = int(os.getenv("MAX_RESUME_CHARS", "50000"))

# Upstream guard for question generation
MIN_RESUME_CHARS = 50
MIN_SKILLS_CHARS = 3

MAX_SCORE_PER_QUESTION = 5
FINAL_SCORE_SCALE = 50

# ==========================================
# STORAGE / HTTP
# ==========================================

CANDIDATE_STORE_DIR = os.getenv("CANDIDATE_STORE_DIR", "data/candidates")
CORS_ORIGINS = _env_list("CORS_ORIGINS", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
