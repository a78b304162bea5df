import json

import pytest
from fastapi.testclient import TestClient

from interview_service.errors import ConfigurationError, TransportError
from interview_service.main import app, get_llm_client, get_repository

from .conftest import (AGGREGATE_MARKER, AGGREGATE_RESPONSE, ANSWER_MARKER, ANSWER_RESPONSE,
                       QUESTION_MARKER, SAMPLE_QUESTIONS, SUBMISSIONS)

RESUME_TXT = (
    "Jane Doe\nSoftware Engineer\n"
    "Built a Python data processing service with FastAPI and PostgreSQL. "
    "Maintained React dashboards and CI pipelines on GitHub Actions."
).encode("utf-8")


@pytest.fixture
def client(llm, repository):
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_repository] = lambda: repository
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ==========================================
# /api/generate-questions
# ==========================================

def test_generate_from_resume_file(client, llm):
    llm.on(QUESTION_MARKER, "Sure!\n```json\n" + json.dumps(SAMPLE_QUESTIONS) + "\n```")
    r = client.post("/api/generate-questions",
                    files={"resume": ("resume.txt", RESUME_TXT, "text/plain")})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["questions"] == SAMPLE_QUESTIONS
    assert body["resumeLength"] == len(RESUME_TXT.decode("utf-8"))
    assert body["skillsProvided"] is False
    assert body["message"] == "Questions generated successfully"
    assert "FastAPI and PostgreSQL" in llm.calls[0]


def test_generate_from_skills_only(client, llm):
    llm.on(QUESTION_MARKER, json.dumps(SAMPLE_QUESTIONS))
    r = client.post("/api/generate-questions", data={"skills": "  Go, Kubernetes  "})

    assert r.status_code == 200
    assert r.json()["skillsProvided"] is True
    assert r.json()["resumeLength"] == 0


def test_generate_requires_resume_or_skills(client, llm):
    r = client.post("/api/generate-questions",
                    data={"skills": "Go"},
                    files={"resume": ("resume.txt", b"too short", "text/plain")})

    assert r.status_code == 400
    assert r.json() == {"error": "Please provide either a resume (min 50 chars) or skills (min 3 chars)"}
    assert llm.calls == []


def test_generate_rejects_unsupported_file(client, llm):
    r = client.post("/api/generate-questions",
                    data={"skills": "Python"},
                    files={"resume": ("photo.png", b"\x89PNG\r\n", "image/png")})

    assert r.status_code == 400
    assert r.json() == {"error": "Unsupported file type. Use PDF, DOCX, or TXT"}


def test_generate_failure_is_500(client, llm):
    llm.on(QUESTION_MARKER, TransportError("all models failed"))
    r = client.post("/api/generate-questions", data={"skills": "Python, Django"})

    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to generate questions"
    assert "all models failed" in body["details"]


def test_missing_credentials_are_reported(client):
    def unconfigured():
        raise ConfigurationError("OPENROUTER_API_KEY not set")

    app.dependency_overrides[get_llm_client] = unconfigured
    r = client.post("/api/generate-questions", data={"skills": "Python"})

    assert r.status_code == 500
    assert r.json()["error"] == "Service is not configured"


# ==========================================
# /api/submit-answer
# ==========================================

def test_submit_returns_full_report(client, llm):
    llm.on(AGGREGATE_MARKER, AGGREGATE_RESPONSE).on(ANSWER_MARKER, ANSWER_RESPONSE)
    r = client.post("/api/submit-answer", json={"questionsAndAnswers": SUBMISSIONS})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["finalScore"] == 40.0
    assert body["maxPossibleScore"] == 50
    assert body["message"] == "Answers assessed successfully"
    assert [a["questionNumber"] for a in body["assessments"]] == [1, 2, 3]
    assert body["assessments"][2]["level"] == "Hard"
    assert set(body["assessments"][0]) == {
        "questionNumber", "question", "answer", "level", "score", "feedback", "strengths", "weaknesses",
    }
    assert body["overallAssessment"]["overallStrengths"][0] == "API design"


@pytest.mark.parametrize("payload", [
    {"questionsAndAnswers": []},
    {},
    {"questionsAndAnswers": [{"question": "q", "answer": "a"}]},
    {"questionsAndAnswers": [{"question": "q", "answer": "a", "level": "Expert"}]},
])
def test_submit_validation_errors(client, llm, payload):
    r = client.post("/api/submit-answer", json=payload)

    assert r.status_code == 400
    assert "error" in r.json()
    assert llm.calls == []


def test_submit_rejects_non_object_body(client):
    r = client.post("/api/submit-answer", content=b"[1, 2", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request body"


def test_submit_without_aggregate(client, llm):
    llm.on(AGGREGATE_MARKER, "I could not summarise this interview.")
    llm.on(ANSWER_MARKER, ANSWER_RESPONSE)
    r = client.post("/api/submit-answer", json={"questionsAndAnswers": SUBMISSIONS})

    assert r.status_code == 200
    body = r.json()
    assert "overallAssessment" not in body
    assert body["finalScore"] == 40.0
    assert len(body["assessments"]) == 3


def test_submit_with_failed_answer(client, llm):
    llm.on(AGGREGATE_MARKER, AGGREGATE_RESPONSE)
    llm.on(SUBMISSIONS[1]["answer"], TransportError("timeout"))
    llm.on(ANSWER_MARKER, '{"score": 5}')
    r = client.post("/api/submit-answer", json={"questionsAndAnswers": SUBMISSIONS})

    body = r.json()
    assert r.status_code == 200
    assert body["assessments"][1]["score"] == 0
    assert body["assessments"][1]["feedback"] == "Error assessing this answer"
    assert body["finalScore"] == 33.3


def test_unknown_candidate_gives_same_shape(client, llm):
    llm.on(AGGREGATE_MARKER, AGGREGATE_RESPONSE).on(ANSWER_MARKER, ANSWER_RESPONSE)
    with_id = client.post("/api/submit-answer",
                          json={"questionsAndAnswers": SUBMISSIONS, "candidateId": "nobody"})
    without = client.post("/api/submit-answer", json={"questionsAndAnswers": SUBMISSIONS})

    assert with_id.status_code == without.status_code == 200
    assert with_id.json() == without.json()


# ==========================================
# /candidates
# ==========================================

def test_candidate_history_and_leaderboard(client, llm):
    llm.on(AGGREGATE_MARKER, AGGREGATE_RESPONSE)
    llm.on(SUBMISSIONS[0]["answer"], '{"score": 1}')
    llm.on(ANSWER_MARKER, ANSWER_RESPONSE)

    strong = client.post("/candidates", json={"name": "Strong", "email": "s@example.com"}).json()
    weak = client.post("/candidates", json={"name": "Weak"}).json()

    client.post("/api/submit-answer",
                json={"questionsAndAnswers": SUBMISSIONS[1:], "candidateId": strong["id"]})
    client.post("/api/submit-answer",
                json={"questionsAndAnswers": SUBMISSIONS[:1], "candidateId": weak["id"]})

    record = client.get(f"/candidates/{strong['id']}").json()
    assert record["finalScore"] == 40.0
    assert len(record["previousInterviews"]) == 1
    assert record["previousInterviews"][0]["recommendation"] == record["recommendation"]

    board = client.get("/candidates").json()
    assert [c["name"] for c in board] == ["Strong", "Weak"]
    assert board[1]["finalScore"] == 10.0


def test_missing_candidate_is_404(client):
    r = client.get("/candidates/unknown")
    assert r.status_code == 404
    assert r.json() == {"error": "Candidate record not found"}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
