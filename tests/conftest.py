import json
import threading

import pytest

from interview_service.repository import InMemoryCandidateRepository

QUESTION_MARKER = "TECHNICAL interview questions"
ANSWER_MARKER = "CANDIDATE'S ANSWER:"
AGGREGATE_MARKER = "INTERVIEW SUMMARY:"

SAMPLE_QUESTIONS = [
    {"level": "Easy", "question": "What is a Python list comprehension?", "time": 25},
    {"level": "Easy", "question": "What does HTTP status 404 mean?", "time": 20},
    {"level": "Medium", "question": "How does FastAPI use type hints for validation?", "time": 60},
    {"level": "Medium", "question": "Explain database indexing trade-offs.", "time": 75},
    {"level": "Hard", "question": "Design a rate limiter for a public REST API.", "time": 150},
]

ANSWER_RESPONSE = (
    "```json\n"
    + json.dumps({
        "score": 4,
        "feedback": "Accurate and well structured.",
        "strengths": ["Correct definition", "Good example"],
        "weaknesses": ["No mention of edge cases"],
    })
    + "\n```"
)

AGGREGATE_RESPONSE = json.dumps({
    "overallFeedback": "The candidate shows solid backend fundamentals.",
    "overallStrengths": ["API design", "Python", "Databases", "Communication"],
    "overallWeaknesses": ["Scalability", "Testing", "Security", "Caching"],
    "recommendation": "Good foundation, suitable for a mid-level role",
})

SUBMISSIONS = [
    {"question": "What is a Python list comprehension?", "answer": "A compact way to build lists.", "level": "Easy"},
    {"question": "Explain database indexing trade-offs.", "answer": "Faster reads, slower writes.", "level": "Medium"},
    {"question": "Design a rate limiter for a public REST API.", "answer": "Token bucket in Redis.", "level": "Hard"},
]


class ScriptedLLM:
    """
    Stand-in for LLMClient. Each rule maps a prompt substring to outcomes;
    outcomes are consumed in order and the last one repeats. An outcome may be
    a string, an exception instance, or a callable taking the prompt.
    Rules are checked in registration order.
    """

    def __init__(self):
        self.rules = []
        self.calls = []
        self._lock = threading.Lock()

    def on(self, marker, *outcomes):
        self.rules.append((marker, list(outcomes)))
        return self

    def complete(self, prompt, temperature=0.3, max_tokens=1500):
        with self._lock:
            self.calls.append(prompt)
            for marker, outcomes in self.rules:
                if marker in prompt:
                    outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
                    break
            else:
                raise AssertionError(f"Unexpected prompt: {prompt[:80]!r}")

        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(prompt)
        return outcome

    def calls_with(self, marker):
        return [c for c in self.calls if marker in c]


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def repository():
    return InMemoryCandidateRepository()
