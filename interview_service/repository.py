# interview_service/repository.py
"""
Candidate storage.

``JsonCandidateRepository`` keeps one JSON document per candidate under a
directory. Writes go to a temp file that is then renamed over the document,
and each candidate has its own lock, so appending an interview and updating
the latest fields land together or not at all.
"""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from .errors import PersistenceError
from .schemas import Candidate, InterviewResult

logger = logging.getLogger("ai-service.repository")


class CandidateRepository(Protocol):
    def find_by_id(self, candidate_id: str) -> Optional[Candidate]: ...

    def save(self, candidate: Candidate) -> None: ...

    def create(self, name: Optional[str] = None, email: Optional[str] = None,
               phone: Optional[str] = None) -> Candidate: ...

    def list_candidates(self) -> List[Candidate]: ...

    def record_interview(self, candidate_id: str, result: InterviewResult) -> Optional[Candidate]: ...


def leaderboard_order(candidates: List[Candidate]) -> List[Candidate]:
    """Highest final score first; candidates without a score last."""
    return sorted(
        candidates,
        key=lambda c: (c.final_score is None, -(c.final_score or 0.0)),
    )


class _LockRegistry:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def get(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


class JsonCandidateRepository:
    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._locks = _LockRegistry()

    def _path(self, candidate_id: str) -> Path:
        # ids are generated hex strings; anything with a path separator is unknown
        if not candidate_id or os.sep in candidate_id or "/" in candidate_id or candidate_id.startswith("."):
            raise KeyError(candidate_id)
        return self.directory / f"{candidate_id}.json"

    def _load(self, path: Path) -> Optional[Candidate]:
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                return Candidate.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            raise PersistenceError(f"Failed to load candidate file {path}: {e!r}") from e

    def _write(self, candidate: Candidate) -> None:
        path = self._path(candidate.id)
        data = candidate.model_dump(mode="json", by_alias=True)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{candidate.id}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Failed to persist candidate {candidate.id}: {e!r}") from e

    def find_by_id(self, candidate_id: str) -> Optional[Candidate]:
        try:
            path = self._path(candidate_id)
        except KeyError:
            return None
        return self._load(path)

    def save(self, candidate: Candidate) -> None:
        with self._locks.get(candidate.id):
            self._write(candidate)

    def create(self, name: Optional[str] = None, email: Optional[str] = None,
               phone: Optional[str] = None) -> Candidate:
        candidate = Candidate(id=uuid4().hex, name=name, email=email, phone=phone)
        self.save(candidate)
        logger.info(f"Created candidate {candidate.id}")
        return candidate

    def list_candidates(self) -> List[Candidate]:
        candidates = []
        for path in sorted(self.directory.glob("*.json")):
            candidate = self._load(path)
            if candidate is not None:
                candidates.append(candidate)
        return leaderboard_order(candidates)

    def record_interview(self, candidate_id: str, result: InterviewResult) -> Optional[Candidate]:
        """Append ``result`` to the candidate's history; None when the candidate is unknown."""
        try:
            path = self._path(candidate_id)
        except KeyError:
            return None
        # records are never deleted; an absent file needs no lock
        if not path.exists():
            return None
        with self._locks.get(candidate_id):
            candidate = self._load(path)
            if candidate is None:
                return None
            candidate.record_interview(result)
            self._write(candidate)
        return candidate


class InMemoryCandidateRepository:
    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, Candidate] = {}

    def find_by_id(self, candidate_id: str) -> Optional[Candidate]:
        with self._lock:
            candidate = self._records.get(candidate_id)
            return candidate.model_copy(deep=True) if candidate else None

    def save(self, candidate: Candidate) -> None:
        with self._lock:
            self._records[candidate.id] = candidate.model_copy(deep=True)

    def create(self, name: Optional[str] = None, email: Optional[str] = None,
               phone: Optional[str] = None) -> Candidate:
        candidate = Candidate(id=uuid4().hex, name=name, email=email, phone=phone)
        self.save(candidate)
        return candidate

    def list_candidates(self) -> List[Candidate]:
        with self._lock:
            candidates = [c.model_copy(deep=True) for c in self._records.values()]
        return leaderboard_order(candidates)

    def record_interview(self, candidate_id: str, result: InterviewResult) -> Optional[Candidate]:
        with self._lock:
            stored = self._records.get(candidate_id)
            if stored is None:
                return None
            updated = stored.model_copy(deep=True)
            updated.record_interview(result)
            self._records[candidate_id] = updated
            return updated.model_copy(deep=True)
