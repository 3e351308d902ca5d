"""
Firestore document models using Python dataclasses.

Each model mirrors one document kind of the classroom tree:

    users/{userId}
    classrooms/{classroomId}
        members/{userId}
        quizzes/{quizId}
            quizQuestions/{questionId}
            stats/{userId}

and includes:
  - An `id` field for the Firestore document ID
  - A `to_dict()` instance method for serialization (camelCase field names,
    as stored)
  - A `from_dict(data, doc_id)` classmethod for deserialization

Datetime fields are kept as native datetime objects since Firestore
handles them natively. Reading a document that lacks a required field
raises MalformedDocument.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class MalformedDocument(ValueError):
    """A stored document could not be turned into a model."""

    def __init__(self, kind: str, doc_id: Optional[str], detail: str):
        super().__init__(f"malformed {kind} document {doc_id!r}: {detail}")
        self.kind = kind
        self.doc_id = doc_id


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_datetime(value) -> Optional[datetime]:
    """Convert a value to an aware datetime. Accepts datetime objects, ISO-format
    strings, and Firestore DatetimeWithNanoseconds objects."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, str):
        # Handle ISO format strings (with or without trailing Z)
        value = value.replace("Z", "+00:00")
        try:
            return parse_datetime(datetime.fromisoformat(value))
        except (ValueError, TypeError):
            return None
    return None


def _require(kind: str, data: Dict[str, Any], doc_id: Optional[str], key: str):
    if key not in data or data[key] is None:
        raise MalformedDocument(kind, doc_id, f"missing field {key!r}")
    return data[key]


def _require_datetime(kind: str, data: Dict[str, Any], doc_id: Optional[str], key: str) -> datetime:
    value = parse_datetime(_require(kind, data, doc_id, key))
    if value is None:
        raise MalformedDocument(kind, doc_id, f"field {key!r} is not a timestamp")
    return value


# ===========================================================================
# 1. User
# ===========================================================================

@dataclass
class User:
    id: Optional[str] = None
    name: str = ""
    email: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.id,
            "name": self.name,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> User:
        return cls(
            id=doc_id or data.get("userId"),
            name=_require("user", data, doc_id, "name"),
            email=data.get("email", ""),
        )


# ===========================================================================
# 2. Classroom
# ===========================================================================

@dataclass
class Classroom:
    id: Optional[str] = None
    classroom_name: str = ""
    created_by_name: str = ""
    password: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classroomName": self.classroom_name,
            "createdByName": self.created_by_name,
            "password": self.password,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Classroom:
        return cls(
            id=doc_id,
            classroom_name=_require("classroom", data, doc_id, "classroomName"),
            created_by_name=data.get("createdByName", ""),
            password=data.get("password", ""),
            created_at=parse_datetime(data.get("createdAt")),
        )


# ===========================================================================
# 3. Member  (classrooms/{classroomId}/members/{userId})
# ===========================================================================

@dataclass
class Member:
    user_id: str = ""
    email: str = ""
    name: str = ""
    is_creator: bool = False
    classroom_created_at: Optional[datetime] = None

    @property
    def id(self) -> str:
        return self.user_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "email": self.email,
            "name": self.name,
            "isCreator": self.is_creator,
            "classroomCreatedAt": self.classroom_created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Member:
        return cls(
            user_id=data.get("userId") or doc_id or "",
            email=data.get("email", ""),
            name=data.get("name", ""),
            is_creator=bool(data.get("isCreator", False)),
            classroom_created_at=parse_datetime(data.get("classroomCreatedAt")),
        )


# ===========================================================================
# 4. Quiz  (classrooms/{classroomId}/quizzes/{quizId})
# ===========================================================================

@dataclass
class Quiz:
    id: Optional[str] = None
    quiz_name: str = ""
    deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quizName": self.quiz_name,
            "deadline": self.deadline,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Quiz:
        return cls(
            id=doc_id,
            quiz_name=_require("quiz", data, doc_id, "quizName"),
            deadline=_require_datetime("quiz", data, doc_id, "deadline"),
            created_at=parse_datetime(data.get("createdAt")),
        )


# ===========================================================================
# 5. Question  (.../quizzes/{quizId}/quizQuestions/{questionId})
# ===========================================================================

@dataclass
class Question:
    id: Optional[str] = None
    question: str = ""
    options: List[str] = field(default_factory=list)
    answer: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "answer": self.answer,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Question:
        options = _require("question", data, doc_id, "options")
        if not isinstance(options, list):
            raise MalformedDocument("question", doc_id, "options is not a list")
        return cls(
            id=doc_id,
            question=_require("question", data, doc_id, "question"),
            options=[str(o) for o in options],
            answer=_require("question", data, doc_id, "answer"),
        )

    def cleaned(self) -> Question:
        """Copy with trimmed prompt/answer and blank options dropped."""
        options = [o.strip() for o in self.options]
        return Question(
            id=self.id,
            question=self.question.strip(),
            options=[o for o in options if o],
            answer=self.answer.strip(),
        )


# ===========================================================================
# 6. Attempt  (element of QuizStat.attempts)
# ===========================================================================

@dataclass
class Attempt:
    attempt_date: datetime
    score: int
    total_score: int

    def is_late(self, deadline: datetime) -> bool:
        return self.attempt_date > parse_datetime(deadline)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attemptDate": self.attempt_date,
            "score": self.score,
            "totalScore": self.total_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Attempt:
        return cls(
            attempt_date=_require_datetime("attempt", data, None, "attemptDate"),
            score=int(_require("attempt", data, None, "score")),
            total_score=int(_require("attempt", data, None, "totalScore")),
        )


# ===========================================================================
# 7. QuizStat  (.../quizzes/{quizId}/stats/{userId})
# ===========================================================================

@dataclass
class QuizStat:
    user_id: str = ""
    email: str = ""
    name: str = ""
    last_attempt_date: Optional[datetime] = None
    attempts: List[Attempt] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.user_id

    def sorted_attempts(self) -> List[Attempt]:
        """Attempts newest first, the order they are displayed in."""
        return sorted(self.attempts, key=lambda a: a.attempt_date, reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "email": self.email,
            "name": self.name,
            "lastAttemptDate": self.last_attempt_date,
            "attempts": [a.to_dict() for a in self.attempts],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> QuizStat:
        raw_attempts = data.get("attempts") or []
        if not isinstance(raw_attempts, list):
            raise MalformedDocument("stat", doc_id, "attempts is not a list")
        return cls(
            user_id=data.get("userId") or doc_id or "",
            email=data.get("email", ""),
            name=data.get("name", ""),
            last_attempt_date=_require_datetime("stat", data, doc_id, "lastAttemptDate"),
            attempts=[Attempt.from_dict(a) for a in raw_attempts],
        )
