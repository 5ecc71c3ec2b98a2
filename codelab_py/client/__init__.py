"""Client module for learning platform interaction."""

from .client import ApiClient, JudgeClient, LessonClient
from .errors import (
    ApiError,
    LessonNotFoundError,
    ProtocolError,
    TransportError,
    UnauthorizedError,
)
from .models import (
    Challenge,
    Enrollment,
    ExecutionResult,
    Lesson,
    Metrics,
    RawPayload,
    StructuredPayload,
    SubmissionResult,
    TestCase,
    User,
    Verdict,
)
from .session import AuthSession

__all__ = [
    "ApiClient",
    "JudgeClient",
    "LessonClient",
    "AuthSession",
    "ApiError",
    "LessonNotFoundError",
    "ProtocolError",
    "TransportError",
    "UnauthorizedError",
    "Challenge",
    "Enrollment",
    "ExecutionResult",
    "Lesson",
    "Metrics",
    "RawPayload",
    "StructuredPayload",
    "SubmissionResult",
    "TestCase",
    "User",
    "Verdict",
]
