"""Data models for learning platform entities."""

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .errors import ProtocolError


@dataclass(frozen=True)
class RawPayload:
    """A test case value the backend sent as a plain string."""

    text: str

    def display(self) -> str:
        return self.text


@dataclass(frozen=True)
class StructuredPayload:
    """A test case value the backend sent as a JSON value."""

    value: Any

    def display(self) -> str:
        return json.dumps(self.value, ensure_ascii=False)


Payload = Union[RawPayload, StructuredPayload]


def parse_payload(value: Any) -> Payload:
    """Wrap a wire value. Strings stay raw; they are never decoded as JSON."""
    if isinstance(value, str):
        return RawPayload(value)
    return StructuredPayload(value)


class Verdict(enum.Enum):
    """Coarse outcome of a run or submit call."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    ERRORED = "ERRORED"

    @classmethod
    def parse(cls, status: Any) -> "Verdict":
        """Normalize the judge's status vocabulary."""
        if not isinstance(status, str):
            raise ProtocolError(f"Invalid execution status: {status!r}")

        normalized = status.strip().upper()
        if normalized in ("PASS", "PASSED"):
            return cls.PASSED
        if normalized in ("FAIL", "FAILED"):
            return cls.FAILED
        if normalized in ("ERROR", "ERRORED"):
            return cls.ERRORED
        raise ProtocolError(f"Unknown execution status: {status!r}")


@dataclass
class TestCase:
    """Represents one input/expected-output pair of a challenge."""

    input: Payload
    expected_output: Payload
    is_hidden: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TestCase":
        return cls(
            input=parse_payload(data.get("input")),
            expected_output=parse_payload(data.get("expectedOutput")),
            is_hidden=bool(data.get("isHidden", False)),
        )


@dataclass
class Challenge:
    """Represents a coding problem attached to a lesson."""

    id: str
    title: str
    description: str = ""
    starter_codes: Dict[str, str] = field(default_factory=dict)
    solution_codes: Dict[str, str] = field(default_factory=dict)
    test_cases: List[TestCase] = field(default_factory=list)
    lesson_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Challenge":
        starter_codes = dict(data.get("starterCodes") or {})
        # Older lesson payloads carry a single starter source plus its language
        if not starter_codes and "starterCode" in data:
            language = data.get("language") or "python"
            starter_codes[language] = data.get("starterCode") or ""

        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description") or "",
            starter_codes=starter_codes,
            solution_codes=dict(data.get("solutionCodes") or {}),
            test_cases=[TestCase.from_dict(tc) for tc in data.get("testCases") or []],
            lesson_id=data.get("lessonId"),
        )

    def languages(self) -> List[str]:
        return list(self.starter_codes)

    def starter_code(self, language: str) -> str:
        return self.starter_codes.get(language, "")

    def default_language(self, preferred: str = "python") -> str:
        """Pick the preferred language if mapped, otherwise the first one."""
        if preferred in self.starter_codes or not self.starter_codes:
            return preferred
        return next(iter(self.starter_codes))


@dataclass
class Lesson:
    """Represents a lesson with its challenges."""

    id: str
    title: str
    type: str = "LESSON"
    order_index: Optional[int] = None
    status: Optional[str] = None
    content_markdown: str = ""
    course_id: Optional[str] = None
    challenges: List[Challenge] = field(default_factory=list)
    next_lesson_id: Optional[str] = None
    prev_lesson_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lesson":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            type=data.get("type", "LESSON"),
            order_index=data.get("orderIndex"),
            status=data.get("status"),
            content_markdown=data.get("contentMarkdown") or "",
            course_id=data.get("courseId"),
            challenges=[Challenge.from_dict(c) for c in data.get("challenges") or []],
            next_lesson_id=data.get("nextLessonId"),
            prev_lesson_id=data.get("prevLessonId"),
        )

    def find_challenge(self, ref: Optional[str] = None) -> Optional[Challenge]:
        """Look up a challenge by id or zero-based index; default is the first."""
        if not self.challenges:
            return None
        if ref is None:
            return self.challenges[0]

        for challenge in self.challenges:
            if challenge.id == ref:
                return challenge

        if ref.isdigit() and int(ref) < len(self.challenges):
            return self.challenges[int(ref)]
        return None


@dataclass
class Metrics:
    """Runtime and memory figures reported by the judge."""

    runtime: str
    memory_used: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Metrics":
        if not isinstance(data, dict) or "runtime" not in data:
            raise ProtocolError("Execution result is missing metrics")
        memory_used = data.get("memoryUsed")
        return cls(
            runtime=str(data["runtime"]),
            memory_used=str(memory_used) if memory_used is not None else None,
        )


@dataclass
class ExecutionResult:
    """Outcome of a run request."""

    verdict: Verdict
    stdout: str
    stderr: Optional[str] = None
    metrics: Metrics = field(default_factory=lambda: Metrics(runtime="0s"))

    @classmethod
    def from_dict(cls, data: Any) -> "ExecutionResult":
        if not isinstance(data, dict):
            raise ProtocolError("Malformed execution result")
        return cls(
            verdict=Verdict.parse(data.get("status")),
            stdout=data.get("stdout") or "",
            stderr=data.get("stderr"),
            metrics=Metrics.from_dict(data.get("metrics")),
        )

    @classmethod
    def error(cls, message: str) -> "ExecutionResult":
        """Build the ERROR result shown when a request could not complete."""
        return cls(
            verdict=Verdict.ERRORED,
            stdout="",
            stderr=message,
            metrics=Metrics(runtime="0s"),
        )


@dataclass
class SubmissionResult(ExecutionResult):
    """Outcome of a submit request."""

    submission_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "SubmissionResult":
        base = ExecutionResult.from_dict(data)
        submission_id = data.get("submissionId")
        if not submission_id:
            raise ProtocolError("Submission result is missing submissionId")
        return cls(
            verdict=base.verdict,
            stdout=base.stdout,
            stderr=base.stderr,
            metrics=base.metrics,
            submission_id=str(submission_id),
        )


@dataclass
class User:
    """Represents the authenticated user."""

    id: str
    email: str
    role: str = "STUDENT"
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        profile = data.get("profileData") or {}
        return cls(
            id=str(data.get("id", "")),
            email=data.get("email", ""),
            role=data.get("role", "STUDENT"),
            name=profile.get("name"),
        )


@dataclass
class Enrollment:
    """A course the user is enrolled in, with lesson progress."""

    course_id: str
    title: str
    total_lessons: int = 0
    completed_lessons: int = 0
    last_accessed_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Enrollment":
        return cls(
            course_id=str(data.get("courseId", "")),
            title=data.get("title", ""),
            total_lessons=int(data.get("totalLessons") or 0),
            completed_lessons=int(data.get("completedLessons") or 0),
            last_accessed_at=data.get("lastAccessedAt"),
        )
