"""HTTP clients for the learning platform REST API."""

import logging
from typing import Any, List, Optional

import requests
from requests.adapters import HTTPAdapter

from .errors import (
    LessonNotFoundError,
    ProtocolError,
    TransportError,
    UnauthorizedError,
)
from .models import Enrollment, ExecutionResult, Lesson, SubmissionResult, User
from .session import AuthSession

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:4000/api/v1"
DEFAULT_TIMEOUT = 30.0
GENERIC_ERROR = "An unexpected error occurred"


class ApiClient:
    """Shared HTTP layer: base URL, bearer token and JSend envelope handling."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[AuthSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the client."""
        self.base_url = base_url.rstrip("/")
        self.auth = session or AuthSession()
        self.timeout = timeout
        self.http = requests.Session()
        self.http.headers["Content-Type"] = "application/json"
        # Execution can be side-effecting; never resend a request
        adapter = HTTPAdapter(max_retries=0)
        self.http.mount("http://", adapter)
        self.http.mount("https://", adapter)

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send a request and map transport failures to TransportError."""
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {path}")
        try:
            response = self.http.request(
                method,
                url,
                headers=self.auth.headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as e:
            raise TransportError(f"Request timed out after {self.timeout:g}s") from e
        except requests.RequestException as e:
            raise TransportError(f"Network error: {e}") from e

        logger.debug(f"{method} {path} -> {response.status_code}")
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def _unwrap(
        self,
        response: requests.Response,
        missing_message: str,
        require_data: bool = True,
    ) -> Any:
        """Extract `data` from a JSend envelope or raise."""
        body = self._json(response)
        envelope = body if isinstance(body, dict) else {}

        if not response.ok:
            message = envelope.get("message") or GENERIC_ERROR
            error_cls = TransportError
            if response.status_code == 401:
                error_cls = UnauthorizedError
                self.auth.invalidate()
            raise error_cls(
                message,
                status_code=response.status_code,
                code=envelope.get("code"),
                details=envelope.get("details"),
            )

        if body is None:
            raise TransportError(
                "Malformed response from server", status_code=response.status_code
            )

        missing = require_data and envelope.get("data") is None
        if not envelope.get("success") or missing:
            raise ProtocolError(
                envelope.get("message") or missing_message,
                status_code=response.status_code,
                code=envelope.get("code"),
                details=envelope.get("details"),
            )

        return envelope.get("data")

    def get(self, path: str, missing_message: str = GENERIC_ERROR, **kwargs) -> Any:
        return self._unwrap(self._request("GET", path, **kwargs), missing_message)

    def post(
        self, path: str, payload: dict, missing_message: str = GENERIC_ERROR
    ) -> Any:
        return self._unwrap(self._request("POST", path, json=payload), missing_message)

    def put(self, path: str, payload: dict) -> Any:
        return self._unwrap(
            self._request("PUT", path, json=payload), GENERIC_ERROR, require_data=False
        )

    def login(self, email: str, password: str) -> User:
        """Authenticate and store the token on the session."""
        data = self.post(
            "/auth/login",
            {"email": email, "password": password},
            missing_message="No authentication data returned",
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ProtocolError("No token returned")

        self.auth.login(token)
        return User.from_dict(data.get("user") or {})

    def me(self) -> User:
        """Fetch the user behind the current token."""
        data = self.get("/auth/me", missing_message="No user data returned")
        if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
            raise ProtocolError("No user data returned")
        return User.from_dict(data["user"])

    def enrollments(self) -> List[Enrollment]:
        """List the courses the current user is enrolled in."""
        data = self._unwrap(
            self._request("GET", "/users/enrollments"), GENERIC_ERROR, require_data=False
        )
        return [
            Enrollment.from_dict(item) for item in data or [] if isinstance(item, dict)
        ]


class JudgeClient:
    """Typed transport to the remote judging service."""

    def __init__(self, api: ApiClient):
        self.api = api

    def run(
        self, code: str, language: str, challenge_id: Optional[str] = None
    ) -> ExecutionResult:
        """Execute code without persisting anything."""
        payload = {"code": code, "language": language}
        if challenge_id is not None:
            payload["challengeId"] = challenge_id

        data = self.api.post(
            "/execution/run", payload, missing_message="No execution result returned"
        )
        result = ExecutionResult.from_dict(data)
        logger.debug(f"Run verdict: {result.verdict.value}")
        return result

    def submit(self, challenge_id: str, code: str, language: str) -> SubmissionResult:
        """Submit code for a persisted, judged attempt."""
        payload = {"challengeId": challenge_id, "code": code, "language": language}
        data = self.api.post(
            "/execution/submit",
            payload,
            missing_message="No submission result returned",
        )
        result = SubmissionResult.from_dict(data)
        logger.debug(
            f"Submission {result.submission_id} verdict: {result.verdict.value}"
        )
        return result


class LessonClient:
    """Lesson retrieval and progress tracking."""

    def __init__(self, api: ApiClient):
        self.api = api

    def get_lesson(self, lesson_id: str) -> Lesson:
        try:
            data = self.api.get(f"/lessons/{lesson_id}", missing_message="Lesson not found")
        except ProtocolError as e:
            raise LessonNotFoundError(e.message) from e
        except TransportError as e:
            if e.status_code == 404:
                raise LessonNotFoundError(e.message, status_code=404) from e
            raise

        if not isinstance(data, dict) or "id" not in data:
            raise ProtocolError("Malformed lesson data")
        return Lesson.from_dict(data)

    def get_course_lessons(self, course_id: str) -> List[Lesson]:
        try:
            data = self.api.get(f"/lessons/course/{course_id}")
        except ProtocolError:
            return []
        return [Lesson.from_dict(item) for item in data if isinstance(item, dict)]

    def complete_lesson(self, lesson_id: str) -> None:
        """Mark the lesson as completed for the current user."""
        self.api.put(f"/users/progress/{lesson_id}", {"status": "COMPLETED"})
        logger.debug(f"Lesson {lesson_id} marked completed")

