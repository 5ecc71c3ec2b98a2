"""Workspace controller: editor buffer, active challenge and latest result."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from ..client.client import JudgeClient
from ..client.errors import ApiError
from ..client.models import Challenge, ExecutionResult, SubmissionResult, Verdict
from .renderer import OutputView, render_output

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Unknown error occurred"

CompletionCallback = Callable[[Challenge, SubmissionResult], None]


@dataclass
class SourceBuffer:
    """The learner's editable code for one (challenge, language) pair."""

    language: str
    text: str = ""


@dataclass(frozen=True)
class _Request:
    generation: int
    submit: bool
    code: str
    language: str
    challenge: Optional[Challenge]

    @property
    def challenge_id(self) -> Optional[str]:
        return self.challenge.id if self.challenge else None


class WorkspaceController:
    """
    Mediates between the source buffer, the active challenge and the judge.

    Every run/submit takes a new generation number. A response is applied
    only if its generation is still the latest one, so a late reply can
    never overwrite a newer request or a different challenge.
    """

    def __init__(
        self,
        judge: JudgeClient,
        challenge: Optional[Challenge] = None,
        language: Optional[str] = None,
        on_completed: Optional[CompletionCallback] = None,
        default_language: str = "python",
    ):
        self.judge = judge
        self.on_completed = on_completed
        self.default_language = default_language
        self._lock = threading.Lock()
        self._generation = 0
        self._executor: Optional[ThreadPoolExecutor] = None

        self.challenge = challenge
        self.result: Optional[ExecutionResult] = None
        self.busy = False
        self.buffer = self._starter_buffer(challenge, language)

    def __enter__(self) -> "WorkspaceController":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @property
    def generation(self) -> int:
        return self._generation

    def _starter_buffer(
        self, challenge: Optional[Challenge], language: Optional[str]
    ) -> SourceBuffer:
        if challenge is None:
            return SourceBuffer(language=language or self.default_language)

        language = language or challenge.default_language(self.default_language)
        return SourceBuffer(language=language, text=challenge.starter_code(language))

    def _reset(self, challenge: Optional[Challenge], language: Optional[str]) -> None:
        with self._lock:
            # Drop whatever is in flight for the previous pair
            self._generation += 1
            self.challenge = challenge
            self.buffer = self._starter_buffer(challenge, language)
            self.result = None
            self.busy = False

    def set_buffer(self, text: str) -> None:
        """Replace the source text. The displayed result is left alone."""
        with self._lock:
            self.buffer.text = text

    def select_challenge(
        self, challenge: Optional[Challenge], language: Optional[str] = None
    ) -> None:
        self._reset(challenge, language)

    def select_language(self, language: str) -> None:
        self._reset(self.challenge, language)

    def reset_buffer(self) -> None:
        """Restore the starter source for the current challenge and language."""
        with self._lock:
            self.buffer = self._starter_buffer(self.challenge, self.buffer.language)

    def _begin(self, submit: bool) -> _Request:
        with self._lock:
            self._generation += 1
            self.result = None
            self.busy = True
            return _Request(
                generation=self._generation,
                # Submitting needs a challenge; without one it is just a run
                submit=submit and self.challenge is not None,
                code=self.buffer.text,
                language=self.buffer.language,
                challenge=self.challenge,
            )

    def _apply(self, request: _Request, result: ExecutionResult) -> bool:
        with self._lock:
            if request.generation != self._generation:
                logger.debug(
                    f"Discarding stale response #{request.generation} "
                    f"(latest #{self._generation})"
                )
                return False
            self.result = result
            self.busy = False
            return True

    def _call_judge(self, request: _Request) -> ExecutionResult:
        action = "Submit" if request.submit else "Run"
        try:
            if request.submit:
                return self.judge.submit(
                    request.challenge_id, request.code, request.language
                )
            return self.judge.run(request.code, request.language, request.challenge_id)
        except ApiError as e:
            logger.warning(f"{action} failed: {e}")
            return ExecutionResult.error(str(e) or GENERIC_FAILURE)
        except Exception as e:
            logger.exception(f"{action} failed unexpectedly")
            return ExecutionResult.error(str(e) or GENERIC_FAILURE)

    def _execute(self, request: _Request) -> Optional[ExecutionResult]:
        result = self._call_judge(request)
        if not self._apply(request, result):
            return None

        if (
            request.submit
            and isinstance(result, SubmissionResult)
            and result.verdict is Verdict.PASSED
        ):
            self._notify_completed(request.challenge, result)
        return result

    def _notify_completed(self, challenge: Challenge, result: SubmissionResult) -> None:
        if self.on_completed is None:
            return
        try:
            self.on_completed(challenge, result)
        except Exception:
            logger.exception(f"Failed to record completion of challenge {challenge.id}")

    def run(self) -> Optional[ExecutionResult]:
        """
        Run the buffer against the judge and store the outcome.
        Returns None if a newer request superseded this one.
        """
        return self._execute(self._begin(submit=False))

    def submit(self) -> Optional[ExecutionResult]:
        """Submit the buffer for the bound challenge, or run it if none is bound."""
        return self._execute(self._begin(submit=True))

    def _dispatch(self, submit: bool) -> "Future[Optional[ExecutionResult]]":
        request = self._begin(submit)
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="workspace"
            )
        return self._executor.submit(self._execute, request)

    def start_run(self) -> "Future[Optional[ExecutionResult]]":
        """Non-blocking run. The result is cleared before this returns."""
        return self._dispatch(submit=False)

    def start_submit(self) -> "Future[Optional[ExecutionResult]]":
        """Non-blocking submit. The result is cleared before this returns."""
        return self._dispatch(submit=True)

    def view(self) -> OutputView:
        with self._lock:
            test_cases = self.challenge.test_cases if self.challenge else None
            return render_output(self.result, test_cases, self.busy)
