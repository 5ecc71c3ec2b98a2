"""Pure transformation from a judging result into a display model."""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..client.models import ExecutionResult, SubmissionResult, TestCase, Verdict

LOADING_TEXT = "Running execution..."
IDLE_TEXT = "Run your code to see the output here."
WAITING_TEXT = "Waiting for output..."


class Banner(enum.Enum):
    POSITIVE = "All tests passed!"
    NEGATIVE = "Some tests failed."


@dataclass(frozen=True)
class CaseView:
    """One test case row. `input_text` is None for hidden cases."""

    ordinal: int
    hidden: bool
    input_text: Optional[str] = None


@dataclass(frozen=True)
class OutputView:
    """Everything the output panel needs to draw itself."""

    state: str
    text: str = ""
    is_error: bool = False
    banner: Optional[Banner] = None
    runtime: Optional[str] = None
    memory: Optional[str] = None
    submission_id: Optional[str] = None
    cases: List[CaseView] = field(default_factory=list)


def case_views(test_cases: Sequence[TestCase]) -> List[CaseView]:
    views = []
    for index, case in enumerate(test_cases):
        if case.is_hidden:
            views.append(CaseView(ordinal=index + 1, hidden=True))
        else:
            views.append(
                CaseView(ordinal=index + 1, hidden=False, input_text=case.input.display())
            )
    return views


def primary_text(result: ExecutionResult) -> str:
    """Pick the text to show first for a result."""
    if result.verdict is Verdict.ERRORED and result.stderr:
        return result.stderr
    if result.verdict is Verdict.FAILED and not result.stdout and result.stderr:
        return result.stderr
    return result.stdout


def render_output(
    result: Optional[ExecutionResult],
    test_cases: Optional[Sequence[TestCase]],
    busy: bool,
) -> OutputView:
    """
    Derive the output panel model.

    Expected outputs are never part of the view, and hidden cases carry
    neither input nor expected output.
    """
    if busy:
        return OutputView(state="loading", text=LOADING_TEXT)

    if result is None and test_cases is None:
        return OutputView(state="idle", text=IDLE_TEXT)

    cases = case_views(test_cases or [])

    if result is None:
        return OutputView(state="waiting", text=WAITING_TEXT, cases=cases)

    banner = None
    if result.verdict is Verdict.PASSED:
        banner = Banner.POSITIVE
    elif result.verdict is Verdict.FAILED:
        banner = Banner.NEGATIVE

    submission_id = None
    if isinstance(result, SubmissionResult):
        submission_id = result.submission_id

    return OutputView(
        state="result",
        text=primary_text(result),
        is_error=result.verdict is Verdict.ERRORED,
        banner=banner,
        runtime=result.metrics.runtime,
        memory=result.metrics.memory_used,
        submission_id=submission_id,
        cases=cases,
    )
