"""Code-execution workspace."""

from .controller import SourceBuffer, WorkspaceController
from .renderer import Banner, CaseView, OutputView, render_output

__all__ = [
    "SourceBuffer",
    "WorkspaceController",
    "Banner",
    "CaseView",
    "OutputView",
    "render_output",
]
