"""Release workflow: version rules, version file editing, confirmation gates
and the step-by-step orchestrator tying them together.
"""

from __future__ import annotations

from .errors import ReleaseCancelled, ReleaseError, ReleaseFailure
from .workflow import STEPS, ReleaseSession, ReleaseWorkflow

__all__ = [
    "ReleaseCancelled",
    "ReleaseError",
    "ReleaseFailure",
    "ReleaseSession",
    "ReleaseWorkflow",
    "STEPS",
]
