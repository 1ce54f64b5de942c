"""Quiz Models - Enums, Schemas, Grading e State."""

from .enums import AttemptMode, NodeKind, SubmitPhase
from .grading import (
    Evaluation,
    FlatGrading,
    GradingPayload,
    GradingResult,
    WrappedGrading,
    classify_payload,
    normalize_grading,
)
from .schemas import (
    DEFAULT_MAX_ATTEMPTS,
    AttemptView,
    EnterQuizRequest,
    HistoryEntry,
    Question,
    Quiz,
    RenderRequest,
    ReviewedSubmission,
    Submission,
    SubmitQuizRequest,
    coerce_max_attempts,
    newest_first,
)
from .state import AttemptState

__all__ = [
    # Enums
    "AttemptMode",
    "NodeKind",
    "SubmitPhase",
    # Grading
    "Evaluation",
    "FlatGrading",
    "WrappedGrading",
    "GradingPayload",
    "GradingResult",
    "classify_payload",
    "normalize_grading",
    # Schemas
    "DEFAULT_MAX_ATTEMPTS",
    "Question",
    "Quiz",
    "Submission",
    "coerce_max_attempts",
    "newest_first",
    "EnterQuizRequest",
    "SubmitQuizRequest",
    "RenderRequest",
    "AttemptView",
    "HistoryEntry",
    "ReviewedSubmission",
    # State
    "AttemptState",
]
