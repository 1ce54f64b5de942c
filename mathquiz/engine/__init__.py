"""Quiz Engines - Lógica de negócios."""

from .attempt_manager import AttemptManager
from .grading_coordinator import GradingCoordinator, extract_json_object
from .quiz_importer import build_quiz, import_quiz, parse_quiz_payload

__all__ = [
    "AttemptManager",
    "GradingCoordinator",
    "extract_json_object",
    "parse_quiz_payload",
    "build_quiz",
    "import_quiz",
]
