"""Math Quiz - Quizzes de resposta livre com correção por IA.

Arquitetura:
- models/: Enums, Schemas Pydantic, formatos de correção, AttemptState
- engine/: AttemptManager, GradingCoordinator, QuizImporter
- markup/: Parser de math/markup e adaptador HTML
- llm/: GradingServiceClient (httpx)
- storage/: QuizStore (AgentFS)
- prompts/: Templates de prompt
- router.py: FastAPI endpoints
"""

from .engine import AttemptManager, GradingCoordinator, import_quiz
from .llm import GradingServiceClient
from .markup import HtmlRenderer, Node, render
from .models import AttemptState, Evaluation, Question, Quiz, Submission
from .storage import QuizStore

__all__ = [
    # Models
    "Quiz",
    "Question",
    "Submission",
    "Evaluation",
    "AttemptState",
    # Engines
    "AttemptManager",
    "GradingCoordinator",
    "import_quiz",
    # Markup
    "Node",
    "render",
    "HtmlRenderer",
    # LLM
    "GradingServiceClient",
    # Storage
    "QuizStore",
]
