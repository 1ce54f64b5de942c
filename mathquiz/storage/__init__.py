"""Quiz Storage - Persistência em AgentFS."""

from .quiz_store import QuizStore

__all__ = ["QuizStore"]
