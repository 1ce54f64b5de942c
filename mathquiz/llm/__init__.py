"""Grading LLM - Cliente do serviço de correção."""

from .client import GradingServiceClient

__all__ = ["GradingServiceClient"]
