"""Grading Prompts - Templates de prompt."""

from .templates import GRADING_PROMPT, NO_ANSWER_MARKER, QUESTION_BLOCK_TEMPLATE

__all__ = ["GRADING_PROMPT", "NO_ANSWER_MARKER", "QUESTION_BLOCK_TEMPLATE"]
