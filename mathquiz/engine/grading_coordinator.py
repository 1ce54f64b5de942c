"""Grading Coordinator - Correção automática com degradação graciosa."""

import json
import logging
from typing import Any, Mapping, Protocol

from ..errors import GradingServiceError
from ..models.grading import GradingResult, normalize_grading
from ..models.schemas import Quiz
from ..prompts import GRADING_PROMPT, NO_ANSWER_MARKER, QUESTION_BLOCK_TEMPLATE

logger = logging.getLogger(__name__)

FENCE_MARKERS = ("```json", "```JSON", "```")


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


def strip_fences(text: str) -> str:
    """Remove marcadores de bloco de código markdown."""
    for marker in FENCE_MARKERS:
        text = text.replace(marker, "")
    return text


def extract_json_object(text: str | None) -> dict[str, Any] | None:
    """Extrai o objeto JSON de uma resposta em texto livre.

    Remove os fences, fatia do primeiro `{` até o último `}` e faz o parse.

    Returns:
        Dict parseado, ou None se não houver chaves ou o parse falhar
    """
    if not text:
        return None

    content = strip_fences(text)
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end <= start:
        return None

    try:
        parsed = json.loads(content[start : end + 1])
    except (ValueError, RecursionError):
        # JSONDecodeError e ValueError; aninhamento profundo estoura a pilha
        return None

    return parsed if isinstance(parsed, dict) else None


class GradingCoordinator:
    """Coordena a chamada ao serviço de correção.

    Nunca bloqueia um envio: qualquer falha (rede, status, parse) vira None
    com um warning, e a submissão segue sem correção.

    Example:
        >>> coordinator = GradingCoordinator(GradingServiceClient(...))
        >>> result = await coordinator.grade(quiz, {"1": "$x = 5$"})
        >>> result["1"].is_correct if result else None
    """

    def __init__(self, client: TextGenerator | None):
        self.client = client

    def build_prompt(self, quiz: Quiz, answers: Mapping[str, str]) -> str:
        """Monta o prompt com título e, por questão, id/enunciado/resposta."""
        blocks = []
        for question in quiz.questions:
            answer = answers.get(question.id) or ""
            blocks.append(
                QUESTION_BLOCK_TEMPLATE.format(
                    question_id=question.id,
                    question_text=question.text,
                    answer=answer if answer.strip() else NO_ANSWER_MARKER,
                )
            )
        return GRADING_PROMPT.format(title=quiz.title, questions="\n".join(blocks))

    async def grade(self, quiz: Quiz, answers: Mapping[str, str]) -> GradingResult | None:
        """Corrige as respostas. Nunca levanta.

        Returns:
            Mapeamento canônico questionId -> Evaluation, ou None se a
            correção falhou (submissão fica "ungraded")
        """
        if self.client is None:
            logger.warning("Serviço de correção não configurado; envio sem correção")
            return None

        try:
            text = await self.client.generate(self.build_prompt(quiz, answers))
        except GradingServiceError as e:
            logger.warning(f"[Quiz {quiz.id}] Correção indisponível: {e}")
            return None
        except Exception as e:
            logger.warning(f"[Quiz {quiz.id}] Correção indisponível (erro inesperado): {type(e).__name__}: {e}")
            return None

        try:
            return self._interpret(quiz, text)
        except Exception as e:
            logger.warning(f"[Quiz {quiz.id}] Falha ao interpretar correção: {type(e).__name__}: {e}")
            return None

    def _interpret(self, quiz: Quiz, text: str | None) -> GradingResult | None:
        payload = extract_json_object(text)
        if payload is None:
            logger.warning(f"[Quiz {quiz.id}] Resposta de correção sem JSON válido")
            return None

        result = normalize_grading(payload)
        if result is None:
            logger.warning(f"[Quiz {quiz.id}] Payload de correção em formato desconhecido")
            return None

        known = {q.id for q in quiz.questions}
        unknown = set(result) - known
        if unknown:
            logger.debug(f"[Quiz {quiz.id}] Ignorando avaliações de questões desconhecidas: {sorted(unknown)}")
            result = {qid: ev for qid, ev in result.items() if qid in known}

        if not result:
            logger.warning(f"[Quiz {quiz.id}] Correção sem avaliações válidas; envio sem correção")
            return None

        logger.info(f"[Quiz {quiz.id}] Correção recebida: {len(result)}/{len(quiz.questions)} questões")
        return result

    @staticmethod
    def score(result: GradingResult | None, quiz: Quiz) -> dict[str, int]:
        """Resumo de acertos sobre as questões do quiz.

        Questões sem avaliação contam no total mas não em `graded`.
        """
        correct = 0
        graded = 0
        for question in quiz.questions:
            evaluation = (result or {}).get(question.id)
            if evaluation is None:
                continue
            graded += 1
            if evaluation.is_correct:
                correct += 1
        return {"correct": correct, "graded": graded, "total": len(quiz.questions)}
