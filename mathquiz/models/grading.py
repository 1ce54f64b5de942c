"""Grading Result - Formatos históricos do payload de correção.

O serviço de correção (e as submissões já persistidas) aparecem em dois
formatos:

    Wrapped: {"evaluations": {"<qid>": {"isCorrect": bool, "feedback": str}}}
    Flat:    {"<qid>": {"isCorrect": bool, "feedback": str}}

Ambos são classificados em uma união `FlatGrading | WrappedGrading` e
normalizados para o mapeamento canônico `questionId -> Evaluation`. Nenhum
componente depois da fronteira precisa saber qual formato foi recebido.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

EVALUATIONS_KEY = "evaluations"


class Evaluation(BaseModel):
    """Avaliação de uma questão."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    is_correct: bool = Field(..., description="Se a resposta está correta")
    feedback: str = Field(default="", description="Feedback curto de uma frase")


GradingResult = dict[str, Evaluation]


@dataclass(frozen=True)
class FlatGrading:
    """Payload no formato antigo: mapeamento direto qid -> avaliação."""

    entries: Mapping[str, Any]


@dataclass(frozen=True)
class WrappedGrading:
    """Payload no formato atual: avaliações sob a chave `evaluations`."""

    entries: Mapping[str, Any]


GradingPayload = Union[FlatGrading, WrappedGrading]


def classify_payload(raw: Any) -> GradingPayload | None:
    """Identifica o formato do payload.

    Returns:
        WrappedGrading se houver um mapeamento em `evaluations`, FlatGrading
        para qualquer outro mapeamento, None se não for um mapeamento.
    """
    if not isinstance(raw, Mapping):
        return None

    inner = raw.get(EVALUATIONS_KEY)
    if isinstance(inner, Mapping):
        return WrappedGrading(entries=inner)

    return FlatGrading(entries=raw)


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def _to_evaluation(question_id: str, value: Any) -> Evaluation | None:
    if isinstance(value, Evaluation):
        return value
    if not isinstance(value, Mapping):
        logger.debug(f"Avaliação ignorada para questão {question_id}: não é objeto")
        return None

    raw_correct = value.get("isCorrect", value.get("is_correct"))
    is_correct = _coerce_bool(raw_correct)
    if is_correct is None:
        logger.debug(f"Avaliação ignorada para questão {question_id}: isCorrect inválido")
        return None

    feedback = value.get("feedback")
    return Evaluation(is_correct=is_correct, feedback=feedback if isinstance(feedback, str) else "")


def normalize_grading(raw: Any) -> GradingResult | None:
    """Normaliza qualquer formato conhecido para o mapeamento canônico.

    Entradas inválidas são descartadas (questão fica sem correção, nunca
    errada). Retorna None quando o payload não é um mapeamento ou quando
    nenhuma entrada é uma avaliação utilizável.
    """
    if raw is None:
        return None

    payload = classify_payload(raw)
    if payload is None:
        return None

    result: GradingResult = {}
    for question_id, value in payload.entries.items():
        # Wrapped com chave "evaluations" sem mapeamento cai aqui como Flat
        if question_id == EVALUATIONS_KEY and isinstance(payload, FlatGrading):
            continue
        evaluation = _to_evaluation(str(question_id), value)
        if evaluation is not None:
            result[str(question_id)] = evaluation

    return result or None
