"""Quiz Schemas - Modelos Pydantic de documentos e request/response.

Atributos em snake_case; a forma persistida usa aliases camelCase
(`quizId`, `maxAttempts`, `showFeedback`...). As duas formas são aceitas.
"""

import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import AttemptMode, SubmitPhase
from .grading import Evaluation, GradingResult, normalize_grading

DEFAULT_MAX_ATTEMPTS = 1


def now_ms() -> int:
    """Timestamp atual em milissegundos (epoch)."""
    return int(time.time() * 1000)


def coerce_max_attempts(value: Any) -> int:
    """Converte o valor de maxAttempts, caindo no default quando inválido.

    bool -> default; int >= 1 mantido; float inteiro -> int; string numérica
    convertida; qualquer outro valor (ou < 1) -> DEFAULT_MAX_ATTEMPTS.
    """
    if isinstance(value, bool) or value is None:
        return DEFAULT_MAX_ATTEMPTS

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_MAX_ATTEMPTS

    if isinstance(value, float):
        if not value.is_integer():
            return DEFAULT_MAX_ATTEMPTS
        value = int(value)

    if isinstance(value, int) and value >= 1:
        return value

    return DEFAULT_MAX_ATTEMPTS


class _Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        """Converte para dicionário camelCase (para persistência)."""
        return self.model_dump(by_alias=True, mode="json")


class Question(_Document):
    """Questão de resposta livre (markup + LaTeX)."""

    id: str = Field(..., description="ID estável da questão (chave de correção)")
    text: str = Field(default="", description="Enunciado em markup bruto")
    show_feedback: bool = Field(default=True, description="Mostrar feedback ao aluno")

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value)) if float(value).is_integer() else str(value)
        return value

    @field_validator("text", mode="before")
    @classmethod
    def _text_default(cls, value: Any) -> Any:
        return "" if value is None else value


class Quiz(_Document):
    """Quiz publicado pelo professor."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12], description="ID do quiz")
    title: str = Field(..., description="Título do quiz")
    questions: list[Question] = Field(default_factory=list, description="Questões em ordem canônica")
    randomize: bool = Field(default=False, description="Embaralhar a ordem a cada tentativa")
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, description="Tentativas permitidas (>= 1)")
    created_at: int = Field(default_factory=now_ms, description="Criação (epoch ms)")

    @field_validator("max_attempts", mode="before")
    @classmethod
    def _coerce_max_attempts(cls, value: Any) -> int:
        return coerce_max_attempts(value)

    def question(self, question_id: str) -> Question | None:
        """Busca questão pelo ID."""
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class Submission(_Document):
    """Submissão de um aluno. Imutável após criada."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="ID (chave de idempotência)")
    quiz_id: str
    user_id: str
    student_name: str
    email: str = ""
    answers: dict[str, str] = Field(default_factory=dict, description="questionId -> resposta")
    grading: GradingResult | None = Field(default=None, description="Correção canônica ou None")
    timestamp: int = Field(default_factory=now_ms, description="Envio (epoch ms)")

    @field_validator("answers", mode="before")
    @classmethod
    def _answers_keys_to_str(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): "" if v is None else v for k, v in value.items()}
        return value

    @field_validator("grading", mode="before")
    @classmethod
    def _normalize_grading(cls, value: Any) -> GradingResult | None:
        # Submissões antigas foram gravadas com {evaluations: {...}}
        return normalize_grading(value)

    @property
    def is_graded(self) -> bool:
        return self.grading is not None

    def evaluation_for(self, question_id: str) -> Evaluation | None:
        """Avaliação da questão; None significa sem correção (nunca errada)."""
        if self.grading is None:
            return None
        return self.grading.get(question_id)


def newest_first(submissions: list[Submission]) -> list[Submission]:
    """Mais recente primeiro; empate de timestamp desempatado pelo id."""
    return sorted(submissions, key=lambda s: (s.timestamp, s.id), reverse=True)


# =============================================================================
# REQUEST / RESPONSE
# =============================================================================


class EnterQuizRequest(BaseModel):
    """Request para entrar em um quiz."""

    user_id: str = Field(..., min_length=1, description="ID do aluno")
    history_index: int | None = Field(default=None, ge=0, description="Submissão do histórico a exibir (0 = mais recente)")


class SubmitQuizRequest(BaseModel):
    """Request de envio de uma tentativa."""

    user_id: str = Field(..., min_length=1)
    student_name: str = Field(..., description="Nome do aluno (obrigatório)")
    email: str = Field(default="")
    answers: dict[str, str] = Field(default_factory=dict)
    submission_id: str | None = Field(
        default=None,
        pattern=r"^[A-Za-z0-9_-]{1,64}$",
        description="Chave de idempotência gerada pelo cliente; reenviar com a mesma chave não gasta outra tentativa",
    )


class RenderRequest(BaseModel):
    """Request de preview de markup."""

    text: str | None = None


class HistoryEntry(BaseModel):
    """Resumo de uma submissão no histórico do aluno."""

    id: str
    timestamp: int
    student_name: str
    is_graded: bool


class ReviewedSubmission(BaseModel):
    """Submissão com placar (revisão do professor)."""

    submission: Submission
    score: dict[str, int]


class AttemptView(BaseModel):
    """Estado da tela do aluno."""

    quiz_id: str
    title: str
    mode: AttemptMode
    phase: SubmitPhase
    attempts_remaining: int
    max_attempts: int
    can_submit: bool
    order: list[Question]
    answers: dict[str, str]
    history: list[HistoryEntry]
    selected_index: int | None = None
    grading: GradingResult | None = None
