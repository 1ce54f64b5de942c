"""Attempt State - Estado da sessão de um aluno em um quiz."""

from dataclasses import dataclass, field

from .enums import AttemptMode, SubmitPhase
from .grading import GradingResult
from .schemas import Question, Quiz, Submission


@dataclass
class AttemptState:
    """Estado completo da tela do aluno.

    Attributes:
        quiz: Quiz em andamento
        user_id: ID do aluno
        mode: ANSWERING (tentativa aberta) ou VIEWING (leitura do histórico)
        order: Ordem de exibição das questões (aleatória só em ANSWERING)
        answers: Respostas digitadas (questionId -> texto)
        history: Submissões do aluno, mais recente primeiro
        selected_index: Índice do histórico sendo exibido (VIEWING)
        phase: Fase do envio; submit só é permitido em IDLE
        last_grading: Correção calculada no último envio (mantida se salvar falhar)
        error: Mensagem do último erro de envio
    """

    quiz: Quiz
    user_id: str = ""
    mode: AttemptMode = AttemptMode.ANSWERING
    order: list[Question] = field(default_factory=list)
    answers: dict[str, str] = field(default_factory=dict)
    history: list[Submission] = field(default_factory=list)
    selected_index: int | None = None
    phase: SubmitPhase = SubmitPhase.IDLE
    last_grading: GradingResult | None = None
    error: str | None = None

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.quiz.max_attempts - len(self.history))

    @property
    def is_busy(self) -> bool:
        return self.phase in (SubmitPhase.GRADING, SubmitPhase.SAVING)

    @property
    def can_submit(self) -> bool:
        """Botão de envio habilitado."""
        return (
            self.mode == AttemptMode.ANSWERING
            and bool(self.order)
            and not self.is_busy
            and self.attempts_remaining > 0
        )

    @property
    def viewed_submission(self) -> Submission | None:
        if self.mode != AttemptMode.VIEWING or self.selected_index is None:
            return None
        return self.history[self.selected_index]

    @property
    def grading(self) -> GradingResult | None:
        """Correção exibida: a da submissão em leitura, ou a do envio com erro."""
        submission = self.viewed_submission
        if submission is not None:
            return submission.grading
        return self.last_grading
