"""Attempt Manager - Ciclo de vida das tentativas de um aluno."""

from __future__ import annotations

import logging
import random
import uuid
from typing import TYPE_CHECKING

from ..errors import AttemptStateError
from ..models.enums import AttemptMode, SubmitPhase
from ..models.schemas import Question, Quiz, Submission, newest_first, now_ms
from ..models.state import AttemptState

if TYPE_CHECKING:
    from ..storage.quiz_store import QuizStore
    from .grading_coordinator import GradingCoordinator

logger = logging.getLogger(__name__)


class AttemptManager:
    """Gerencia ordem das questões, cota de tentativas e histórico.

    Uma instância por sessão de aluno. A cota é calculada sobre o snapshot
    de histórico carregado em `enter`; duas sessões simultâneas do mesmo
    aluno podem ultrapassar `max_attempts` (fechar isso exige um contador
    atômico no servidor).

    Example:
        >>> manager = AttemptManager(store, coordinator)
        >>> state = await manager.open(quiz, user_id="u1")
        >>> manager.set_answer("1", "$x = 5$")
        >>> submission = await manager.submit("Ana")
    """

    def __init__(
        self,
        store: QuizStore | None = None,
        coordinator: GradingCoordinator | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.coordinator = coordinator
        self.rng = rng or random.Random()
        self._state: AttemptState | None = None
        self._pending: Submission | None = None

    @property
    def state(self) -> AttemptState:
        if self._state is None:
            raise AttemptStateError("Nenhum quiz aberto; chame enter() primeiro")
        return self._state

    # =========================================================================
    # ORDEM E COTA
    # =========================================================================

    def compute_order(self, quiz: Quiz) -> list[Question]:
        """Ordem de exibição: permutação uniforme se `randomize`, senão canônica.

        random.shuffle é Fisher-Yates (O(n)); o quiz não é alterado.
        """
        order = list(quiz.questions)
        if quiz.randomize:
            self.rng.shuffle(order)
        return order

    @staticmethod
    def attempts_remaining(quiz: Quiz, history: list[Submission]) -> int:
        return max(0, quiz.max_attempts - len(history))

    async def load_history(self, quiz_id: str, user_id: str) -> list[Submission]:
        """Submissões do aluno neste quiz, mais recente primeiro (ordem do store).

        Falhas do store propagam; nunca são tratadas como histórico vazio.
        """
        if self.store is None:
            raise AttemptStateError("AttemptManager sem store configurado")
        return await self.store.list_submissions(quiz_id, user_id=user_id)

    # =========================================================================
    # TRANSICOES
    # =========================================================================

    def enter(self, quiz: Quiz, history: list[Submission], user_id: str = "") -> AttemptState:
        """Entra no quiz: leitura da última submissão se a cota acabou, senão nova tentativa."""
        history = newest_first(history)
        self._state = AttemptState(quiz=quiz, user_id=user_id, history=history)

        if self.attempts_remaining(quiz, history) == 0 and history:
            logger.info(f"[Quiz {quiz.id}] Sem tentativas restantes para {user_id or '-'}; modo leitura")
            return self._show(0)

        return self._start_attempt()

    async def open(self, quiz: Quiz, user_id: str) -> AttemptState:
        """Carrega o histórico do store e entra no quiz."""
        history = await self.load_history(quiz.id, user_id)
        return self.enter(quiz, history, user_id=user_id)

    def retake(self) -> AttemptState:
        """Nova tentativa sem recarregar o histórico.

        Sem tentativas restantes, volta para a leitura da última submissão.
        """
        state = self.state
        if state.is_busy:
            raise AttemptStateError("Envio em andamento")
        if state.attempts_remaining == 0:
            logger.info(f"[Quiz {state.quiz.id}] Retake negado: cota esgotada")
            return self._show(0) if state.history else state
        return self._start_attempt()

    def select_history_index(self, index: int) -> AttemptState:
        """Mostra a submissão `index` (0 = mais recente) na ordem canônica."""
        state = self.state
        if state.is_busy:
            raise AttemptStateError("Envio em andamento")
        if not 0 <= index < len(state.history):
            raise IndexError(f"Histórico tem {len(state.history)} submissões, índice {index} inválido")
        return self._show(index)

    def set_answer(self, question_id: str, text: str) -> None:
        state = self.state
        if state.mode != AttemptMode.ANSWERING or state.is_busy:
            raise AttemptStateError("Respostas só podem ser editadas durante uma tentativa")
        if state.quiz.question(question_id) is None:
            raise KeyError(question_id)
        state.answers[question_id] = text

    def record_submission(self, submission: Submission) -> AttemptState:
        """Adiciona a submissão ao topo do histórico e a exibe."""
        state = self.state
        state.history.insert(0, submission)
        state.phase = SubmitPhase.DONE
        state.error = None
        return self._show(0)

    def _start_attempt(self) -> AttemptState:
        state = self.state
        self._pending = None
        state.mode = AttemptMode.ANSWERING
        state.order = self.compute_order(state.quiz)
        state.answers = {}
        state.selected_index = None
        state.phase = SubmitPhase.IDLE
        state.last_grading = None
        state.error = None
        return state

    def _show(self, index: int) -> AttemptState:
        state = self.state
        submission = state.history[index]
        state.mode = AttemptMode.VIEWING
        state.selected_index = index
        # Ordem canônica para alinhar questões e respostas gravadas
        state.order = list(state.quiz.questions)
        state.answers = dict(submission.answers)
        return state

    # =========================================================================
    # ENVIO
    # =========================================================================

    async def submit(self, student_name: str, email: str = "", submission_id: str | None = None) -> Submission:
        """Corrige e grava a tentativa atual.

        grading -> saving -> done. Falha de correção não bloqueia (grading
        None); falha de gravação deixa a fase em ERROR com a correção
        calculada em `last_grading` e propaga o erro. Qualquer exceção
        inesperada também termina em ERROR, nunca presa em GRADING/SAVING.

        Args:
            student_name: Nome do aluno (obrigatório)
            email: Email opcional
            submission_id: Chave de idempotência; gerada se omitida

        Raises:
            AttemptStateError: fora de uma tentativa, envio em andamento,
                quiz sem questões ou sem tentativas restantes
            ValueError: nome do aluno vazio
            StoreWriteError: gravação falhou depois das retentativas
        """
        state = self.state
        if state.mode != AttemptMode.ANSWERING:
            raise AttemptStateError("Não há tentativa aberta")
        if state.is_busy:
            raise AttemptStateError("Envio já em andamento")
        if not state.order:
            raise AttemptStateError("Quiz sem questões")
        if state.attempts_remaining == 0:
            raise AttemptStateError("Sem tentativas restantes")
        if not student_name or not student_name.strip():
            raise ValueError("Nome do aluno obrigatório")
        if self.store is None:
            raise AttemptStateError("AttemptManager sem store configurado")

        quiz = state.quiz
        answers = {q.id: state.answers.get(q.id, "") for q in quiz.questions}
        submission_id = submission_id or uuid.uuid4().hex

        self._pending = None
        state.error = None
        submission: Submission | None = None
        try:
            state.phase = SubmitPhase.GRADING
            grading = None
            if self.coordinator is not None:
                grading = await self.coordinator.grade(quiz, answers)
            state.last_grading = grading

            state.phase = SubmitPhase.SAVING
            submission = Submission(
                id=submission_id,
                quiz_id=quiz.id,
                user_id=state.user_id,
                student_name=student_name.strip(),
                email=email.strip(),
                answers=answers,
                grading=grading,
                timestamp=now_ms(),
            )
            await self.store.add_submission(submission)
        except Exception as e:
            state.phase = SubmitPhase.ERROR
            state.error = str(e) or type(e).__name__
            # Sem submissão montada não há o que regravar
            self._pending = submission
            logger.error(f"[Quiz {quiz.id}] Submissão {submission_id} não gravada: {type(e).__name__}: {e}")
            raise

        self.record_submission(submission)
        logger.info(
            f"[Quiz {quiz.id}] Tentativa enviada por {state.user_id or '-'} "
            f"({'com' if grading is not None else 'sem'} correção); restantes: {state.attempts_remaining}"
        )
        return submission

    async def retry_save(self) -> Submission:
        """Regrava a submissão cuja gravação falhou, com o mesmo ID e a mesma correção."""
        state = self.state
        if self._pending is None or state.phase != SubmitPhase.ERROR:
            raise AttemptStateError("Nenhuma submissão pendente de gravação")
        if self.store is None:
            raise AttemptStateError("AttemptManager sem store configurado")

        submission = self._pending
        state.phase = SubmitPhase.SAVING
        try:
            await self.store.add_submission(submission)
        except Exception as e:
            state.phase = SubmitPhase.ERROR
            state.error = str(e) or type(e).__name__
            raise

        self._pending = None
        self.record_submission(submission)
        return submission

    def show_submission(self, submission_id: str) -> AttemptState:
        """Mostra uma submissão já gravada do histórico, como após um envio concluído.

        Raises:
            KeyError: se o ID não está no histórico carregado
        """
        state = self.state
        for index, submission in enumerate(state.history):
            if submission.id == submission_id:
                self._pending = None
                state.phase = SubmitPhase.DONE
                state.error = None
                return self._show(index)
        raise KeyError(submission_id)
