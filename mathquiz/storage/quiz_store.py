"""Quiz Store - Abstração sobre AgentFS para quizzes e submissões."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

from ..errors import StoreWriteError
from ..models.schemas import Quiz, Submission, newest_first

logger = logging.getLogger(__name__)


class QuizStore:
    """Abstração sobre AgentFS para persistência de quizzes e submissões.

    Submissões são append-only: só podem ser criadas ou apagadas (reset de
    tentativa pelo professor), nunca alteradas.

    Estrutura de chaves:
        - quiz:{quiz_id} -> Documento do quiz
        - submission:{quiz_id}:{submission_id} -> Submissão

    Example:
        >>> store = QuizStore(agentfs)
        >>> await store.save_quiz(quiz)
        >>> history = await store.list_submissions(quiz.id, user_id="u1")
    """

    QUIZ_PREFIX = "quiz"
    SUBMISSION_PREFIX = "submission"

    def __init__(self, agentfs: AgentFS, write_retries: int = 3, retry_delay: float = 0.5):
        """Inicializa store com instância do AgentFS.

        Args:
            agentfs: Instância configurada do AgentFS
            write_retries: Tentativas de gravação de uma submissão
            retry_delay: Espera base entre tentativas (dobra a cada falha)
        """
        self.agentfs = agentfs
        self.write_retries = max(1, write_retries)
        self.retry_delay = retry_delay

    def _quiz_key(self, quiz_id: str) -> str:
        return f"{self.QUIZ_PREFIX}:{quiz_id}"

    def _submission_prefix(self, quiz_id: str) -> str:
        return f"{self.SUBMISSION_PREFIX}:{quiz_id}:"

    def _submission_key(self, quiz_id: str, submission_id: str) -> str:
        return f"{self._submission_prefix(quiz_id)}{submission_id}"

    async def _list_keys(self, prefix: str) -> list[str]:
        entries = await self.agentfs.kv.list(prefix=prefix)
        keys = []
        for entry in entries or []:
            key = entry.get("key", "") if isinstance(entry, dict) else str(entry)
            if key.startswith(prefix):
                keys.append(key)
        return keys

    # =========================================================================
    # QUIZZES
    # =========================================================================

    async def get_quiz(self, quiz_id: str) -> Quiz | None:
        """Carrega um quiz; None se não existir."""
        data = await self.agentfs.kv.get(self._quiz_key(quiz_id))
        if not data:
            logger.debug(f"Quiz não encontrado: {quiz_id}")
            return None
        return Quiz.model_validate(data)

    async def list_quizzes(self) -> list[Quiz]:
        """Lista os quizzes, mais recentes primeiro."""
        quizzes = []
        for key in await self._list_keys(f"{self.QUIZ_PREFIX}:"):
            data = await self.agentfs.kv.get(key)
            if data:
                quizzes.append(Quiz.model_validate(data))
        return sorted(quizzes, key=lambda q: q.created_at, reverse=True)

    async def save_quiz(self, quiz: Quiz) -> Quiz:
        """Cria ou atualiza (publica) um quiz."""
        await self.agentfs.kv.set(self._quiz_key(quiz.id), quiz.to_document())
        logger.info(f"Quiz salvo: {quiz.id} ({len(quiz.questions)} questões)")
        return quiz

    async def delete_quiz(self, quiz_id: str) -> None:
        """Remove o quiz e todas as suas submissões."""
        for key in await self._list_keys(self._submission_prefix(quiz_id)):
            await self.agentfs.kv.delete(key)
        await self.agentfs.kv.delete(self._quiz_key(quiz_id))
        logger.info(f"Quiz deletado: {quiz_id}")

    async def watch_quiz(self, quiz_id: str, interval: float = 2.0) -> AsyncIterator[Quiz | None]:
        """Assina mudanças de um quiz (polling).

        Emite o estado atual e depois cada versão diferente da anterior.
        None indica que o quiz foi removido.
        """
        last: dict[str, Any] | None = None
        first = True
        while True:
            data = await self.agentfs.kv.get(self._quiz_key(quiz_id))
            if first or data != last:
                first = False
                last = data
                yield Quiz.model_validate(data) if data else None
            await asyncio.sleep(interval)

    # =========================================================================
    # SUBMISSIONS
    # =========================================================================

    async def add_submission(self, submission: Submission) -> Submission:
        """Grava uma submissão (append-only, at-least-once).

        O ID da submissão é a chave de idempotência: regravar a mesma
        submissão é sucesso; outra submissão no mesmo ID é recusada.

        Raises:
            StoreWriteError: se todas as tentativas falharem
        """
        key = self._submission_key(submission.quiz_id, submission.id)
        document = submission.to_document()
        delay = self.retry_delay
        last_error: Exception | None = None

        for attempt in range(1, self.write_retries + 1):
            try:
                existing = await self.agentfs.kv.get(key)
                if existing:
                    if existing == document:
                        logger.debug(f"Submissão {submission.id} já gravada (idempotente)")
                        return submission
                    raise StoreWriteError(
                        f"Submissão {submission.id} já existe com outro conteúdo",
                        submission_id=submission.id,
                    )
                await self.agentfs.kv.set(key, document)
                logger.info(f"Submissão gravada: {submission.id} (quiz {submission.quiz_id})")
                return submission
            except StoreWriteError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Falha ao gravar submissão {submission.id} "
                    f"(tentativa {attempt}/{self.write_retries}): {e}"
                )
                if attempt < self.write_retries:
                    await asyncio.sleep(delay)
                    delay *= 2

        raise StoreWriteError(
            f"Não foi possível gravar a submissão {submission.id}: {last_error}",
            submission_id=submission.id,
        ) from last_error

    async def list_submissions(self, quiz_id: str, user_id: str | None = None) -> list[Submission]:
        """Submissões de um quiz (opcionalmente de um aluno), mais recentes primeiro.

        Erros do AgentFS propagam: histórico indisponível nunca vira "zero tentativas".
        """
        submissions = []
        for key in await self._list_keys(self._submission_prefix(quiz_id)):
            data = await self.agentfs.kv.get(key)
            if not data:
                continue
            submission = Submission.model_validate(data)
            if user_id is None or submission.user_id == user_id:
                submissions.append(submission)
        return newest_first(submissions)

    async def get_submission(self, quiz_id: str, submission_id: str) -> Submission | None:
        data = await self.agentfs.kv.get(self._submission_key(quiz_id, submission_id))
        return Submission.model_validate(data) if data else None

    async def delete_submission(self, quiz_id: str, submission_id: str) -> bool:
        """Remove uma submissão (reset de tentativa).

        Returns:
            True se existia, False caso contrário
        """
        key = self._submission_key(quiz_id, submission_id)
        if not await self.agentfs.kv.get(key):
            return False
        await self.agentfs.kv.delete(key)
        logger.info(f"Submissão removida (reset de tentativa): {submission_id}")
        return True
