# =============================================================================
# TESTES - Quiz Store Module
# =============================================================================
# Testes unitários para persistência de quizzes e submissões no AgentFS
# =============================================================================

from unittest.mock import AsyncMock

import pytest


class TestQuizStoreKeys:
    """Testes para geração de chaves."""

    def test_quiz_key_format(self, mock_agentfs):
        """Verifica formato da chave do quiz."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs)

        assert store._quiz_key("abc-123") == "quiz:abc-123"

    def test_submission_key_format(self, mock_agentfs):
        """Verifica formato da chave de submissão."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs)

        assert store._submission_key("abc-123", "s1") == "submission:abc-123:s1"

    def test_write_retries_at_least_one(self, mock_agentfs):
        """Verifica mínimo de uma tentativa de gravação."""
        from mathquiz.storage import QuizStore

        assert QuizStore(mock_agentfs, write_retries=0).write_retries == 1


class TestQuizStoreQuizzes:
    """Testes para CRUD de quizzes."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, mock_agentfs_with_data, sample_quiz):
        """Verifica que o quiz é gravado em camelCase e recarregado."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)

        await store.save_quiz(sample_quiz)
        loaded = await store.get_quiz("q1")

        stored = mock_agentfs_with_data._storage["quiz:q1"]
        assert stored["maxAttempts"] == 1
        assert stored["questions"][1]["showFeedback"] is False
        assert loaded == sample_quiz

    @pytest.mark.asyncio
    async def test_get_missing(self, mock_agentfs_with_data):
        """Verifica None para quiz inexistente."""
        from mathquiz.storage import QuizStore

        assert await QuizStore(mock_agentfs_with_data).get_quiz("não-existe") is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, mock_agentfs_with_data):
        """Verifica ordenação por data de criação."""
        from mathquiz.models import Quiz
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        await store.save_quiz(Quiz(id="a", title="A", created_at=1))
        await store.save_quiz(Quiz(id="b", title="B", created_at=3))
        await store.save_quiz(Quiz(id="c", title="C", created_at=2))

        quizzes = await store.list_quizzes()

        assert [q.id for q in quizzes] == ["b", "c", "a"]

    @pytest.mark.asyncio
    async def test_delete_removes_submissions(self, mock_agentfs_with_data, sample_quiz, make_submission):
        """Verifica que deletar o quiz remove suas submissões."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        await store.save_quiz(sample_quiz)
        await store.add_submission(make_submission(quiz_id="q1"))
        await store.add_submission(make_submission(quiz_id="outro"))

        await store.delete_quiz("q1")

        keys = list(mock_agentfs_with_data._storage)
        assert not any(k.startswith("quiz:q1") or k.startswith("submission:q1:") for k in keys)
        assert any(k.startswith("submission:outro:") for k in keys)

    @pytest.mark.asyncio
    async def test_watch_quiz(self, mock_agentfs_with_data, sample_quiz):
        """Verifica emissão do estado atual, de mudanças e da remoção."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        await store.save_quiz(sample_quiz)
        updates = store.watch_quiz("q1", interval=0)

        first = await updates.__anext__()
        await store.save_quiz(sample_quiz.model_copy(update={"title": "Novo título"}))
        second = await updates.__anext__()
        await store.delete_quiz("q1")
        third = await updates.__anext__()
        await updates.aclose()

        assert first.title == "Equações"
        assert second.title == "Novo título"
        assert third is None


class TestQuizStoreSubmissions:
    """Testes para submissões append-only."""

    @pytest.mark.asyncio
    async def test_add_submission(self, mock_agentfs_with_data, make_submission):
        """Verifica gravação no formato camelCase."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        submission = make_submission()

        await store.add_submission(submission)

        stored = mock_agentfs_with_data._storage[f"submission:q1:{submission.id}"]
        assert stored["studentName"] == "Ana"
        assert stored["quizId"] == "q1"
        assert stored["grading"] is None

    @pytest.mark.asyncio
    async def test_add_submission_idempotent(self, mock_agentfs_with_data, make_submission):
        """Verifica que regravar a mesma submissão é sucesso."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        submission = make_submission()

        await store.add_submission(submission)
        await store.add_submission(submission)

        assert len(await store.list_submissions("q1")) == 1

    @pytest.mark.asyncio
    async def test_add_submission_conflict(self, mock_agentfs_with_data, make_submission):
        """Verifica recusa de outro conteúdo com o mesmo ID."""
        from mathquiz.errors import StoreWriteError
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        submission = make_submission()
        await store.add_submission(submission)

        with pytest.raises(StoreWriteError):
            await store.add_submission(submission.model_copy(update={"student_name": "Bia"}))

    @pytest.mark.asyncio
    async def test_add_submission_retries(self, mock_agentfs_with_data, make_submission):
        """Verifica novas tentativas após falhas transitórias."""
        from mathquiz.storage import QuizStore

        mock_agentfs_with_data.kv.set = AsyncMock(side_effect=[RuntimeError("busy"), RuntimeError("busy"), None])
        store = QuizStore(mock_agentfs_with_data, write_retries=3, retry_delay=0)

        await store.add_submission(make_submission())

        assert mock_agentfs_with_data.kv.set.await_count == 3

    @pytest.mark.asyncio
    async def test_add_submission_gives_up(self, mock_agentfs_with_data, make_submission, capture_logs):
        """Verifica StoreWriteError após esgotar as tentativas."""
        from mathquiz.errors import StoreWriteError
        from mathquiz.storage import QuizStore

        mock_agentfs_with_data.kv.set = AsyncMock(side_effect=RuntimeError("disk full"))
        store = QuizStore(mock_agentfs_with_data, write_retries=2, retry_delay=0)
        submission = make_submission()

        with pytest.raises(StoreWriteError) as exc_info:
            await store.add_submission(submission)

        assert exc_info.value.submission_id == submission.id
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert mock_agentfs_with_data.kv.set.await_count == 2
        assert sum("Falha ao gravar submissão" in r.message for r in capture_logs.records) == 2

    @pytest.mark.asyncio
    async def test_list_submissions_by_user(self, mock_agentfs_with_data, make_submission):
        """Verifica filtro por aluno e ordem do mais recente."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        await store.add_submission(make_submission(user_id="u1", timestamp=1))
        await store.add_submission(make_submission(user_id="u1", timestamp=5))
        await store.add_submission(make_submission(user_id="u2", timestamp=3))

        mine = await store.list_submissions("q1", user_id="u1")
        everyone = await store.list_submissions("q1")

        assert [s.timestamp for s in mine] == [5, 1]
        assert [s.timestamp for s in everyone] == [5, 3, 1]

    @pytest.mark.asyncio
    async def test_list_submissions_equal_timestamps(self, mock_agentfs_with_data, make_submission):
        """Verifica desempate pelo id com timestamps iguais."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        for submission_id in ("b", "c", "a"):
            await store.add_submission(make_submission(id=submission_id, timestamp=7))

        assert [s.id for s in await store.list_submissions("q1")] == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_list_submissions_legacy_grading(self, mock_agentfs_with_data):
        """Verifica normalização de submissão gravada com {evaluations: ...}."""
        from mathquiz.storage import QuizStore

        mock_agentfs_with_data._storage["submission:q1:old"] = {
            "id": "old",
            "quizId": "q1",
            "userId": "u1",
            "studentName": "Ana",
            "answers": {"1": "5"},
            "grading": {"evaluations": {"1": {"isCorrect": True, "feedback": "ok"}}},
            "timestamp": 10,
        }

        (submission,) = await QuizStore(mock_agentfs_with_data).list_submissions("q1")

        assert submission.grading["1"].is_correct is True

    @pytest.mark.asyncio
    async def test_list_submissions_error_propagates(self, mock_agentfs_with_data):
        """Verifica que erro de leitura não vira lista vazia."""
        from mathquiz.storage import QuizStore

        mock_agentfs_with_data.kv.list = AsyncMock(side_effect=ConnectionError("offline"))

        with pytest.raises(ConnectionError):
            await QuizStore(mock_agentfs_with_data).list_submissions("q1", user_id="u1")

    @pytest.mark.asyncio
    async def test_get_and_delete_submission(self, mock_agentfs_with_data, make_submission):
        """Verifica reset de tentativa."""
        from mathquiz.storage import QuizStore

        store = QuizStore(mock_agentfs_with_data)
        submission = make_submission()
        await store.add_submission(submission)

        assert (await store.get_submission("q1", submission.id)) == submission
        assert await store.delete_submission("q1", submission.id) is True
        assert await store.delete_submission("q1", submission.id) is False
        assert await store.get_submission("q1", submission.id) is None
