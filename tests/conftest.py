# =============================================================================
# CONFTEST - Fixtures do Math Quiz
# =============================================================================
# Mocks do AgentFS e do serviço de correção, quizzes e submissões de exemplo
# =============================================================================

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture
def clean_env():
    """Ambiente sem nenhuma variável do Math Quiz."""
    keys = [
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "GEMINI_BASE_URL",
        "GRADING_TIMEOUT",
        "TEACHER_PASSWORD",
        "AGENTFS_ID",
        "STORE_WRITE_RETRIES",
        "LOG_LEVEL",
    ]
    with patch.dict(os.environ, {}, clear=False):
        for key in keys:
            os.environ.pop(key, None)
        yield


# =============================================================================
# FIXTURES DE MOCK - AGENTFS
# =============================================================================


@pytest.fixture
def mock_agentfs():
    """Mock do AgentFS com KV totalmente mockado."""
    mock = MagicMock()
    mock.kv = AsyncMock()
    mock.kv.get = AsyncMock(return_value=None)
    mock.kv.set = AsyncMock()
    mock.kv.delete = AsyncMock()
    mock.kv.list = AsyncMock(return_value=[])
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def mock_agentfs_with_data():
    """Mock do AgentFS com KV em memória."""
    mock = MagicMock()
    _storage = {}

    async def mock_get(key):
        return _storage.get(key)

    async def mock_set(key, value):
        _storage[key] = value

    async def mock_delete(key):
        _storage.pop(key, None)

    async def mock_list(prefix=""):
        return [{"key": k} for k in _storage if k.startswith(prefix)]

    mock.kv = AsyncMock()
    mock.kv.get = mock_get
    mock.kv.set = mock_set
    mock.kv.delete = mock_delete
    mock.kv.list = mock_list
    mock._storage = _storage

    mock.close = AsyncMock()

    return mock


# =============================================================================
# FIXTURES DE MOCK - SERVIÇO DE CORREÇÃO
# =============================================================================


class FakeGradingClient:
    """Cliente de correção com resposta fixa; registra os prompts recebidos."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def make_grading_client():
    """Factory de FakeGradingClient."""

    def _make(text=None, error=None):
        return FakeGradingClient(text=text, error=error)

    return _make


@pytest.fixture
def wrapped_grading_text():
    """Resposta do serviço de correção no formato atual, com fences."""
    return """```json
{
  "evaluations": {
    "1": {"isCorrect": true, "feedback": "Correct."},
    "2": {"isCorrect": false, "feedback": "Check the sign."}
  }
}
```"""


# =============================================================================
# FIXTURES DE DADOS DE TESTE
# =============================================================================


@pytest.fixture
def sample_quiz():
    """Quiz de duas questões, uma tentativa, ordem fixa."""
    from mathquiz.models.schemas import Question, Quiz

    return Quiz(
        id="q1",
        title="Equações",
        questions=[
            Question(id="1", text="Solve $x + 2 = 7$"),
            Question(id="2", text="Compute $$\\int_0^1 x\\,dx$$", show_feedback=False),
        ],
        max_attempts=1,
        created_at=1_700_000_000_000,
    )


@pytest.fixture
def make_submission():
    """Factory de Submission para um quiz/aluno."""
    from mathquiz.models.schemas import Submission

    def _make(quiz_id="q1", user_id="u1", timestamp=1_700_000_000_000, grading=None, **kwargs):
        data = {
            "quiz_id": quiz_id,
            "user_id": user_id,
            "student_name": kwargs.pop("student_name", "Ana"),
            "answers": kwargs.pop("answers", {"1": "$x = 5$", "2": ""}),
            "grading": grading,
            "timestamp": timestamp,
        }
        data.update(kwargs)
        return Submission(**data)

    return _make


@pytest.fixture
def capture_logs(caplog):
    """Captura logs para verificação em testes."""
    import logging

    caplog.set_level(logging.DEBUG)
    return caplog
