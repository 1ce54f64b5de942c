# =============================================================================
# CONFTEST - Pytest Fixtures Globais
# =============================================================================
# Ambiente de teste sem dependências externas (sem Gemini, sem AgentFS real)
# =============================================================================

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Adicionar root ao path (app_state, server)
sys.path.insert(0, str(Path(__file__).parent))


@pytest.fixture(autouse=True)
def setup_test_env():
    """Configura variáveis de ambiente para testes."""
    env_vars = {
        "GEMINI_API_KEY": "test-gemini-key",
        "TEACHER_PASSWORD": "professor-123",
        "AGENTFS_ID": "mathquiz-test",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars):
        yield
