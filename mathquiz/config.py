# =============================================================================
# CONFIGURAÇÃO DO MATH QUIZ
# =============================================================================
# Valores lidos de variáveis de ambiente (.env carregado pelo server)
# =============================================================================

import os
from dataclasses import dataclass
from typing import Any

from .errors import ConfigurationError

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} deve ser numérico, recebido '{raw}'") from None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} deve ser inteiro, recebido '{raw}'") from None


@dataclass(frozen=True)
class QuizConfig:
    """Configuração da aplicação.

    Attributes:
        gemini_api_key: Chave do serviço de correção (obrigatória)
        gemini_model: Modelo usado em generateContent
        gemini_base_url: URL base da API
        grading_timeout: Timeout da chamada de correção (segundos)
        teacher_password: Senha dos endpoints de professor (obrigatória)
        agentfs_id: ID do banco AgentFS usado como store
        store_write_retries: Tentativas de gravação de uma submissão
        log_level: Nível de log
    """

    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    grading_timeout: float = 60.0
    teacher_password: str = ""
    agentfs_id: str = "mathquiz"
    store_write_retries: int = 3
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "QuizConfig":
        """Cria configuração a partir das variáveis de ambiente."""
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL).rstrip("/"),
            grading_timeout=_env_float("GRADING_TIMEOUT", 60.0),
            teacher_password=os.getenv("TEACHER_PASSWORD", "").strip(),
            agentfs_id=os.getenv("AGENTFS_ID", "mathquiz"),
            store_write_retries=max(1, _env_int("STORE_WRITE_RETRIES", 3)),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def missing(self) -> list[str]:
        """Variáveis obrigatórias ausentes."""
        missing = []
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.teacher_password:
            missing.append("TEACHER_PASSWORD")
        return missing

    @property
    def is_configured(self) -> bool:
        return not self.missing

    def validate(self) -> "QuizConfig":
        """Garante que as credenciais obrigatórias existem.

        Raises:
            ConfigurationError: se alguma variável obrigatória estiver ausente
        """
        if self.missing:
            raise ConfigurationError(
                "Setup required: configure " + ", ".join(self.missing) + " antes de iniciar."
            )
        return self

    def to_dict(self) -> dict[str, Any]:
        """Resumo sem segredos (para logs/health)."""
        return {
            "grading": {
                "model": self.gemini_model,
                "base_url": self.gemini_base_url,
                "timeout": self.grading_timeout,
                "api_key_set": bool(self.gemini_api_key),
            },
            "store": {
                "agentfs_id": self.agentfs_id,
                "write_retries": self.store_write_retries,
            },
            "log_level": self.log_level,
        }
