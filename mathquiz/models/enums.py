"""Quiz Enums - Modos de tentativa, fases de envio e tipos de nó."""

from enum import Enum


class AttemptMode(str, Enum):
    """Modo da tela do aluno."""

    ANSWERING = "answering"  # Tentativa em andamento
    VIEWING = "viewing"  # Leitura de uma submissão do histórico


class SubmitPhase(str, Enum):
    """Fase do ciclo de envio (submit desabilitado fora de IDLE)."""

    IDLE = "idle"
    GRADING = "grading"
    SAVING = "saving"
    DONE = "done"
    ERROR = "error"


class NodeKind(str, Enum):
    """Tipos de nó produzidos pelo parser de markup."""

    TEXT = "text"
    BOLD = "bold"
    LINK = "link"
    IMAGE = "image"
    INLINE_MATH = "inlineMath"
    BLOCK_MATH = "blockMath"
