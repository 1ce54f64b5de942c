"""Exceções do Math Quiz."""


class MathQuizError(Exception):
    """Erro base do pacote."""


class ConfigurationError(MathQuizError):
    """Credenciais ou chaves obrigatórias ausentes na inicialização."""


class GradingServiceError(MathQuizError):
    """Falha de rede, status não-2xx ou resposta sem texto do serviço de correção."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ImportFormatError(MathQuizError):
    """Payload de importação de quiz malformado ou incompleto."""


class StoreWriteError(MathQuizError):
    """Persistência de uma submissão falhou depois de todas as tentativas."""

    def __init__(self, message: str, submission_id: str | None = None):
        super().__init__(message)
        self.submission_id = submission_id


class AttemptStateError(MathQuizError):
    """Transição inválida no ciclo de tentativas (ex: submit em modo leitura)."""
