"""Grading Service Client - Chamada HTTP ao endpoint de geração de texto."""

import logging
from typing import Any

import httpx

from ..config import QuizConfig
from ..errors import GradingServiceError

logger = logging.getLogger(__name__)


class GradingServiceClient:
    """Cliente do serviço de correção (formato Gemini generateContent).

    Envia um prompt e devolve o texto bruto da primeira candidata. Qualquer
    falha (rede, timeout, status não-2xx, resposta sem texto) vira
    GradingServiceError; quem decide degradar é o GradingCoordinator.

    Example:
        >>> client = GradingServiceClient(api_key="...", model="gemini-2.5-flash")
        >>> text = await client.generate("Grade these answers...")
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_config(cls, config: QuizConfig) -> "GradingServiceClient":
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            timeout=config.grading_timeout,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _build_body(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }

    async def _post(self, client: httpx.AsyncClient, prompt: str) -> httpx.Response:
        return await client.post(
            self.endpoint,
            params={"key": self.api_key},
            json=self._build_body(prompt),
        )

    async def generate(self, prompt: str) -> str:
        """Envia o prompt e retorna o texto gerado.

        Raises:
            GradingServiceError: falha de rede, status não-2xx ou resposta sem texto
        """
        try:
            if self._http_client is not None:
                response = await self._post(self._http_client, prompt)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, prompt)
        except httpx.HTTPError as e:
            raise GradingServiceError(f"Falha de rede no serviço de correção: {e}") from e

        if not response.is_success:
            raise GradingServiceError(
                f"Serviço de correção respondeu {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except (ValueError, RecursionError) as e:
            raise GradingServiceError("Resposta do serviço de correção não é JSON") from e

        text = self._extract_text(data)
        if not text:
            raise GradingServiceError("Resposta do serviço de correção sem texto")

        logger.debug(f"Resposta de correção recebida ({len(text)} chars)")
        return text

    @staticmethod
    def _extract_text(data: Any) -> str | None:
        """Extrai candidates[0].content.parts[0].text."""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None
