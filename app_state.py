"""Core module - contexto da aplicação (store, correção, renderização)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from mathquiz.config import QuizConfig
from mathquiz.engine import AttemptManager, GradingCoordinator
from mathquiz.llm import GradingServiceClient
from mathquiz.markup import HtmlRenderer
from mathquiz.storage import QuizStore

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

logger = logging.getLogger(__name__)


# =============================================================================
# APP CONTEXT
# =============================================================================


@dataclass
class AppContext:
    """Handles compartilhados, construídos uma vez na inicialização.

    Passado por referência para router e engines; não há estado global.
    """

    config: QuizConfig
    store: QuizStore
    coordinator: GradingCoordinator
    renderer: HtmlRenderer
    agentfs: Optional[Any] = None

    @classmethod
    def create(
        cls,
        config: QuizConfig,
        agentfs: AgentFS,
        client: Optional[GradingServiceClient] = None,
        renderer: Optional[HtmlRenderer] = None,
    ) -> AppContext:
        """Monta o contexto a partir de dependências já abertas."""
        return cls(
            config=config,
            store=QuizStore(agentfs, write_retries=config.store_write_retries),
            coordinator=GradingCoordinator(client or GradingServiceClient.from_config(config)),
            renderer=renderer or HtmlRenderer(),
            agentfs=agentfs,
        )

    @classmethod
    async def build(cls, config: QuizConfig) -> AppContext:
        """Valida a configuração e abre o AgentFS.

        Raises:
            ConfigurationError: credenciais obrigatórias ausentes
        """
        config.validate()

        from agentfs_sdk import AgentFS, AgentFSOptions

        agentfs = await AgentFS.open(AgentFSOptions(id=config.agentfs_id))
        logger.info(f"AgentFS aberto: {config.agentfs_id}")
        return cls.create(config, agentfs)

    def attempt_manager(self) -> AttemptManager:
        """Novo AttemptManager (um por sessão de aluno)."""
        return AttemptManager(self.store, self.coordinator)

    async def close(self) -> None:
        if self.agentfs is not None:
            try:
                await self.agentfs.close()
                logger.info("AgentFS fechado")
            except Exception as e:
                logger.warning(f"Erro ao fechar AgentFS: {e}")
            self.agentfs = None
