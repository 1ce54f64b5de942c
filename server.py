"""
Math Quiz Server

FastAPI server with:
- Quiz publishing and import (teacher)
- Limited attempts with AI grading (student)
- Markup/math live preview
- AgentFS persistence
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppContext
from mathquiz.config import QuizConfig
from mathquiz.errors import ConfigurationError
from mathquiz.router import router as quiz_router

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Cria a aplicação.

    Args:
        context: Contexto já montado (testes). Sem ele, o lifespan carrega o
            .env, valida a configuração e abre o AgentFS; configuração
            incompleta aborta a inicialização.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if context is not None:
            app.state.context = context
            yield
            return

        load_dotenv()
        config = QuizConfig.from_env()
        logging.basicConfig(level=config.log_level)
        try:
            app.state.context = await AppContext.build(config)
        except ConfigurationError as e:
            logger.critical(str(e))
            raise

        logger.info(f"Math Quiz iniciado: {config.to_dict()}")
        try:
            yield
        finally:
            await app.state.context.close()

    app = FastAPI(title="Math Quiz Classroom", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(quiz_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server:app", host="0.0.0.0", port=8001, reload=False)
