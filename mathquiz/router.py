"""Quiz Router - Endpoints FastAPI para alunos e professor."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response

from app_state import AppContext

from .engine.grading_coordinator import GradingCoordinator
from .engine.quiz_importer import import_quiz
from .errors import AttemptStateError, ImportFormatError, StoreWriteError
from .markup import render
from .models.enums import AttemptMode
from .models.schemas import (
    AttemptView,
    EnterQuizRequest,
    HistoryEntry,
    Quiz,
    RenderRequest,
    ReviewedSubmission,
    SubmitQuizRequest,
)
from .models.state import AttemptState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["Quiz"])


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


def get_context(request: Request) -> AppContext:
    """Dependency para obter o AppContext montado na inicialização."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Aplicação não inicializada")
    return context


def verify_teacher(
    x_teacher_password: str | None = Header(default=None),
    context: AppContext = Depends(get_context),
) -> None:
    """Autorização dos endpoints de professor (senha compartilhada)."""
    expected = context.config.teacher_password
    if not x_teacher_password or not hmac.compare_digest(x_teacher_password, expected):
        raise HTTPException(status_code=401, detail="Senha de professor inválida")


async def _get_quiz_or_404(context: AppContext, quiz_id: str) -> Quiz:
    quiz = await context.store.get_quiz(quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail=f"Quiz {quiz_id} não encontrado")
    return quiz


def _to_view(state: AttemptState) -> AttemptView:
    """Tela do aluno; feedback oculto onde o professor desligou `show_feedback`."""
    grading = state.grading
    if grading is not None:
        visible = {q.id for q in state.quiz.questions if q.show_feedback}
        grading = {qid: ev for qid, ev in grading.items() if qid in visible}

    return AttemptView(
        quiz_id=state.quiz.id,
        title=state.quiz.title,
        mode=state.mode,
        phase=state.phase,
        attempts_remaining=state.attempts_remaining,
        max_attempts=state.quiz.max_attempts,
        can_submit=state.can_submit,
        order=state.order,
        answers=state.answers,
        history=[
            HistoryEntry(
                id=s.id,
                timestamp=s.timestamp,
                student_name=s.student_name,
                is_graded=s.is_graded,
            )
            for s in state.history
        ],
        selected_index=state.selected_index,
        grading=grading,
    )


# =============================================================================
# QUIZZES (professor)
# =============================================================================


@router.get("/quizzes", response_model=list[Quiz])
async def list_quizzes(context: AppContext = Depends(get_context)):
    """Lista os quizzes publicados."""
    return await context.store.list_quizzes()


@router.get("/quizzes/{quiz_id}", response_model=Quiz)
async def get_quiz(quiz_id: str, context: AppContext = Depends(get_context)):
    return await _get_quiz_or_404(context, quiz_id)


@router.put("/quizzes/{quiz_id}", response_model=Quiz, dependencies=[Depends(verify_teacher)])
async def publish_quiz(quiz_id: str, quiz: Quiz, context: AppContext = Depends(get_context)):
    """Cria ou atualiza (publica) um quiz. Mantém a data de criação original."""
    existing = await context.store.get_quiz(quiz_id)
    update = {"id": quiz_id}
    if existing is not None:
        update["created_at"] = existing.created_at
    return await context.store.save_quiz(quiz.model_copy(update=update))


@router.delete("/quizzes/{quiz_id}", status_code=204, dependencies=[Depends(verify_teacher)])
async def delete_quiz(quiz_id: str, context: AppContext = Depends(get_context)):
    await _get_quiz_or_404(context, quiz_id)
    await context.store.delete_quiz(quiz_id)
    return Response(status_code=204)


@router.post("/import", response_model=Quiz, status_code=201, dependencies=[Depends(verify_teacher)])
async def import_quiz_file(
    request: Request,
    quiz_id: str | None = None,
    context: AppContext = Depends(get_context),
):
    """Importa um quiz (JSON puro ou `const X = {...};`).

    Payload inválido -> 422 e nada é criado.
    """
    payload = await request.body()
    try:
        quiz = import_quiz(payload, quiz_id=quiz_id)
    except ImportFormatError as e:
        logger.warning(f"Importação rejeitada: {e}")
        raise HTTPException(status_code=422, detail=str(e)) from e
    return await context.store.save_quiz(quiz)


# =============================================================================
# SUBMISSIONS (professor)
# =============================================================================


@router.get(
    "/quizzes/{quiz_id}/submissions",
    response_model=list[ReviewedSubmission],
    dependencies=[Depends(verify_teacher)],
)
async def list_submissions(
    quiz_id: str,
    user_id: str | None = None,
    context: AppContext = Depends(get_context),
):
    """Submissões do quiz (mais recentes primeiro) com placar."""
    quiz = await _get_quiz_or_404(context, quiz_id)
    submissions = await context.store.list_submissions(quiz_id, user_id=user_id)
    return [
        ReviewedSubmission(submission=s, score=GradingCoordinator.score(s.grading, quiz))
        for s in submissions
    ]


@router.delete(
    "/quizzes/{quiz_id}/submissions/{submission_id}",
    status_code=204,
    dependencies=[Depends(verify_teacher)],
)
async def reset_attempt(quiz_id: str, submission_id: str, context: AppContext = Depends(get_context)):
    """Apaga uma submissão, devolvendo a tentativa ao aluno."""
    if not await context.store.delete_submission(quiz_id, submission_id):
        raise HTTPException(status_code=404, detail=f"Submissão {submission_id} não encontrada")
    return Response(status_code=204)


# =============================================================================
# ALUNO
# =============================================================================


@router.post("/quizzes/{quiz_id}/enter", response_model=AttemptView)
async def enter_quiz(quiz_id: str, request: EnterQuizRequest, context: AppContext = Depends(get_context)):
    """Entra no quiz: nova tentativa ou leitura do histórico.

    Falha ao ler o histórico propaga (nunca vira "zero tentativas usadas").
    """
    quiz = await _get_quiz_or_404(context, quiz_id)
    manager = context.attempt_manager()
    state = await manager.open(quiz, request.user_id)

    if request.history_index is not None:
        try:
            state = manager.select_history_index(request.history_index)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    return _to_view(state)


@router.post("/quizzes/{quiz_id}/submit", response_model=AttemptView)
async def submit_quiz(quiz_id: str, request: SubmitQuizRequest, context: AppContext = Depends(get_context)):
    """Envia uma tentativa: correção (não bloqueante) e gravação.

    - Cota conferida sobre o histórico relido agora (não atômico)
    - Falha na correção: submissão gravada sem correção
    - Falha na gravação: 503 com a correção já calculada e o `submission_id`
    - Reenvio com um `submission_id` já gravado devolve essa submissão sem
      gastar outra tentativa
    """
    quiz = await _get_quiz_or_404(context, quiz_id)
    manager = context.attempt_manager()

    if request.submission_id:
        existing = await context.store.get_submission(quiz_id, request.submission_id)
        if existing is not None:
            if existing.user_id != request.user_id:
                raise HTTPException(status_code=409, detail="submission_id já usado por outro aluno")
            logger.info(f"[Quiz {quiz_id}] Reenvio de {request.submission_id} já gravado; sem nova tentativa")
            await manager.open(quiz, request.user_id)
            return _to_view(manager.show_submission(existing.id))

    state = await manager.open(quiz, request.user_id)

    if state.mode == AttemptMode.VIEWING:
        raise HTTPException(status_code=409, detail="Sem tentativas restantes")

    for question_id, text in request.answers.items():
        if quiz.question(question_id) is not None:
            manager.set_answer(question_id, text)

    try:
        await manager.submit(request.student_name, request.email, submission_id=request.submission_id)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except AttemptStateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except StoreWriteError as e:
        grading = manager.state.last_grading
        raise HTTPException(
            status_code=503,
            detail={
                "message": "Correção calculada, mas a submissão não foi salva. Reenvie com o mesmo submission_id.",
                "error": str(e),
                "submission_id": e.submission_id,
                "grading": {k: v.model_dump(by_alias=True) for k, v in grading.items()} if grading else None,
            },
        ) from e

    return _to_view(manager.state)


# =============================================================================
# PREVIEW
# =============================================================================


@router.post("/render")
async def render_preview(request: RenderRequest, context: AppContext = Depends(get_context)):
    """Preview de markup/math: nós e HTML."""
    nodes = render(request.text)
    return {
        "nodes": [node.to_dict() for node in nodes],
        "html": context.renderer.render_nodes(nodes),
    }
