"""Quiz Importer - Parse do arquivo de importação de quiz."""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ..errors import ImportFormatError
from ..models.schemas import Quiz, coerce_max_attempts

logger = logging.getLogger(__name__)

# const Q = {...};  |  let Q = {...}  |  Q = {...};
_ASSIGNMENT_RE = re.compile(
    r"^\s*(?:(?:const|let|var)\s+)?[A-Za-z_$][\w$]*\s*=\s*(?P<body>\{.*\})\s*;?\s*$",
    re.DOTALL,
)


def _decode(payload: str | bytes) -> str:
    if isinstance(payload, bytes):
        try:
            return payload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"Arquivo não é UTF-8 válido: {e}") from e
    return payload.lstrip("\ufeff")


def parse_quiz_payload(payload: str | bytes) -> dict[str, Any]:
    """Parse do payload de importação.

    Aceita um objeto JSON puro ou uma única atribuição envolvendo um
    (`const X = {...};`).

    Returns:
        Objeto JSON com `title` (str) e `questions` (lista)

    Raises:
        ImportFormatError: payload vazio, JSON inválido ou campos obrigatórios ausentes
    """
    text = _decode(payload).strip()
    if not text:
        raise ImportFormatError("Arquivo vazio")

    if not text.startswith("{"):
        match = _ASSIGNMENT_RE.match(text)
        if match is None:
            raise ImportFormatError("Esperado um objeto JSON ou `const X = {...};`")
        text = match.group("body")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"JSON inválido: {e.msg} (linha {e.lineno}, coluna {e.colno})") from e

    if not isinstance(data, dict):
        raise ImportFormatError("O conteúdo deve ser um objeto JSON")
    if not isinstance(data.get("title"), str):
        raise ImportFormatError("Campo obrigatório ausente ou inválido: title (string)")
    if not isinstance(data.get("questions"), list):
        raise ImportFormatError("Campo obrigatório ausente ou inválido: questions (array)")

    return data


def build_quiz(data: dict[str, Any], quiz_id: str | None = None) -> Quiz:
    """Cria o Quiz a partir do payload parseado, aplicando defaults.

    maxAttempts -> coerce_max_attempts (default 1); randomize -> False;
    questão sem id recebe a posição (1-based); texto ausente -> "".

    Raises:
        ImportFormatError: questão que não é objeto, ids duplicados ou campos inválidos
    """
    questions = []
    seen: set[str] = set()
    for position, raw in enumerate(data.get("questions", []), start=1):
        if not isinstance(raw, dict):
            raise ImportFormatError(f"Questão {position} deve ser um objeto")
        question = dict(raw)
        if question.get("id") in (None, ""):
            question["id"] = position
        qid = str(question["id"])
        if qid in seen:
            raise ImportFormatError(f"ID de questão duplicado: {qid}")
        seen.add(qid)
        questions.append(question)

    randomize = data.get("randomize", False)
    document: dict[str, Any] = {
        "title": data["title"],
        "questions": questions,
        "randomize": randomize if isinstance(randomize, bool) else False,
        "maxAttempts": coerce_max_attempts(data.get("maxAttempts")),
    }
    if quiz_id:
        document["id"] = quiz_id

    try:
        quiz = Quiz.model_validate(document)
    except ValidationError as e:
        raise ImportFormatError(f"Quiz inválido: {e.error_count()} erro(s) de validação") from e

    logger.info(f"Quiz importado: '{quiz.title}' ({len(quiz.questions)} questões)")
    return quiz


def import_quiz(payload: str | bytes, quiz_id: str | None = None) -> Quiz:
    """parse_quiz_payload + build_quiz."""
    return build_quiz(parse_quiz_payload(payload), quiz_id=quiz_id)
