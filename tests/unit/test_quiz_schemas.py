# =============================================================================
# TESTES - Quiz Schemas Module
# =============================================================================
# Testes unitários para modelos Pydantic e AttemptState
# =============================================================================

import pytest


class TestQuestion:
    """Testes para Question."""

    def test_numeric_id_becomes_str(self):
        """Verifica conversão de id numérico."""
        from mathquiz.models import Question

        assert Question(id=7).id == "7"
        assert Question(id=7.0).id == "7"

    def test_null_text(self):
        """Verifica texto None como string vazia."""
        from mathquiz.models import Question

        assert Question(id="1", text=None).text == ""


class TestQuiz:
    """Testes para Quiz."""

    def test_defaults(self):
        """Verifica valores padrão."""
        from mathquiz.models import DEFAULT_MAX_ATTEMPTS, Quiz

        quiz = Quiz(title="T")

        assert quiz.max_attempts == DEFAULT_MAX_ATTEMPTS == 1
        assert quiz.randomize is False
        assert quiz.questions == []
        assert len(quiz.id) == 12
        assert quiz.created_at > 0

    def test_camel_case_document(self, sample_quiz):
        """Verifica aliases camelCase na forma persistida."""
        document = sample_quiz.to_document()

        assert set(document) == {"id", "title", "questions", "randomize", "maxAttempts", "createdAt"}
        assert document["questions"][0] == {"id": "1", "text": "Solve $x + 2 = 7$", "showFeedback": True}

    def test_invalid_max_attempts_coerced(self):
        """Verifica que maxAttempts inválido cai no default."""
        from mathquiz.models import Quiz

        assert Quiz.model_validate({"title": "T", "maxAttempts": "zero"}).max_attempts == 1
        assert Quiz.model_validate({"title": "T", "maxAttempts": 3}).max_attempts == 3

    def test_question_lookup(self, sample_quiz):
        """Verifica busca de questão por id."""
        assert sample_quiz.question("2").show_feedback is False
        assert sample_quiz.question("9") is None


class TestSubmission:
    """Testes para Submission."""

    def test_frozen(self, make_submission):
        """Verifica que a submissão é imutável."""
        from pydantic import ValidationError

        submission = make_submission()

        with pytest.raises(ValidationError):
            submission.student_name = "Outro"

    def test_answers_normalized(self, make_submission):
        """Verifica chaves string e None como resposta vazia."""
        submission = make_submission(answers={1: "5", "2": None})

        assert submission.answers == {"1": "5", "2": ""}

    def test_unique_ids(self, make_submission):
        """Verifica ids distintos por submissão."""
        assert make_submission().id != make_submission().id


class TestAttemptState:
    """Testes para as propriedades do AttemptState."""

    def test_busy_phases_block_submit(self, sample_quiz):
        """Verifica que GRADING e SAVING desabilitam o envio."""
        from mathquiz.models import AttemptState, SubmitPhase

        state = AttemptState(quiz=sample_quiz, order=list(sample_quiz.questions))

        assert state.can_submit is True
        for phase in (SubmitPhase.GRADING, SubmitPhase.SAVING):
            state.phase = phase
            assert state.is_busy is True
            assert state.can_submit is False

    def test_grading_prefers_viewed_submission(self, sample_quiz, make_submission):
        """Verifica correção exibida em modo leitura."""
        from mathquiz.models import AttemptMode, AttemptState

        submission = make_submission(grading={"1": {"isCorrect": True}})
        state = AttemptState(
            quiz=sample_quiz,
            mode=AttemptMode.VIEWING,
            history=[submission],
            selected_index=0,
        )

        assert state.grading["1"].is_correct is True
        assert state.attempts_remaining == 0
