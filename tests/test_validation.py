"""
Test Validation Engine - required/visible rules and step gates

Run with: pytest tests/test_validation.py -v
"""

import pytest

from formwizard.contracts import Conditional, FileRef, Question, Step
from formwizard.core.answer_store import AnswerStore
from formwizard.core.validation import (
    REQUIRED_MESSAGE,
    all_visible_answered,
    next_enabled,
    required_visible,
    save_enabled,
    validate_step,
)


def make_lifestyle_step():
    """hours (required select) controls detail (optional text)"""
    return Step(
        id='lifestyle',
        title='Lifestyle',
        questions=(
            Question(id='hours', label='Hours', type='select',
                     options=('0-2', '3-5', '6+'), required=True),
            Question(id='detail', label='Detail',
                     conditional=Conditional(field='hours', value=('6+',))),
        )
    )


def make_smoking_step():
    """smoker (required) controls cigarettes (required, hidden unless smoker=yes)"""
    return Step(
        id='about_you',
        title='About you',
        questions=(
            Question(id='smoker', label='Smoker?', type='radio',
                     options=('yes', 'no'), required=True),
            Question(id='cigarettes', label='How many?', required=True,
                     conditional=Conditional(field='smoker', value=('yes',))),
            Question(id='notes', label='Notes'),
        )
    )


# ========== validate_step ==========

def test_one_error_per_missing_required_visible_question():
    step = Step(
        id='s',
        title='S',
        questions=(
            Question(id='a', label='A', required=True),
            Question(id='b', label='B', required=True),
            Question(id='c', label='C'),
        )
    )

    errors = validate_step(step, AnswerStore())

    assert errors == {'a': REQUIRED_MESSAGE, 'b': REQUIRED_MESSAGE}


def test_valid_step_returns_empty_dict():
    assert validate_step(make_lifestyle_step(), AnswerStore({'hours': '0-2'})) == {}


def test_hidden_required_question_never_validated():
    step = make_smoking_step()
    errors = validate_step(step, AnswerStore({'smoker': 'no'}))
    assert errors == {}


def test_visible_required_conditional_question_validated():
    step = make_smoking_step()
    errors = validate_step(step, AnswerStore({'smoker': 'yes'}))
    assert errors == {'cigarettes': REQUIRED_MESSAGE}


def test_whitespace_answer_fails_required_check():
    step = make_lifestyle_step()
    answers = AnswerStore()
    answers.set('hours', '   ')
    assert 'hours' in validate_step(step, answers)


def test_file_answer_satisfies_required():
    step = Step(id='docs', title='Docs', questions=(
        Question(id='report', label='Report', type='file', required=True),
    ))
    answers = AnswerStore({'report': FileRef(filename='scan.pdf')})
    assert validate_step(step, answers) == {}


# ========== Gates ==========

def test_required_visible_set_tracks_controller():
    step = make_smoking_step()

    ids = [q.id for q in required_visible(step, AnswerStore({'smoker': 'yes'}))]
    assert ids == ['smoker', 'cigarettes']

    ids = [q.id for q in required_visible(step, AnswerStore({'smoker': 'no'}))]
    assert ids == ['smoker']


def test_hiding_only_blocker_unblocks_next():
    """Changing the controller hides the blocker on the same pass"""
    step = make_smoking_step()
    answers = AnswerStore({'smoker': 'yes'})
    assert next_enabled(step, answers) is False

    answers.set('smoker', 'no')
    assert next_enabled(step, answers) is True


def test_next_gate_ignores_optional_questions():
    """Only required visible questions gate next"""
    step = make_smoking_step()
    assert next_enabled(step, AnswerStore({'smoker': 'no'})) is True


def test_save_enabled_needs_one_visible_answer():
    step = make_smoking_step()
    assert save_enabled(step, AnswerStore()) is False
    assert save_enabled(step, AnswerStore({'notes': 'hello'})) is True


def test_save_enabled_ignores_hidden_answers():
    step = make_smoking_step()
    # cigarettes is hidden while smoker is unanswered
    assert save_enabled(step, AnswerStore({'cigarettes': '6-10'})) is False


def test_all_visible_answered():
    step = make_smoking_step()
    assert all_visible_answered(step, AnswerStore({'smoker': 'no'})) is False
    assert all_visible_answered(step, AnswerStore({'smoker': 'no', 'notes': 'n/a'})) is True


# ========== Scenario: hours / detail ==========

def test_hours_detail_scenario():
    step = make_lifestyle_step()
    answers = AnswerStore()

    # hours unset: detail hidden, next blocked
    assert [q.id for q in required_visible(step, answers)] == ['hours']
    assert next_enabled(step, answers) is False

    # hours=6+: detail appears, next open (detail is optional)
    answers.set('hours', '6+')
    assert 'detail' not in validate_step(step, answers)
    assert next_enabled(step, answers) is True

    # hours=0-2: detail hidden again, next open
    answers.set('hours', '0-2')
    assert next_enabled(step, answers) is True


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
