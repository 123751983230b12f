"""
Validation Engine - Required-field checks and step gates

Responsibilities:
- validate_step(): one error per required, visible, unanswered question
- next_enabled / save_enabled gates for the presentation layer
- all_visible_answered(): completeness check used by save-and-exit

Hidden questions are never validated, even when marked required:
a question the user cannot see cannot block progress.
"""

import logging
from typing import Dict, List

from formwizard.contracts import Question, Step
from formwizard.core.answer_store import AnswerStore, is_empty
from formwizard.core.visibility import is_visible, visible_questions

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = 'This field is required.'


def required_visible(step: Step, answers: AnswerStore) -> List[Question]:
    """Required questions of the step whose conditional currently holds."""
    return [q for q in step.questions if q.required and is_visible(q, answers)]


def validate_step(step: Step, answers: AnswerStore) -> Dict[str, str]:
    """
    Validate one step against the current answers.

    Args:
        step: Step to check
        answers: Current Answer Store

    Returns:
        dict: question id -> error message (empty dict when valid)
    """
    errors = {}
    for question in required_visible(step, answers):
        if is_empty(answers.get(question.id)):
            errors[question.id] = REQUIRED_MESSAGE

    if errors:
        logger.debug(f"Step '{step.id}' invalid: {sorted(errors)}")
    return errors


def next_enabled(step: Step, answers: AnswerStore) -> bool:
    return all(not is_empty(answers.get(q.id)) for q in required_visible(step, answers))


def save_enabled(step: Step, answers: AnswerStore) -> bool:
    return any(not is_empty(answers.get(q.id)) for q in visible_questions(step, answers))


def all_visible_answered(step: Step, answers: AnswerStore) -> bool:
    """True when every visible question on the step, required or not, has an answer."""
    return all(not is_empty(answers.get(q.id)) for q in visible_questions(step, answers))
