"""
Visibility Evaluator - Decides whether a question is currently shown

Rules:
- Question without a conditional: always visible
- Conditional question: visible only if the stringified answer of the
  controlling field is one of the stringified accepted values
- Missing controller answer: not visible

Design principles:
- Pure functions: answers in, bool out, no side effects
- Re-run after every answer change (a just-edited field may control
  questions on the same step)
- Case-sensitive: 'Yes' does not match 'yes'
"""

import logging
from typing import List

from formwizard.contracts import Question, Step
from formwizard.core.answer_store import AnswerStore, stringify

logger = logging.getLogger(__name__)


def is_visible(question: Question, answers: AnswerStore) -> bool:
    """
    Determine if a question is shown under the current answers.

    Args:
        question: Question from the form definition
        answers: Current Answer Store

    Returns:
        True if the question should be rendered and validated
    """
    conditional = question.conditional
    if conditional is None:
        return True

    if conditional.field not in answers:
        return False

    actual = stringify(answers.get(conditional.field))
    accepted = {stringify(v) for v in conditional.value}
    return actual in accepted


def visible_questions(step: Step, answers: AnswerStore) -> List[Question]:
    """Visible questions of a step, in display order."""
    return [q for q in step.questions if is_visible(q, answers)]
