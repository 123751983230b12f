"""
Step View - What a presentation adapter needs to render the active step

The view is rebuilt from WizardState on every call, so visibility and
the next/save gates always reflect the latest edit.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from formwizard.contracts import FileRef, FormConfig, Question, Step, TextAnswer
from formwizard.core.validation import next_enabled, save_enabled
from formwizard.core.visibility import is_visible

logger = logging.getLogger(__name__)

COMPLETED_SYMBOL = 'fa-solid fa-check'


@dataclass(frozen=True)
class QuestionView:
    """One question of the active step, rendered or not."""
    question: Question
    value: Any
    error: Optional[str]
    visible: bool


@dataclass(frozen=True)
class NavItem:
    """
    Navigation menu entry.

    Steps before the active one are shown as completed (check symbol
    instead of the step icon).
    """
    index: int
    step_id: str
    title: str
    symbol: str
    active: bool
    completed: bool
    tooltip: str


@dataclass(frozen=True)
class StepView:
    form_title: str
    step: Step
    step_index: int
    step_count: int
    questions: Tuple[QuestionView, ...]
    next_enabled: bool
    save_enabled: bool
    confirmation_open: bool
    pending_step_index: Optional[int]
    nav_items: Tuple[NavItem, ...]
    unsaved_changes: bool = False

    @property
    def is_first(self) -> bool:
        return self.step_index == 0

    @property
    def is_last(self) -> bool:
        return self.step_index == self.step_count - 1

    @property
    def progress_label(self) -> str:
        return f"Section {self.step_index + 1} of {self.step_count}"

    @property
    def visible_questions(self) -> Tuple[QuestionView, ...]:
        return tuple(qv for qv in self.questions if qv.visible)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe form of the view, as served by the Flask adapter."""
        return {
            'form_title': self.form_title,
            'step': {
                'id': self.step.id,
                'title': self.step.title,
                'icon': self.step.icon,
                'description': self.step.description,
            },
            'step_index': self.step_index,
            'step_count': self.step_count,
            'progress_label': self.progress_label,
            'is_first': self.is_first,
            'is_last': self.is_last,
            'questions': [_question_view_to_dict(qv) for qv in self.questions],
            'next_enabled': self.next_enabled,
            'save_enabled': self.save_enabled,
            'unsaved_changes': self.unsaved_changes,
            'confirmation': {
                'open': self.confirmation_open,
                'pending_step_index': self.pending_step_index,
            },
            'nav_items': [
                {
                    'index': item.index,
                    'id': item.step_id,
                    'title': item.title,
                    'symbol': item.symbol,
                    'active': item.active,
                    'completed': item.completed,
                    'tooltip': item.tooltip,
                }
                for item in self.nav_items
            ],
        }


def build_step_view(form: FormConfig, state, unsaved_changes: bool = False) -> StepView:
    """
    Build the view for the active step.

    Args:
        form: Form definition
        state: WizardState of the controller
        unsaved_changes: Whether the active step differs from its last save

    Returns:
        StepView
    """
    step = form.steps[state.step_index]
    answers = state.answers

    questions = tuple(
        QuestionView(
            question=q,
            value=_plain_value(answers.get(q.id)),
            error=state.field_errors.get(q.id),
            visible=is_visible(q, answers),
        )
        for q in step.questions
    )

    nav_items = tuple(
        NavItem(
            index=index,
            step_id=s.id,
            title=s.title,
            symbol=COMPLETED_SYMBOL if index < state.step_index else s.icon,
            active=index == state.step_index,
            completed=index < state.step_index,
            tooltip=s.description,
        )
        for index, s in enumerate(form.steps)
    )

    return StepView(
        form_title=form.title,
        step=step,
        step_index=state.step_index,
        step_count=form.step_count,
        questions=questions,
        next_enabled=next_enabled(step, answers),
        save_enabled=save_enabled(step, answers),
        confirmation_open=state.confirmation_open,
        pending_step_index=state.pending_step_index,
        nav_items=nav_items,
        unsaved_changes=unsaved_changes,
    )


def _plain_value(answer) -> Any:
    if isinstance(answer, TextAnswer):
        return answer.text
    if isinstance(answer, FileRef):
        return answer
    return None


def _question_view_to_dict(qv: QuestionView) -> Dict[str, Any]:
    q = qv.question
    value = qv.value
    if isinstance(value, FileRef):
        value = {'filename': value.filename}

    return {
        'id': q.id,
        'label': q.label,
        'type': q.type,
        'description': q.description,
        'options': list(q.options) if q.options else None,
        'layout': q.layout,
        'required': q.required,
        'placeholder': q.placeholder,
        'value': value,
        'error': qv.error,
        'visible': qv.visible,
    }
