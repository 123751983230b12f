"""
Semantic contracts for the questionnaire wizard.

This module defines immutable data structures shared between modules.
They describe shape and semantics; loading-time checks live in
core/form_definition.py, not here.

Design principles:
- Frozen dataclasses (immutable after creation)
- No dependencies on other modules
- Tuples instead of lists so definitions cannot be mutated mid-session

Contents:
- Conditional, Question, Step, FormConfig: the static form definition
- TextAnswer, FileRef, EmptyAnswer (EMPTY): the closed set of answer values

Usage:
    from formwizard.contracts import Question, Step, FormConfig, TextAnswer, EMPTY
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union


QUESTION_TYPES = ('text', 'radio', 'select', 'date', 'file')
CHOICE_TYPES = ('radio', 'select')
LAYOUTS = ('inline', 'default')


@dataclass(frozen=True)
class Conditional:
    """
    Visibility rule for a question.

    The owning question is shown only while the answer to `field`,
    coerced to a string, is one of `value`.

    Attributes:
        field: Id of the controlling question
        value: Accepted answers, kept in definition order
    """
    field: str
    value: Tuple[str, ...]


@dataclass(frozen=True)
class Question:
    """
    One input of a step.

    Attributes:
        id: Unique within the form; also the answer key
        label: Text shown to the user
        type: One of QUESTION_TYPES
        description: Optional help text
        options: Ordered choices (radio/select only)
        layout: 'inline' or 'default'
        required: Whether the question gates progression while visible
        placeholder: Hint text for text inputs
        conditional: Optional visibility rule

    Examples:
        >>> q = Question(
        ...     id='hours',
        ...     label='Hours of screen time per day',
        ...     type='select',
        ...     options=('0-2', '3-5', '6+'),
        ...     required=True
        ... )
        >>> q.options
        ('0-2', '3-5', '6+')
    """
    id: str
    label: str
    type: str = 'text'
    description: Optional[str] = None
    options: Optional[Tuple[str, ...]] = None
    layout: str = 'default'
    required: bool = False
    placeholder: Optional[str] = None
    conditional: Optional[Conditional] = None


@dataclass(frozen=True)
class Step:
    """One page of the wizard. Question order is display order."""
    id: str
    title: str
    icon: str = ''
    description: str = ''
    questions: Tuple[Question, ...] = ()


@dataclass(frozen=True)
class FormConfig:
    """Complete form definition, loaded once per session."""
    title: str
    steps: Tuple[Step, ...]

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1

    def find_question(self, question_id: str) -> Optional[Question]:
        """Return the question with this id from any step, or None."""
        for step in self.steps:
            for question in step.questions:
                if question.id == question_id:
                    return question
        return None


# =============================================================================
# Answer values
# =============================================================================

@dataclass(frozen=True)
class TextAnswer:
    """
    A typed-in or selected answer.

    Stored already normalized (surrounding whitespace trimmed) by the
    Answer Store. The text may be empty, in which case the answer
    counts as empty for validation.
    """
    text: str


@dataclass(frozen=True)
class FileRef:
    """
    Session-local reference to an uploaded file.

    The handle is whatever the presentation layer produced (a Werkzeug
    FileStorage, an open file object, a path). It is excluded from
    equality and never serialized into a draft.
    """
    filename: str
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class EmptyAnswer:
    """Marker for a question with no answer."""


EMPTY = EmptyAnswer()

AnswerValue = Union[TextAnswer, FileRef, EmptyAnswer]
