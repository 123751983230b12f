"""
Command types for WizardController control flow.

Commands are the ONLY public interface that changes wizard state.
Presentation adapters build a command per user event and pass it to
WizardController.handle(); they never touch WizardState directly.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Edit:
    """
    User changed the value of one question.

    raw_value is whatever the widget produced: a string, a selected
    option, or a file handle.
    """
    question_id: str
    raw_value: Any


@dataclass(frozen=True)
class RequestNext:
    """Validate the active step and advance by one."""
    pass


@dataclass(frozen=True)
class RequestPrev:
    """Go back one step. Never validates."""
    pass


@dataclass(frozen=True)
class RequestJump:
    """
    Navigation menu click.

    Goes straight to target when the active step is valid, otherwise
    opens the confirmation with target pending.
    """
    target: int


@dataclass(frozen=True)
class RequestSaveAndExit:
    """Save the draft and leave the wizard."""
    pass


@dataclass(frozen=True)
class ConfirmProceedWithoutSaving:
    """Confirmation answer: drop this step's unsaved edits and go on."""
    pass


@dataclass(frozen=True)
class ConfirmSaveAndProceed:
    """Confirmation answer: save the draft, then go on."""
    pass


@dataclass(frozen=True)
class DismissConfirmation:
    """Close the confirmation and stay on the active step."""
    pass


@dataclass(frozen=True)
class Submit:
    """Validate the last step and submit all answers."""
    pass


# Command union type for type hints
Command = (
    Edit | RequestNext | RequestPrev | RequestJump | RequestSaveAndExit
    | ConfirmProceedWithoutSaving | ConfirmSaveAndProceed | DismissConfirmation | Submit
)
