"""
Result types returned by WizardController.handle()

These are the ONLY return types from the command handler.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SubmissionEvent:
    """
    Emitted once per successful submission.

    Attributes:
        wizard_id: Identifier of the wizard session
        form_title: Title of the submitted form
        answers: Full Answer Store snapshot (text as str, files as FileRef)
        submitted_at: ISO-8601 UTC timestamp
    """
    wizard_id: str
    form_title: str
    answers: Dict[str, Any]
    submitted_at: str


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a command the state machine accepted.

    "Accepted" means the command was legal in the current state, not
    that the wizard moved: a request_next on an invalid step is
    accepted, leaves step_index unchanged and reports field_errors.

    Attributes:
        command_type: Name of the handled command
        step_index: Active step after the command
        moved: Whether step_index changed
        field_errors: Errors for the active step (question id -> message)
        confirmation_open: Whether the unsaved-changes confirmation is showing
        pending_step_index: Jump target waiting on the confirmation (None = exit)
        exited: Whether the external exit action was performed
        submission: Set when the command completed a submission
    """
    command_type: str
    step_index: int
    moved: bool = False
    field_errors: Dict[str, str] = field(default_factory=dict)
    confirmation_open: bool = False
    pending_step_index: Optional[int] = None
    exited: bool = False
    submission: Optional[SubmissionEvent] = None


@dataclass(frozen=True)
class IllegalCommand:
    """
    Command rejected by the controller (not legal in the current state).

    Examples:
    - RequestPrev on the first step
    - RequestNext or RequestJump while the confirmation is open
    - Submit on any step but the last
    - ConfirmSaveAndProceed while no confirmation is open

    Rejected commands never change WizardState.

    Attributes:
        reason: Human-readable explanation
        command_type: Name of rejected command type
    """
    reason: str
    command_type: str
