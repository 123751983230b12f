"""
Navigation Controller - The wizard's state machine

Responsibilities:
- Own WizardState (step index, answers, field errors, confirmation flow)
- Apply commands from presentation adapters (edits and transitions)
- Gate forward moves on validation of the active step
- Run the unsaved-changes confirmation for menu jumps and save-and-exit
- Write answers and step index through to the Persistence Adapter

States:
    Active(i)                   confirmation_open == False
    ConfirmPending(i, target)   confirmation_open == True, target in
                                pending_step_index (None means "exit")

Design principles:
- One event at a time, fully synchronous
- A transition either commits completely or leaves WizardState untouched
- In-memory state is authoritative; persistence is a best-effort mirror
- Commands that are not legal in the current state return IllegalCommand
  instead of raising
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from formwizard.commands import (
    Command,
    ConfirmProceedWithoutSaving,
    ConfirmSaveAndProceed,
    DismissConfirmation,
    Edit,
    RequestJump,
    RequestNext,
    RequestPrev,
    RequestSaveAndExit,
    Submit,
)
from formwizard.contracts import FormConfig, Step
from formwizard.core.answer_store import AnswerStore
from formwizard.core.step_view import StepView, build_step_view
from formwizard.core.validation import all_visible_answered, validate_step
from formwizard.core.visibility import is_visible
from formwizard.results import IllegalCommand, SubmissionEvent, TransitionResult

logger = logging.getLogger(__name__)

HandleResult = Union[TransitionResult, IllegalCommand]


@dataclass
class WizardState:
    """
    Mutable state of one wizard session.

    Only WizardController changes it. Presentation code reads it through
    WizardController.view().
    """
    step_index: int = 0
    answers: AnswerStore = field(default_factory=AnswerStore)
    field_errors: Dict[str, str] = field(default_factory=dict)
    pending_step_index: Optional[int] = None
    confirmation_open: bool = False


class WizardController:
    """
    Drives a multi-step questionnaire.

    Usage:
        controller = WizardController(form, InMemoryPersistence())
        controller.handle(Edit('hours', '6+'))
        result = controller.handle(RequestNext())
    """

    PERSISTENCE_METHODS = (
        'read_answers', 'write_answers', 'clear_answers',
        'read_step_index', 'write_step_index', 'clear_step_index',
    )

    def __init__(
        self,
        form: FormConfig,
        persistence,
        initial_data: Optional[Dict[str, Any]] = None,
        on_submit: Optional[Callable[[SubmissionEvent], Any]] = None,
        on_exit: Optional[Callable[[], Any]] = None,
        wizard_id: Optional[str] = None,
    ):
        """
        Start a session, resuming a persisted draft when one exists.

        Args:
            form: Loaded form definition
            persistence: PersistenceAdapter (any object with the six methods)
            initial_data: Seed answers used when no draft is persisted
            on_submit: Submission collaborator, called with a SubmissionEvent
            on_exit: External exit action for save-and-exit
            wizard_id: Session identifier (generated when omitted)

        Raises:
            TypeError: If a collaborator is missing a required callable
            ValueError: If the form has no steps, or initial_data holds a value
                no question can store
        """
        self._validate_collaborators(persistence, on_submit, on_exit)

        if not form.steps:
            raise ValueError("Form definition has no steps")

        self.form = form
        self.persistence = persistence
        self.on_submit = on_submit
        self.on_exit = on_exit
        self.wizard_id = wizard_id or uuid.uuid4().hex[:8]

        self.state = self._restore_state(initial_data)
        # Answers as of the last save or step entry; "proceed without saving" reverts to this
        self._saved_answers = self.state.answers.copy()

        self._write_answers()
        self._write_step_index()

        logger.info(
            f"Wizard {self.wizard_id} started on step {self.state.step_index} "
            f"of '{form.title}' ({len(self.state.answers)} answers)"
        )

    def _validate_collaborators(self, persistence, on_submit, on_exit):
        """Validate collaborator interfaces"""
        for method in self.PERSISTENCE_METHODS:
            if not callable(getattr(persistence, method, None)):
                raise TypeError(f"persistence must have callable {method}() method")

        if on_submit is not None and not callable(on_submit):
            raise TypeError("on_submit must be callable")

        if on_exit is not None and not callable(on_exit):
            raise TypeError("on_exit must be callable")

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def current_step(self) -> Step:
        return self.form.steps[self.state.step_index]

    @property
    def is_last_step(self) -> bool:
        return self.state.step_index == self.form.last_index

    @property
    def has_unsaved_changes(self) -> bool:
        """Whether any answer on the active step differs from the last save."""
        return any(
            self.state.answers.get(q.id) != self._saved_answers.get(q.id)
            for q in self.current_step.questions
        )

    def view(self) -> StepView:
        """Presentation view of the active step, rebuilt on every call."""
        return build_step_view(self.form, self.state, unsaved_changes=self.has_unsaved_changes)

    def handle(self, command: Command) -> HandleResult:
        """
        Apply one command.

        Args:
            command: Any command from formwizard.commands

        Returns:
            TransitionResult if the command was legal in the current state,
            IllegalCommand otherwise (state unchanged)

        Raises:
            TypeError: If command is not a known command type
        """
        handlers = {
            Edit: self._handle_edit,
            RequestNext: self._handle_next,
            RequestPrev: self._handle_prev,
            RequestJump: self._handle_jump,
            RequestSaveAndExit: self._handle_save_and_exit,
            ConfirmProceedWithoutSaving: self._handle_proceed_without_saving,
            ConfirmSaveAndProceed: self._handle_save_and_proceed,
            DismissConfirmation: self._handle_dismiss,
            Submit: self._handle_submit,
        }

        handler = handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command type: {type(command).__name__}")

        result = handler(command)

        if isinstance(result, IllegalCommand):
            logger.warning(f"Rejected {result.command_type}: {result.reason}")
        return result

    # =========================================================================
    # Command handlers
    # =========================================================================

    def _handle_edit(self, command: Edit) -> HandleResult:
        if self.state.confirmation_open:
            return self._illegal(command, "Confirmation is open")

        question = self.form.find_question(command.question_id)
        if question is None:
            return self._illegal(command, f"Unknown question '{command.question_id}'")

        step = self.current_step
        if question not in step.questions:
            return self._illegal(command, f"Question '{question.id}' is not on the active step")

        try:
            self.state.answers.set(question.id, command.raw_value)
        except ValueError as e:
            return self._illegal(command, str(e))

        # The edited field may have hidden questions; their errors no longer apply
        self.state.field_errors = {
            q.id: self.state.field_errors[q.id]
            for q in step.questions
            if q.id in self.state.field_errors
            and q.id != question.id
            and is_visible(q, self.state.answers)
        }

        self._write_answers()
        return self._result(command)

    def _handle_next(self, command: RequestNext) -> HandleResult:
        if self.state.confirmation_open:
            return self._illegal(command, "Confirmation is open")
        if self.is_last_step:
            return self._illegal(command, "Already on the last step")

        errors = validate_step(self.current_step, self.state.answers)
        if errors:
            self.state.field_errors = errors
            logger.info(f"Step {self.state.step_index} blocked by {len(errors)} required field(s)")
            return self._result(command)

        return self._move_to(command, self.state.step_index + 1)

    def _handle_prev(self, command: RequestPrev) -> HandleResult:
        if self.state.confirmation_open:
            return self._illegal(command, "Confirmation is open")
        if self.state.step_index == 0:
            return self._illegal(command, "Already on the first step")

        return self._move_to(command, self.state.step_index - 1)

    def _handle_jump(self, command: RequestJump) -> HandleResult:
        if self.state.confirmation_open:
            return self._illegal(command, "Confirmation is open")

        target = command.target
        if isinstance(target, bool) or not isinstance(target, int) \
                or not 0 <= target < self.form.step_count:
            return self._illegal(command, f"Step {target} out of range")
        if target == self.state.step_index:
            return self._illegal(command, f"Step {target} is already active")

        errors = validate_step(self.current_step, self.state.answers)
        if not errors:
            return self._move_to(command, target)

        self.state.field_errors = errors
        self.state.pending_step_index = target
        self.state.confirmation_open = True
        logger.info(f"Jump {self.state.step_index} -> {target} needs confirmation")
        return self._result(command)

    def _handle_save_and_exit(self, command: RequestSaveAndExit) -> HandleResult:
        if self.state.confirmation_open:
            return self._illegal(command, "Confirmation is open")

        if all_visible_answered(self.current_step, self.state.answers):
            self._save()
            self._exit()
            return self._result(command, exited=True)

        self.state.pending_step_index = None
        self.state.confirmation_open = True
        logger.info(f"Save and exit on incomplete step {self.state.step_index} needs confirmation")
        return self._result(command)

    def _handle_proceed_without_saving(self, command: ConfirmProceedWithoutSaving) -> HandleResult:
        if not self.state.confirmation_open:
            return self._illegal(command, "No confirmation is open")

        for question in self.current_step.questions:
            self.state.answers.set(question.id, self._saved_answers.get(question.id))
        self._write_answers()
        logger.info(f"Discarded unsaved edits on step {self.state.step_index}")

        return self._resolve_pending(command)

    def _handle_save_and_proceed(self, command: ConfirmSaveAndProceed) -> HandleResult:
        if not self.state.confirmation_open:
            return self._illegal(command, "No confirmation is open")

        self._save()
        return self._resolve_pending(command)

    def _handle_dismiss(self, command: DismissConfirmation) -> HandleResult:
        if not self.state.confirmation_open:
            return self._illegal(command, "No confirmation is open")

        self.state.confirmation_open = False
        self.state.pending_step_index = None
        return self._result(command)

    def _handle_submit(self, command: Submit) -> HandleResult:
        if self.state.confirmation_open:
            return self._illegal(command, "Confirmation is open")
        if not self.is_last_step:
            return self._illegal(command, "Submit is only available on the last step")

        errors = validate_step(self.current_step, self.state.answers)
        if errors:
            self.state.field_errors = errors
            logger.info(f"Submission blocked by {len(errors)} required field(s)")
            return self._result(command)

        event = SubmissionEvent(
            wizard_id=self.wizard_id,
            form_title=self.form.title,
            answers=self.state.answers.snapshot(),
            submitted_at=datetime.now(timezone.utc).isoformat(),
        )

        self._clear_persisted()

        if self.on_submit is not None:
            try:
                self.on_submit(event)
            except Exception as e:
                logger.error(f"Submission collaborator failed: {e}")

        self.state = WizardState()
        self._saved_answers = AnswerStore()
        logger.info(f"Wizard {self.wizard_id} submitted {len(event.answers)} answers")

        return self._result(command, moved=True, submission=event)

    # =========================================================================
    # Transition helpers
    # =========================================================================

    def _move_to(self, command: Command, target: int) -> TransitionResult:
        """Commit a step change: index, errors and confirmation all reset together."""
        old_index = self.state.step_index

        self.state.step_index = target
        self.state.field_errors = {}
        self.state.pending_step_index = None
        self.state.confirmation_open = False
        self._saved_answers = self.state.answers.copy()

        self._write_step_index()
        logger.info(f"Navigation: step {old_index} -> {target}")
        return self._result(command, moved=True)

    def _resolve_pending(self, command: Command) -> TransitionResult:
        """Leave ConfirmPending towards its target, or exit when there is none."""
        target = self.state.pending_step_index
        self.state.confirmation_open = False
        self.state.pending_step_index = None

        if target is None:
            self._exit()
            return self._result(command, exited=True)

        return self._move_to(command, target)

    def _save(self):
        self._write_answers()
        self._write_step_index()
        self._saved_answers = self.state.answers.copy()

    def _exit(self):
        logger.info(f"Wizard {self.wizard_id} exiting on step {self.state.step_index}")
        if self.on_exit is None:
            return
        try:
            self.on_exit()
        except Exception as e:
            logger.error(f"Exit action failed: {e}")

    def _result(self, command: Command, moved: bool = False, exited: bool = False,
                submission: Optional[SubmissionEvent] = None) -> TransitionResult:
        return TransitionResult(
            command_type=type(command).__name__,
            step_index=self.state.step_index,
            moved=moved,
            field_errors=dict(self.state.field_errors),
            confirmation_open=self.state.confirmation_open,
            pending_step_index=self.state.pending_step_index,
            exited=exited,
            submission=submission,
        )

    @staticmethod
    def _illegal(command: Command, reason: str) -> IllegalCommand:
        return IllegalCommand(reason=reason, command_type=type(command).__name__)

    # =========================================================================
    # Persistence (best effort)
    # =========================================================================

    def _restore_state(self, initial_data: Optional[Dict[str, Any]]) -> WizardState:
        """
        Build the starting state from the persisted draft.

        Each key is recovered independently: unreadable or malformed
        answers fall back to initial_data, an unreadable or out-of-range
        step index falls back to 0.
        """
        answers = None
        try:
            raw_answers = self.persistence.read_answers()
        except Exception as e:
            logger.warning(f"Could not read answer draft: {e}")
            raw_answers = None

        if raw_answers is not None:
            try:
                answers = AnswerStore.deserialize(raw_answers)
                logger.info(f"Resumed {len(answers)} answers from draft")
            except ValueError as e:
                logger.warning(f"Ignoring malformed answer draft: {e}")

        if answers is None:
            answers = AnswerStore(initial_data)

        step_index = 0
        try:
            raw_step = self.persistence.read_step_index()
        except Exception as e:
            logger.warning(f"Could not read step index: {e}")
            raw_step = None

        if raw_step is not None:
            try:
                parsed = int(str(raw_step).strip())
            except ValueError:
                logger.warning(f"Ignoring malformed step index: {raw_step!r}")
            else:
                if 0 <= parsed < self.form.step_count:
                    step_index = parsed
                else:
                    logger.warning(f"Ignoring out-of-range step index: {parsed}")

        return WizardState(step_index=step_index, answers=answers)

    def _write_answers(self):
        try:
            self.persistence.write_answers(self.state.answers.serialize())
        except Exception as e:
            logger.error(f"Failed to write answer draft: {e}")

    def _write_step_index(self):
        try:
            self.persistence.write_step_index(str(self.state.step_index))
        except Exception as e:
            logger.error(f"Failed to write step index: {e}")

    def _clear_persisted(self):
        try:
            self.persistence.clear_answers()
        except Exception as e:
            logger.error(f"Failed to clear answer draft: {e}")
        try:
            self.persistence.clear_step_index()
        except Exception as e:
            logger.error(f"Failed to clear step index: {e}")
