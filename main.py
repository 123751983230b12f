"""
Console Harness for the Questionnaire Wizard

Terminal presentation adapter: renders the active step, turns typed
commands into controller commands, and asks the unsaved-changes
question when the controller opens the confirmation.

Usage:
    python main.py [form_path] [draft_dir]
"""

import logging
import sys
from pathlib import Path

from formwizard.commands import (
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
from formwizard.contracts import FileRef
from formwizard.core.form_definition import load_form_config
from formwizard.core.navigation_controller import WizardController
from formwizard.core.submission_writer import SubmissionWriter
from formwizard.persistence import JsonFilePersistence
from formwizard.results import IllegalCommand
from formwizard.utils.display_helpers import format_step

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"quit", "exit", "stop"}

CONFIRMATION_PROMPT = (
    "You have unsaved changes. If you leave now, those changes will be lost.\n"
    "  [p] Proceed without saving   [s] Save and proceed   [c] Cancel\n"
    "> "
)


def print_separator(char="=", length=60, output_fn=print):
    """Print a separator line"""
    output_fn(char * length)


def parse_command(line):
    """
    Turn one typed line into a controller command.

    Returns:
        Command, the string 'quit', or None if the line is not understood
    """
    parts = line.strip().split(maxsplit=2)
    if not parts:
        return None

    verb = parts[0].lower()

    if verb in EXIT_COMMANDS:
        return 'quit'
    if verb == 'next':
        return RequestNext()
    if verb in ('back', 'prev'):
        return RequestPrev()
    if verb == 'save':
        return RequestSaveAndExit()
    if verb == 'submit':
        return Submit()

    if verb == 'jump' and len(parts) == 2:
        try:
            # Menu numbers are 1-based
            return RequestJump(target=int(parts[1]) - 1)
        except ValueError:
            return None

    if verb == 'set' and len(parts) >= 2:
        value = parts[2] if len(parts) == 3 else ''
        return Edit(question_id=parts[1], raw_value=value)

    if verb == 'clear' and len(parts) == 2:
        return Edit(question_id=parts[1], raw_value=None)

    if verb == 'file' and len(parts) == 3:
        path = Path(parts[2]).expanduser()
        return Edit(question_id=parts[1], raw_value=FileRef(filename=path.name, handle=path))

    return None


def ask_confirmation(input_fn=input):
    """Map the confirmation answer to its command (cancel by default)"""
    answer = input_fn(CONFIRMATION_PROMPT).strip().lower()
    if answer == 'p':
        return ConfirmProceedWithoutSaving()
    if answer == 's':
        return ConfirmSaveAndProceed()
    return DismissConfirmation()


def run_console(controller, input_fn=input, output_fn=print):
    """
    Drive a controller from the terminal until exit, submit or quit.

    Returns:
        str: 'submitted', 'exited' or 'quit'
    """
    while True:
        output_fn("")
        output_fn(format_step(controller.view()))

        try:
            line = input_fn("> ")
        except EOFError:
            return 'quit'

        command = parse_command(line)
        if command == 'quit':
            return 'quit'
        if command is None:
            output_fn("Unrecognized command.")
            continue

        result = controller.handle(command)

        while not isinstance(result, IllegalCommand) and result.confirmation_open:
            result = controller.handle(ask_confirmation(input_fn))

        if isinstance(result, IllegalCommand):
            output_fn(f"Not possible: {result.reason}")
            continue

        if result.field_errors:
            output_fn(f"Please complete {len(result.field_errors)} required field(s).")

        if result.exited:
            output_fn("Progress saved!")
            return 'exited'

        if result.submission is not None:
            output_fn("Form submitted successfully!")
            return 'submitted'


def main():
    """Run console wizard"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    form_path = sys.argv[1] if len(sys.argv) > 1 else "data/health_assessment_form.json"
    draft_dir = sys.argv[2] if len(sys.argv) > 2 else "outputs/drafts"

    try:
        form = load_form_config(form_path)
        controller = WizardController(
            form=form,
            persistence=JsonFilePersistence(base_dir=draft_dir),
            on_submit=SubmissionWriter("outputs/submissions"),
        )
    except Exception as e:
        print(f"\nFailed to initialize: {e}")
        import traceback
        traceback.print_exc()
        return 1

    print_separator()
    print(form.title.upper())
    print_separator()
    print("Type 'quit', 'exit', or 'stop' to leave; your draft is kept.\n")

    try:
        outcome = run_console(controller)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user (Ctrl+C)")
        outcome = 'quit'

    print_separator()
    print(f"Session ended: {outcome}")
    print_separator()
    return 0


if __name__ == '__main__':
    sys.exit(main())
