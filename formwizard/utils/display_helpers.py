"""
Display Helpers - Convert a StepView to human-readable console text

Used by the console harness (main.py). Only visible questions are shown.
"""

import re
from typing import Any, List

from formwizard.contracts import FileRef
from formwizard.core.step_view import QuestionView, StepView


TYPE_HINTS = {
    'text': 'free text',
    'date': 'YYYY-MM-DD',
    'file': 'path to file',
}

_TAG_RE = re.compile(r'<[^>]+>')


def strip_markup(text: str) -> str:
    """
    Drop HTML tags from a step description for terminal output.

    Examples:
        >>> strip_markup('<p>About <b>you</b></p>')
        'About you'
    """
    return _TAG_RE.sub('', text or '').strip()


def format_answer_value(value: Any) -> str:
    """
    Convert a current answer to display text.

    Args:
        value: Plain value from QuestionView.value (str, FileRef or None)

    Returns:
        Human-readable value
    """
    if value is None or value == '':
        return "Not answered"
    if isinstance(value, FileRef):
        return f"[file] {value.filename}"
    return str(value)


def format_question(question_view: QuestionView) -> List[str]:
    """Lines for one visible question: label, choices, current value, error."""
    q = question_view.question
    marker = '*' if q.required else ' '
    lines = [f"{marker} [{q.id}] {q.label}"]

    if q.description:
        lines.append(f"      {q.description}")

    if q.options:
        separator = ' | ' if q.layout == 'inline' else '\n      - '
        prefix = '      ' if q.layout == 'inline' else '      - '
        lines.append(prefix + separator.join(q.options))
    elif q.type in TYPE_HINTS:
        hint = q.placeholder or TYPE_HINTS[q.type]
        lines.append(f"      ({hint})")

    lines.append(f"      = {format_answer_value(question_view.value)}")

    if question_view.error:
        lines.append(f"      ! {question_view.error}")

    return lines


def format_step(view: StepView) -> str:
    """
    Render the whole active step.

    Includes the navigation menu (check mark for completed steps, arrow
    for the active one), the step header with progress, the description
    and every visible question.
    """
    lines = [view.form_title, ""]

    for item in view.nav_items:
        if item.active:
            mark = '>'
        elif item.completed:
            mark = '✓'
        else:
            mark = ' '
        lines.append(f" {mark} {item.index + 1}. {item.title}")

    lines.append("")
    lines.append(f"{view.step.title}    ({view.progress_label})")
    lines.append("-" * 60)

    description = strip_markup(view.step.description)
    if description:
        lines.append(description)
        lines.append("")

    for question_view in view.visible_questions:
        lines.extend(format_question(question_view))

    lines.append("-" * 60)
    actions = []
    if not view.is_first:
        actions.append("back")
    if view.is_last:
        actions.append("submit")
    elif view.next_enabled:
        actions.append("next")
    if view.save_enabled:
        actions.append("save")
    actions.extend(["jump <n>", "set <id> <value>", "quit"])
    lines.append("Commands: " + ", ".join(actions))

    return "\n".join(lines)
