"""
Form Definition - Load and check the static questionnaire document

Responsibilities:
- Read the form JSON from disk (or accept an already-parsed dict)
- Validate structure once, at startup (fail fast)
- Build the immutable FormConfig / Step / Question contracts

Expected document shape:
    {
        "title": "Health assessment",
        "steps": [
            {
                "id": "lifestyle",
                "title": "Lifestyle",
                "icon": "fa-solid fa-person-running",
                "description": "<p>About your habits</p>",
                "questions": [
                    {"id": "hours", "label": "...", "type": "select",
                     "options": ["0-2", "3-5", "6+"], "required": true},
                    {"id": "detail", "label": "...", "type": "text",
                     "conditional": {"field": "hours", "value": ["6+"]}}
                ]
            }
        ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from formwizard.contracts import (
    CHOICE_TYPES,
    LAYOUTS,
    QUESTION_TYPES,
    Conditional,
    FormConfig,
    Question,
    Step,
)
from formwizard.core.answer_store import stringify

logger = logging.getLogger(__name__)


def load_form_config(form_path: str) -> FormConfig:
    """
    Load a form definition from a JSON file.

    Args:
        form_path: Path to the form JSON

    Returns:
        FormConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the document fails validation
    """
    path = Path(form_path)
    if not path.exists():
        raise FileNotFoundError(f"Form definition not found: {form_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    form = form_config_from_dict(data)
    logger.info(f"Form '{form.title}' loaded from {path} with {form.step_count} steps")
    return form


def form_config_from_dict(data: Dict[str, Any]) -> FormConfig:
    """
    Validate a parsed form document and build the FormConfig.

    Raises:
        ValueError: If validation fails (all problems reported at once)
    """
    errors = validate_form_document(data)
    if errors:
        error_msg = "Form definition validation failed:\n  - " + "\n  - ".join(errors)
        raise ValueError(error_msg)

    return FormConfig(
        title=str(data.get('title', '')),
        steps=tuple(_build_step(step) for step in data['steps']),
    )


def validate_form_document(data: Any) -> List[str]:
    """
    Check a parsed form document.

    Checks:
    - Top level is an object with a non-empty 'steps' list
    - Every step and question has an 'id'
    - Question ids are unique across the whole form
    - Question types are known; radio/select questions have options
    - Layout, when given, is known
    - Conditionals reference an existing question and list accepted values

    Returns:
        list[str]: Problems found (empty when valid)
    """
    errors = []

    if not isinstance(data, dict):
        return [f"Form definition must be an object, got {type(data).__name__}"]

    steps = data.get('steps')
    if not isinstance(steps, list) or not steps:
        return ["Missing or empty 'steps' in form definition"]

    all_question_ids = set()
    step_ids = set()
    conditionals = []

    for step_index, step in enumerate(steps):
        if not isinstance(step, dict) or 'id' not in step:
            errors.append(f"Step at index {step_index} missing 'id'")
            continue

        step_id = step['id']
        if step_id in step_ids:
            errors.append(f"Duplicate step id '{step_id}'")
        step_ids.add(step_id)

        questions = step.get('questions', [])
        if not isinstance(questions, list):
            errors.append(f"Step '{step_id}' questions must be a list")
            continue

        for i, question in enumerate(questions):
            if not isinstance(question, dict) or 'id' not in question:
                errors.append(f"Question at index {i} in step '{step_id}' missing 'id'")
                continue

            q_id = question['id']
            if q_id in all_question_ids:
                errors.append(f"Duplicate question id '{q_id}'")
            all_question_ids.add(q_id)

            q_type = question.get('type', 'text')
            if q_type not in QUESTION_TYPES:
                errors.append(f"Question '{q_id}' has unknown type '{q_type}'")

            if q_type in CHOICE_TYPES and not question.get('options'):
                errors.append(f"Question '{q_id}' of type '{q_type}' has no options")

            layout = question.get('layout')
            if layout is not None and layout not in LAYOUTS:
                errors.append(f"Question '{q_id}' has unknown layout '{layout}'")

            if question.get('conditional') is not None:
                conditionals.append((q_id, question['conditional']))

    # Conditionals may point forward or backward, so check after collecting ids
    for q_id, conditional in conditionals:
        if not isinstance(conditional, dict) or 'field' not in conditional:
            errors.append(f"Question '{q_id}' conditional missing 'field'")
            continue
        if conditional['field'] not in all_question_ids:
            errors.append(
                f"Question '{q_id}' conditional references undefined question "
                f"'{conditional['field']}'"
            )
        if 'value' not in conditional:
            errors.append(f"Question '{q_id}' conditional missing 'value'")

    return errors


def _build_question(data: Dict[str, Any]) -> Question:
    conditional = None
    if data.get('conditional') is not None:
        raw_values = data['conditional']['value']
        if not isinstance(raw_values, list):
            raw_values = [raw_values]
        conditional = Conditional(
            field=str(data['conditional']['field']),
            value=tuple(stringify(v) or '' for v in raw_values),
        )

    options = data.get('options')
    return Question(
        id=str(data['id']),
        label=str(data.get('label', '')),
        type=data.get('type', 'text'),
        description=data.get('description'),
        options=tuple(str(opt) for opt in options) if options else None,
        layout=data.get('layout') or 'default',
        required=bool(data.get('required', False)),
        placeholder=data.get('placeholder'),
        conditional=conditional,
    )


def _build_step(data: Dict[str, Any]) -> Step:
    return Step(
        id=str(data['id']),
        title=str(data.get('title', '')),
        icon=str(data.get('icon', '')),
        description=str(data.get('description') or ''),
        questions=tuple(_build_question(q) for q in data.get('questions', [])),
    )
