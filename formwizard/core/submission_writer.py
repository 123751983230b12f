"""
Submission Writer - Default submission collaborator

Writes each SubmissionEvent to its own timestamped JSON file. Network
delivery of submissions is out of scope; this gives the Flask app and
the console harness a durable record of what was submitted.

Design principles:
- Pure serialization (no validation, the controller already validated)
- File answers are recorded by filename only
- One file per submission, never overwritten
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from formwizard.contracts import FileRef
from formwizard.results import SubmissionEvent

logger = logging.getLogger(__name__)


class SubmissionWriter:
    """Callable collaborator: pass an instance as WizardController(on_submit=...)"""

    def __init__(self, output_dir: str = "outputs/submissions"):
        """
        Args:
            output_dir: Directory for submission files
        """
        self.output_dir = Path(output_dir)
        self.last_path = None
        logger.info(f"SubmissionWriter initialized: {self.output_dir}")

    def __call__(self, event: SubmissionEvent) -> str:
        return self.save(event)

    @staticmethod
    def format_event(event: SubmissionEvent) -> Dict[str, Any]:
        """
        Transform a SubmissionEvent to a JSON-serializable dict.

        Example:
            {
                "metadata": {"wizard_id": "a3f7e2b9", "form_title": "...",
                             "submitted_at": "2026-10-19T12:00:00+00:00"},
                "answers": {"hours": "6+", "scan": {"filename": "scan.pdf"}}
            }
        """
        answers = {}
        for question_id, value in event.answers.items():
            if isinstance(value, FileRef):
                answers[question_id] = {'filename': value.filename}
            else:
                answers[question_id] = value

        return {
            'metadata': {
                'wizard_id': event.wizard_id,
                'form_title': event.form_title,
                'submitted_at': event.submitted_at,
            },
            'answers': answers,
        }

    def _next_path(self, event: SubmissionEvent) -> Path:
        """
        submission_<YYYYMMDD_HHMMSS>_<wizard_id>.json, suffixed _2, _3, ...
        when the same session submits twice within one second.
        """
        stem = f"submission_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{event.wizard_id}"
        path = self.output_dir / f"{stem}.json"
        counter = 2
        while path.exists():
            path = self.output_dir / f"{stem}_{counter}.json"
            counter += 1
        return path

    def save(self, event: SubmissionEvent) -> str:
        """
        Save a submission to a new JSON file.

        Returns:
            str: Absolute path to saved file

        Raises:
            OSError: If file cannot be written
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_file = self._next_path(event)

        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(self.format_event(event), f, indent=2, ensure_ascii=False)

        abs_path = str(output_file.absolute())
        self.last_path = abs_path
        logger.info(f"Submission saved to {abs_path}")
        return abs_path
