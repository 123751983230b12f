"""
Answer Store - Current answers of a wizard session, keyed by question id

Responsibilities:
- Store one answer per question id (single-select semantics)
- Normalize values on write (trim strings, tag file handles)
- Serialize to / deserialize from the draft string kept by persistence

Design principles:
- Dumb container: no knowledge of steps, visibility or required-ness
- Closed value set: every stored value is a TextAnswer or a FileRef;
  absence of a key is EMPTY
- File handles are session-local and never written into a draft

API Philosophy:
- Answer Store = dumb data container
- Visibility / Validation = rules over the container
- Navigation Controller = decides when changes are committed
"""

import json
import logging
from numbers import Number
from typing import Any, Dict, Optional

from formwizard.contracts import EMPTY, AnswerValue, EmptyAnswer, FileRef, TextAnswer

logger = logging.getLogger(__name__)


# =============================================================================
# Value helpers
# =============================================================================

def stringify(value: Any) -> Optional[str]:
    """
    Coerce an answer or a conditional operand to its string form.

    Booleans render as 'true'/'false' and integral floats drop the
    fractional part, so values that arrived through JSON, form posts or
    Python literals compare equal.

    Args:
        value: AnswerValue or raw scalar

    Returns:
        String form, or None for an empty answer (never matches anything)
    """
    if value is None or isinstance(value, EmptyAnswer):
        return None
    if isinstance(value, TextAnswer):
        return value.text
    if isinstance(value, FileRef):
        return value.filename
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ','.join(stringify(item) or '' for item in value)
    return str(value)


def is_empty(value: Any) -> bool:
    """
    Emptiness predicate used by validation and gating.

    Empty means: absent (None / EMPTY), a string whose trimmed form is '',
    or an empty collection. Anything else, file handles included, is present.

    Examples:
        >>> is_empty(EMPTY)
        True
        >>> is_empty(TextAnswer('  '))
        True
        >>> is_empty(FileRef('scan.pdf'))
        False
    """
    if value is None or isinstance(value, EmptyAnswer):
        return True
    if isinstance(value, TextAnswer):
        return value.text.strip() == ''
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def to_answer(raw: Any) -> AnswerValue:
    """
    Normalize a raw value reported by a presentation adapter.

    Args:
        raw: str, bool, number, sequence or set, AnswerValue, or a file
            handle (anything exposing .filename or .read)

    Returns:
        TextAnswer, FileRef, or EMPTY

    Raises:
        ValueError: For values no question type can hold (mappings,
            bytes, arbitrary objects)
    """
    if raw is None or isinstance(raw, EmptyAnswer):
        return EMPTY
    if isinstance(raw, TextAnswer):
        return TextAnswer(raw.text.strip())
    if isinstance(raw, FileRef):
        return raw
    if isinstance(raw, str):
        return TextAnswer(raw.strip())
    if isinstance(raw, (bool, Number)):
        return TextAnswer(stringify(raw))
    if isinstance(raw, (list, tuple)):
        if not raw:
            return EMPTY
        return TextAnswer(stringify(list(raw)).strip())
    if isinstance(raw, (set, frozenset)):
        if not raw:
            return EMPTY
        return TextAnswer(','.join(sorted(stringify(item) or '' for item in raw)))

    # Uploads (Werkzeug FileStorage, open file objects)
    if hasattr(raw, 'filename') or hasattr(raw, 'read'):
        filename = getattr(raw, 'filename', None) or getattr(raw, 'name', None) or 'upload'
        return FileRef(filename=str(filename), handle=raw)

    raise ValueError(f"Unsupported answer value of type {type(raw).__name__}")


# =============================================================================
# Store
# =============================================================================

class AnswerStore:
    """Holds the current answers of one wizard session"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        """
        Initialize the store, optionally from an initial-data seed.

        Args:
            initial: Mapping of question id -> raw value
        """
        self._answers: Dict[str, AnswerValue] = {}
        for question_id, raw in (initial or {}).items():
            self.set(question_id, raw)

    def get(self, question_id: str) -> AnswerValue:
        """Return the stored answer, or EMPTY if the question is unanswered."""
        return self._answers.get(question_id, EMPTY)

    def set(self, question_id: str, value: Any) -> None:
        """
        Store a normalized answer.

        Setting None or EMPTY removes the key, returning the question
        to "unanswered".
        """
        answer = to_answer(value)
        if isinstance(answer, EmptyAnswer):
            self._answers.pop(question_id, None)
        else:
            self._answers[question_id] = answer
        logger.debug(f"Answer set: {question_id} = {answer!r}")

    def clear(self) -> None:
        self._answers.clear()

    def copy(self) -> "AnswerStore":
        clone = AnswerStore()
        clone._answers = dict(self._answers)
        return clone

    def snapshot(self) -> Dict[str, Any]:
        """
        Plain-value view of the store.

        Text answers become str; file answers stay FileRef so submission
        collaborators can reach the handle.
        """
        return {
            question_id: answer.text if isinstance(answer, TextAnswer) else answer
            for question_id, answer in self._answers.items()
        }

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._answers

    def __len__(self) -> int:
        return len(self._answers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnswerStore):
            return NotImplemented
        return self._answers == other._answers

    def __repr__(self) -> str:
        return f"AnswerStore({self._answers!r})"

    # ========================
    # Draft serialization
    # ========================

    def serialize(self) -> str:
        """
        Serialize text answers to a JSON object string.

        File answers are skipped: their handles do not survive a reload.
        """
        payload = {
            question_id: answer.text
            for question_id, answer in self._answers.items()
            if isinstance(answer, TextAnswer)
        }
        return json.dumps(payload, ensure_ascii=False)

    @classmethod
    def deserialize(cls, data: str) -> "AnswerStore":
        """
        Rebuild a store from serialize() output.

        Args:
            data: JSON object string

        Returns:
            AnswerStore

        Raises:
            ValueError: If data is not a JSON object
        """
        try:
            payload = json.loads(data)
        except (TypeError, json.JSONDecodeError) as e:
            raise ValueError(f"Malformed answer draft: {e}") from e

        if not isinstance(payload, dict):
            raise ValueError(f"Answer draft must be a JSON object, got {type(payload).__name__}")

        store = cls()
        for question_id, raw in payload.items():
            if isinstance(raw, dict):
                # Serialized file objects come back as {} and carry nothing usable
                logger.warning(f"Dropping non-scalar draft value for '{question_id}'")
                continue
            store.set(str(question_id), raw)
        return store
