"""
Draft persistence for wizard sessions.

Every backend stores two string values under keys scoped to one wizard
instance: the serialized Answer Store and the current step index.
The controller treats all of them as best-effort mirrors of its
in-memory state.

Backends:
- InMemoryPersistence: plain dict, for tests and the console harness default
- JsonFilePersistence: one JSON file per namespace on disk
- FlaskSessionPersistence: the signed Flask session cookie
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import MutableMapping, Optional, Tuple

from flask import session

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "healthAssessment"


def storage_keys(namespace: str = DEFAULT_NAMESPACE) -> Tuple[str, str]:
    """
    Keys used for one wizard instance.

    Returns:
        (answers_key, step_key), e.g. ('healthAssessmentForm', 'healthAssessmentStep')
    """
    return f"{namespace}Form", f"{namespace}Step"


class PersistenceAdapter(ABC):
    """Durable key/value storage consumed by WizardController"""

    @abstractmethod
    def read_answers(self) -> Optional[str]:
        pass

    @abstractmethod
    def write_answers(self, data: str) -> None:
        pass

    @abstractmethod
    def clear_answers(self) -> None:
        pass

    @abstractmethod
    def read_step_index(self) -> Optional[str]:
        pass

    @abstractmethod
    def write_step_index(self, data: str) -> None:
        pass

    @abstractmethod
    def clear_step_index(self) -> None:
        pass


class KeyValuePersistence(PersistenceAdapter):
    """
    Adapter over any mutable string mapping.

    Subclasses only decide where the mapping lives (see _store()).
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace
        self.answers_key, self.step_key = storage_keys(namespace)

    @abstractmethod
    def _store(self) -> MutableMapping:
        pass

    def read_answers(self) -> Optional[str]:
        return self._store().get(self.answers_key)

    def write_answers(self, data: str) -> None:
        self._store()[self.answers_key] = data

    def clear_answers(self) -> None:
        self._store().pop(self.answers_key, None)

    def read_step_index(self) -> Optional[str]:
        return self._store().get(self.step_key)

    def write_step_index(self, data: str) -> None:
        self._store()[self.step_key] = data

    def clear_step_index(self) -> None:
        self._store().pop(self.step_key, None)


class InMemoryPersistence(KeyValuePersistence):
    """Process-local storage. The backing dict may be shared between instances."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE, storage: Optional[dict] = None):
        super().__init__(namespace)
        self.storage = storage if storage is not None else {}

    def _store(self) -> MutableMapping:
        return self.storage


class FlaskSessionPersistence(KeyValuePersistence):
    """
    Stores the draft in the Flask session.

    Only usable inside a request context. Values are small strings, so
    they fit the default signed-cookie session.
    """

    def _store(self) -> MutableMapping:
        return session


class JsonFilePersistence(PersistenceAdapter):
    """
    Stores the draft as a JSON file on disk.

    Layout:
        outputs/drafts/
            healthAssessment.json   {"healthAssessmentForm": "...", "healthAssessmentStep": "2"}

    Design:
    - One file per namespace, holding both keys
    - Whole-file rewrite through a temp file + os.replace, so a crash
      never leaves half-written JSON behind
    - Restart-resilient: a new process picks up the last draft
    """

    def __init__(self, base_dir: str = "outputs/drafts", namespace: str = DEFAULT_NAMESPACE):
        """
        Initialize file persistence.

        Args:
            base_dir: Directory holding draft files
            namespace: Wizard instance namespace (file name and key prefix)
        """
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.namespace = namespace
        self.answers_key, self.step_key = storage_keys(namespace)
        self.path = self.base_dir / f"{namespace}.json"
        logger.info(f"JsonFilePersistence initialized: {self.path}")

    def _load(self) -> dict:
        """
        Read the draft file.

        Raises:
            ValueError: If the file exists but is not a JSON object
        """
        if not self.path.exists():
            return {}

        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Draft file is not a JSON object: {self.path}")
        return data

    def _save(self, data: dict) -> None:
        tmp_path = self.path.with_suffix('.json.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def _update(self, key: str, value: Optional[str]) -> None:
        try:
            data = self._load()
        except ValueError:
            logger.warning(f"Overwriting unreadable draft file: {self.path}")
            data = {}

        if value is None:
            data.pop(key, None)
        else:
            data[key] = value

        if data:
            self._save(data)
        elif self.path.exists():
            self.path.unlink()

    def read_answers(self) -> Optional[str]:
        return self._load().get(self.answers_key)

    def write_answers(self, data: str) -> None:
        self._update(self.answers_key, data)

    def clear_answers(self) -> None:
        self._update(self.answers_key, None)

    def read_step_index(self) -> Optional[str]:
        return self._load().get(self.step_key)

    def write_step_index(self, data: str) -> None:
        self._update(self.step_key, data)

    def clear_step_index(self) -> None:
        self._update(self.step_key, None)

    def draft_exists(self) -> bool:
        return self.path.exists()
