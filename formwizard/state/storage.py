"""Storage backends that persist wizard step models between requests."""

from __future__ import annotations

import dataclasses
import json
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Mapping, MutableMapping, TypeVar

import streamlit as st
from pydantic import BaseModel, PydanticSchemaGenerationError, TypeAdapter
from pydantic_core import PydanticSerializationError

from formwizard.config import StorageBackend, get_storage_backend
from formwizard.constants.keys import StateKeys
from formwizard.core.errors import DeserializationError, SerializationError

__all__ = [
    "WizardStorage",
    "InMemoryWizardStorage",
    "SessionWizardStorage",
    "create_storage",
    "serialize_model",
]

logger = logging.getLogger(__name__)

M = TypeVar("M")
StoredSteps = dict[str, str]


@lru_cache(maxsize=128)
def _adapter_for(model_type: type[Any]) -> TypeAdapter[Any]:
    return TypeAdapter(model_type)


def _drop_none(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _drop_none(item) for key, item in value.items() if item is not None}
    return value


def serialize_model(model: object) -> str:
    """Return ``model`` as JSON with ``None`` fields dropped.

    Pydantic fields are written under their aliases. Empty mappings and nested
    models without values keep their ``{}`` shape.
    """

    model_type = type(model)
    if isinstance(model, Mapping):
        model = _drop_none(model)
        model_type = dict
    try:
        payload = _adapter_for(model_type).dump_json(model, exclude_none=True, by_alias=True)
    except (PydanticSchemaGenerationError, PydanticSerializationError) as exc:
        raise SerializationError(f"Cannot serialize step model of type {model_type.__qualname__}.") from exc
    return payload.decode("utf-8")


def _stored_field_names(loaded: Any, payload: Mapping[str, Any]) -> list[str]:
    """Return the attribute names of ``loaded`` that the stored JSON provided."""

    if isinstance(loaded, BaseModel):
        return [name for name in type(loaded).model_fields if name in loaded.model_fields_set]
    if dataclasses.is_dataclass(loaded):
        return [field.name for field in dataclasses.fields(loaded) if field.name in payload]
    return [key for key in payload if hasattr(loaded, key)]


def _populate_model(model: M, raw: str) -> M:
    """Overwrite the fields of ``model`` with the values stored in ``raw``."""

    model_type = type(model)
    try:
        payload = json.loads(raw)
        loaded = _adapter_for(model_type).validate_json(raw, by_alias=True, by_name=True)
    except (PydanticSchemaGenerationError, ValueError) as exc:
        raise DeserializationError(
            f"Stored data does not fit step model {model_type.__qualname__}.",
            raw=raw,
        ) from exc
    if not isinstance(payload, Mapping):
        raise DeserializationError(
            f"Stored data for {model_type.__qualname__} is not a JSON object.",
            raw=raw,
        )

    if isinstance(model, MutableMapping):
        model.clear()
        model.update(loaded)
        return model

    for name in _stored_field_names(loaded, payload):
        setattr(model, name, getattr(loaded, name))
    return model


class WizardStorage(ABC):
    """Persist serialized step models per wizard name.

    Both bundled backends wipe every wizard on :meth:`clear`; use
    :meth:`remove` to drop a single wizard.
    """

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def has(self, wizard_name: str) -> bool: ...

    @abstractmethod
    def get(self, wizard_name: str) -> StoredSteps:
        """Return the serialized steps for ``wizard_name`` or an empty dict."""

    @abstractmethod
    def remove(self, wizard_name: str) -> None: ...

    @abstractmethod
    def _write(self, wizard_name: str, steps: StoredSteps) -> None: ...

    def set(self, wizard_name: str, steps: Mapping[str, object]) -> None:
        """Serialize ``steps`` and replace whatever was stored for ``wizard_name``."""

        serialized = {step_name: serialize_model(model) for step_name, model in steps.items()}
        self._write(wizard_name, serialized)
        logger.debug("Stored %d step(s) for wizard %s.", len(serialized), wizard_name)

    def load_step(self, wizard_name: str, step_name: str, model: M) -> M:
        """Populate ``model`` in place from the stored step data, if any."""

        raw = self.get(wizard_name).get(step_name)
        if raw is None:
            return model
        try:
            return _populate_model(model, raw)
        except DeserializationError as exc:
            exc.wizard = wizard_name
            exc.step = step_name
            raise


class InMemoryWizardStorage(WizardStorage):
    """Process-local storage, mainly for tests and single-process apps."""

    def __init__(self) -> None:
        self._data: dict[str, StoredSteps] = {}

    def clear(self) -> None:
        self._data = {}

    def has(self, wizard_name: str) -> bool:
        return wizard_name in self._data

    def get(self, wizard_name: str) -> StoredSteps:
        return dict(self._data.get(wizard_name, {}))

    def remove(self, wizard_name: str) -> None:
        self._data.pop(wizard_name, None)

    def _write(self, wizard_name: str, steps: StoredSteps) -> None:
        self._data[wizard_name] = steps


class SessionWizardStorage(WizardStorage):
    """Store wizard data inside the session under ``StateKeys.WIZARDS``.

    The session defaults to ``st.session_state``; any mutable mapping works.
    """

    def __init__(self, session_state: MutableMapping[str, Any] | None = None) -> None:
        if session_state is None:
            session_state = st.session_state
        self._session = session_state

    def _wizards(self) -> dict[str, StoredSteps]:
        wizards = self._session.get(StateKeys.WIZARDS)
        if not isinstance(wizards, Mapping):
            return {}
        return dict(wizards)

    def clear(self) -> None:
        self._session.pop(StateKeys.WIZARDS, None)

    def has(self, wizard_name: str) -> bool:
        return wizard_name in self._wizards()

    def get(self, wizard_name: str) -> StoredSteps:
        steps = self._wizards().get(wizard_name)
        if not isinstance(steps, Mapping):
            return {}
        return dict(steps)

    def remove(self, wizard_name: str) -> None:
        wizards = self._wizards()
        wizards.pop(wizard_name, None)
        self._session[StateKeys.WIZARDS] = wizards
        logger.debug("Removed stored steps for wizard %s.", wizard_name)

    def _write(self, wizard_name: str, steps: StoredSteps) -> None:
        wizards = self._wizards()
        wizards[wizard_name] = steps
        self._session[StateKeys.WIZARDS] = wizards


def create_storage(
    backend: StorageBackend | str | None = None,
    *,
    session_state: MutableMapping[str, Any] | None = None,
) -> WizardStorage:
    """Return a storage backend, defaulting to ``FORMWIZARD_STORAGE``."""

    resolved = StorageBackend(backend) if backend is not None else get_storage_backend()
    if resolved is StorageBackend.MEMORY:
        return InMemoryWizardStorage()
    return SessionWizardStorage(session_state)
