"""Multi-step form wizards with pluggable step storage."""

from __future__ import annotations

from formwizard.core.errors import (
    DeserializationError,
    NoCurrentStepError,
    NoStepDefinedError,
    SerializationError,
    UnknownStepError,
    WizardError,
    WizardStorageError,
)
from formwizard.state import InMemoryWizardStorage, SessionWizardStorage, WizardStorage, create_storage
from formwizard.wizard import (
    FormType,
    ModelFormEngine,
    StepDeclaration,
    Wizard,
    WizardRequest,
    WizardStep,
)

__all__ = [
    "DeserializationError",
    "FormType",
    "InMemoryWizardStorage",
    "ModelFormEngine",
    "NoCurrentStepError",
    "NoStepDefinedError",
    "SerializationError",
    "SessionWizardStorage",
    "StepDeclaration",
    "UnknownStepError",
    "Wizard",
    "WizardError",
    "WizardRequest",
    "WizardStep",
    "WizardStorage",
    "WizardStorageError",
    "create_storage",
]
