"""Persistence helpers for wizard step data."""

from .storage import (
    InMemoryWizardStorage,
    SessionWizardStorage,
    WizardStorage,
    create_storage,
    serialize_model,
)

__all__ = [
    "InMemoryWizardStorage",
    "SessionWizardStorage",
    "WizardStorage",
    "create_storage",
    "serialize_model",
]
