"""Exception hierarchy for wizard navigation and step persistence."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class WizardError(Exception):
    """Base exception for wizard failures."""

    message: str
    wizard: str | None = None
    step: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass
class UnknownStepError(WizardError, KeyError):
    """Raised when a step name is not declared by the wizard."""


@dataclass
class NoStepDefinedError(WizardError, LookupError):
    """Raised when a wizard without any declared steps needs a current step."""


@dataclass
class NoCurrentStepError(NoStepDefinedError):
    """Raised when a request cannot be routed to any step."""


@dataclass
class WizardStorageError(WizardError):
    """Base exception for storage backends."""


@dataclass
class SerializationError(WizardStorageError):
    """Raised when a step model cannot be dumped to JSON."""


@dataclass
class DeserializationError(WizardStorageError):
    """Raised when stored JSON does not fit the target step model."""

    raw: str | None = None
