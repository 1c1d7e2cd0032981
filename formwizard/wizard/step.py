"""Step value types held by a wizard."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, TypeVar

M = TypeVar("M")


@dataclass
class WizardStep(Generic[M]):
    """Form type, options and current model of a single wizard step."""

    type: Any
    options: dict[str, Any] = field(default_factory=dict)
    data: M | None = None


@dataclass(frozen=True)
class StepDeclaration(Generic[M]):
    """Immutable step declaration returned by ``declare_steps``."""

    name: str
    type: Any
    options: Mapping[str, Any] = field(default_factory=dict)
    data: M | None = None
