"""Minimal request shape consumed by the wizard and the form engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from formwizard.config import get_submit_methods


@dataclass(frozen=True)
class WizardRequest:
    """HTTP-like request: method, query parameters and submitted form payload."""

    method: str = "GET"
    query: Mapping[str, str] = field(default_factory=dict)
    form: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_submission(self) -> bool:
        return self.method.upper() in get_submit_methods()
