from pathlib import Path
import sys
from dataclasses import dataclass

import pytest
import streamlit as st
from pydantic import BaseModel


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from formwizard import FormType, InMemoryWizardStorage, ModelFormEngine, StepDeclaration, Wizard


@dataclass
class _SessionDict(dict[str, object]):
    """Lightweight replacement for ``st.session_state`` during tests."""

    def clear(self) -> None:  # type: ignore[override]
        super().clear()


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    session_state = _SessionDict()
    monkeypatch.setattr(st, "session_state", session_state, raising=False)
    yield


@pytest.fixture(autouse=True)
def _stub_streamlit_query_params(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(st, "query_params", {}, raising=False)
    yield


@pytest.fixture(autouse=True)
def _clear_wizard_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FORMWIZARD_STORAGE", "FORMWIZARD_LOG_LEVEL", "FORMWIZARD_SUBMIT_METHODS"):
        monkeypatch.delenv(name, raising=False)
    yield


class Address(BaseModel):
    street: str | None = None
    number: int | None = None
    zip: str | None = None
    city: str | None = None


class Person(BaseModel):
    firstname: str | None = None
    lastname: str | None = None


class AddressType(FormType):
    name = "address"
    model = Address


class PersonType(FormType):
    name = "person"
    model = Person


class MockWizard:
    def declare_steps(self) -> list[StepDeclaration]:
        return [
            StepDeclaration("address", AddressType, data=Address()),
            StepDeclaration("person", PersonType, data=Person()),
        ]


class EmptyWizard:
    def declare_steps(self) -> list[StepDeclaration]:
        return []


@pytest.fixture
def models() -> dict[str, type]:
    return {"Address": Address, "Person": Person, "AddressType": AddressType, "PersonType": PersonType}


@pytest.fixture
def storage() -> InMemoryWizardStorage:
    return InMemoryWizardStorage()


@pytest.fixture
def make_wizard(storage: InMemoryWizardStorage):
    """Return a factory building wizards that share the fixture storage."""

    def _factory(definition: object | None = None, **kwargs: object) -> Wizard:
        return Wizard(definition or MockWizard(), ModelFormEngine(), kwargs.pop("storage", storage), **kwargs)

    return _factory


@pytest.fixture
def empty_definition() -> EmptyWizard:
    return EmptyWizard()
