from __future__ import annotations

import pytest
from pydantic import BaseModel, Field

from formwizard.wizard.forms import FormType, ModelForm, ModelFormEngine
from formwizard.wizard.request import WizardRequest


class Account(BaseModel):
    username: str | None = None
    age: int | None = Field(default=None, ge=0)


class AccountType(FormType):
    name = "account"
    model = Account


def _post(payload: object) -> WizardRequest:
    return WizardRequest(method="POST", form={"account": payload})


def test_build_rejects_unknown_form_types() -> None:
    with pytest.raises(TypeError):
        ModelFormEngine().build(object, None, {})


def test_build_rejects_mismatched_data() -> None:
    class Other(BaseModel):
        pass

    with pytest.raises(TypeError):
        ModelFormEngine().build(AccountType, Other(), {})


def test_form_without_payload_is_not_submitted() -> None:
    form = ModelFormEngine().build(AccountType, Account(), {"action": "?step=account"})

    form.bind(WizardRequest(method="POST", form={"other": {}}))

    assert form.is_submitted() is False
    assert form.is_valid() is False
    assert form.action == "?step=account"


def test_form_ignores_requests_with_another_method() -> None:
    form = ModelFormEngine().build(AccountType, Account(), {"method": "put"})

    form.bind(_post({"username": "ada"}))

    assert form.is_submitted() is False


def test_valid_submission_updates_data_in_place() -> None:
    account = Account(username="old")
    form = ModelFormEngine().build(AccountType, account, {})

    form.bind(_post({"age": "42"}))

    assert form.is_valid() is True
    assert form.is_synchronized() is True
    assert form.get_data() is account
    assert account.username == "old"
    assert account.age == 42


def test_valid_submission_creates_model_without_initial_data() -> None:
    form = ModelFormEngine().build(AccountType, None, {})

    form.bind(_post({"username": "ada"}))

    assert isinstance(form.get_data(), Account)
    assert form.get_data().username == "ada"


def test_blank_values_clear_fields() -> None:
    account = Account(username="ada")
    form = ModelForm(AccountType, account, {})

    form.bind(_post({"username": ""}))

    assert form.is_valid() is True
    assert account.username is None


def test_constraint_violation_keeps_form_synchronized() -> None:
    account = Account(age=1)
    form = ModelForm(AccountType, account, {})

    form.bind(_post({"age": "-5"}))

    assert form.is_submitted() is True
    assert form.is_synchronized() is True
    assert form.is_valid() is False
    assert list(form.errors) == ["age"]
    assert account.age == -5


def test_transformation_failure_marks_form_unsynchronized() -> None:
    form = ModelForm(AccountType, Account(), {})

    form.bind(_post({"age": "many"}))

    assert form.is_synchronized() is False
    assert form.is_valid() is False


def test_non_mapping_payload_is_rejected() -> None:
    form = ModelForm(AccountType, Account(), {})

    form.bind(_post("username=ada"))

    assert form.is_submitted() is True
    assert form.is_synchronized() is False
    assert form.errors == {"": ["Expected a mapping of field values."]}


def test_extra_fields_invalidate_the_form_unless_allowed() -> None:
    account = Account()
    strict = ModelForm(AccountType, account, {})
    strict.bind(_post({"username": "ada", "role": "admin"}))

    assert strict.is_valid() is False
    assert "role" in strict.errors[""][0]
    assert account.username == "ada"

    account.username = None

    lenient = ModelForm(AccountType, account, {"allow_extra_fields": True})
    lenient.bind(_post({"username": "ada", "role": "admin"}))

    assert lenient.is_valid() is True
    assert account.username == "ada"


def test_invalid_submission_still_binds_convertible_fields() -> None:
    account = Account(username="old", age=7)
    form = ModelForm(AccountType, account, {})

    form.bind(_post({"username": "ada", "age": "many"}))

    assert form.is_valid() is False
    assert form.is_synchronized() is False
    assert list(form.errors) == ["age"]
    assert account.username == "ada"
    assert account.age == 7


def test_invalid_submission_without_initial_data_keeps_data_empty() -> None:
    form = ModelForm(AccountType, None, {})

    form.bind(_post({"username": "ada", "age": "many"}))

    assert form.is_valid() is False
    assert form.get_data() is None
