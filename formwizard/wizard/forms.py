"""Form engine contract and a pydantic-backed implementation.

The wizard only talks to :class:`FormEngine` and :class:`Form`. The bundled
:class:`ModelFormEngine` builds a :class:`ModelForm` from a :class:`FormType`
subclass, which names the pydantic model it edits and the key under which the
request carries its submitted fields::

    class AddressType(FormType):
        name = "address"
        model = Address

A request with ``form={"address": {"city": "Berlin"}}`` then binds onto the
step's ``Address`` instance.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Mapping, Protocol

from pydantic import BaseModel, TypeAdapter, ValidationError

from formwizard.wizard.request import WizardRequest

__all__ = [
    "Form",
    "FormEngine",
    "FormType",
    "ModelForm",
    "ModelFormEngine",
]

logger = logging.getLogger(__name__)

FormErrors = dict[str, list[str]]


class Form(Protocol):
    errors: FormErrors

    def bind(self, request: WizardRequest) -> None: ...

    def is_submitted(self) -> bool: ...

    def is_valid(self) -> bool: ...

    def is_synchronized(self) -> bool: ...

    def get_data(self) -> Any: ...


class FormEngine(Protocol):
    def build(self, form_type: Any, data: Any, options: Mapping[str, Any]) -> Form: ...


class FormType:
    """Declarative form definition bound to a pydantic model."""

    name: ClassVar[str]
    model: ClassVar[type[BaseModel]]


def _is_transformation_error(error_type: str) -> bool:
    return error_type.endswith("_parsing") or error_type.endswith("_type")


def _error_path(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc)


class ModelForm:
    """Form that validates submitted values against a pydantic model."""

    def __init__(self, form_type: type[FormType], data: BaseModel | None, options: Mapping[str, Any]) -> None:
        if data is not None and not isinstance(data, form_type.model):
            raise TypeError(
                f"Form {form_type.name!r} expects {form_type.model.__qualname__} data, "
                f"got {type(data).__qualname__}."
            )
        self.form_type = form_type
        self.options: dict[str, Any] = dict(options)
        self.errors: FormErrors = {}
        self._data = data
        self._submitted = False
        self._synchronized = True

    @property
    def name(self) -> str:
        return self.form_type.name

    @property
    def action(self) -> str | None:
        return self.options.get("action")

    @property
    def method(self) -> str:
        return str(self.options.get("method", "POST")).upper()

    def bind(self, request: WizardRequest) -> None:
        """Submit the request payload for this form, if present."""

        self.errors = {}
        self._synchronized = True
        self._submitted = False
        if request.method.upper() != self.method:
            return
        payload = request.form.get(self.name)
        if payload is None:
            return
        self._submitted = True
        if not isinstance(payload, Mapping):
            self._synchronized = False
            self.errors = {"": ["Expected a mapping of field values."]}
            return

        model_type = self.form_type.model
        fields = model_type.model_fields
        extra = sorted(key for key in payload if key not in fields)
        if extra and not self.options.get("allow_extra_fields", False):
            self.errors[""] = [f"This form should not contain extra fields: {', '.join(extra)}."]

        current: dict[str, Any] = self._data.model_dump() if self._data is not None else {}
        submitted: dict[str, Any] = {}
        for key, value in payload.items():
            if key in fields:
                # Blank inputs clear the field.
                submitted[key] = None if value == "" else value

        try:
            validated = model_type.model_validate({**current, **submitted}, by_name=True)
        except ValidationError as exc:
            rejected, unconvertible = self._record_errors(exc)
            logger.debug("Form %s rejected submission: %s", self.name, self.errors)
            self._bind_partial(submitted, current, rejected, unconvertible)
            return

        if self._data is None:
            self._data = validated
            return
        for field_name in fields:
            setattr(self._data, field_name, getattr(validated, field_name))

    def _record_errors(self, exc: ValidationError) -> tuple[set[str], set[str]]:
        """Collect error messages; return rejected and unconvertible field names."""

        fields = self.form_type.model.model_fields
        names_by_alias = {info.alias: name for name, info in fields.items() if info.alias}
        rejected: set[str] = set()
        unconvertible: set[str] = set()
        for error in exc.errors():
            loc = error["loc"]
            self.errors.setdefault(_error_path(loc), []).append(error["msg"])
            field_name = names_by_alias.get(loc[0], loc[0]) if loc else None
            if field_name is not None:
                rejected.add(field_name)
            if _is_transformation_error(error["type"]):
                self._synchronized = False
                if field_name is not None:
                    unconvertible.add(field_name)
        return rejected, unconvertible

    def _bind_partial(
        self,
        submitted: Mapping[str, Any],
        current: Mapping[str, Any],
        rejected: set[str],
        unconvertible: set[str],
    ) -> None:
        """Map every convertible submitted value onto the data of an invalid form.

        Fields that failed only a constraint still receive their converted value;
        fields that could not be converted keep their previous value.
        """

        if self._data is None:
            return
        model_type = self.form_type.model
        fields = model_type.model_fields
        accepted = {key: value for key, value in submitted.items() if key not in rejected}
        try:
            validated = model_type.model_validate({**current, **accepted}, by_name=True)
        except ValidationError:
            return

        values = {name: getattr(validated, name) for name in accepted}
        for name in rejected - unconvertible:
            if name not in submitted:
                continue
            try:
                values[name] = TypeAdapter(fields[name].annotation).validate_python(submitted[name])
            except ValidationError:
                continue
        for name, value in values.items():
            setattr(self._data, name, value)

    def is_submitted(self) -> bool:
        return self._submitted

    def is_synchronized(self) -> bool:
        return self._synchronized

    def is_valid(self) -> bool:
        return self._submitted and not self.errors

    def get_data(self) -> BaseModel | None:
        return self._data


class ModelFormEngine:
    """Build :class:`ModelForm` instances from :class:`FormType` subclasses."""

    def build(self, form_type: type[FormType], data: BaseModel | None, options: Mapping[str, Any]) -> ModelForm:
        if not (isinstance(form_type, type) and issubclass(form_type, FormType)):
            raise TypeError(f"Unsupported form type: {form_type!r}")
        return ModelForm(form_type, data, options)
