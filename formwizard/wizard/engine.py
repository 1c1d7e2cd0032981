"""Step sequencing and persistence for multi-step form wizards."""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Mapping, Protocol

from formwizard.config import STEP_QUERY_PARAM
from formwizard.core.errors import NoCurrentStepError, NoStepDefinedError, UnknownStepError
from formwizard.state.storage import WizardStorage
from formwizard.utils.logging_context import log_context
from formwizard.wizard.forms import Form, FormEngine
from formwizard.wizard.request import WizardRequest
from formwizard.wizard.step import StepDeclaration, WizardStep

__all__ = ["Wizard", "WizardDefinition", "wizard_name_for"]

logger = logging.getLogger(__name__)


class WizardDefinition(Protocol):
    """Declares the ordered steps of a concrete wizard."""

    def declare_steps(self) -> Iterable[StepDeclaration[Any]]: ...


def wizard_name_for(definition: object) -> str:
    """Return the stable storage key for ``definition``'s type."""

    definition_type = type(definition)
    return f"{definition_type.__module__}.{definition_type.__qualname__}"


class Wizard:
    """Drive a definition's steps through build, bind, persist and advance.

    Call :meth:`init` once before anything that touches the steps. A request
    cycle then looks like::

        wizard.init()
        wizard.load_step_data("address", Address())
        form = wizard.handle_request(request)
        if form.is_valid():
            wizard.next_step()
    """

    def __init__(
        self,
        definition: WizardDefinition,
        form_engine: FormEngine,
        storage: WizardStorage,
        *,
        name: str | None = None,
    ) -> None:
        self.definition = definition
        self.form_engine = form_engine
        self.storage = storage
        self.name = name or wizard_name_for(definition)
        self.current_step: str | None = None
        self.request: WizardRequest | None = None
        self._steps: dict[str, WizardStep[Any]] = {}

    def init(self) -> None:
        """Add the definition's steps; each step gets its own copy of the declared data."""

        for declaration in self.definition.declare_steps():
            self.add_step(
                declaration.name,
                declaration.type,
                dict(declaration.options),
                data=copy.deepcopy(declaration.data),
            )

    def add_step(
        self,
        name: str,
        form_type: Any,
        options: Mapping[str, Any] | None = None,
        *,
        data: Any = None,
    ) -> WizardStep[Any]:
        step: WizardStep[Any] = WizardStep(form_type, dict(options or {}), data)
        self._steps[name] = step
        return step

    def get_steps(self) -> dict[str, WizardStep[Any]]:
        return dict(self._steps)

    def get_first_step(self) -> str | None:
        return next(iter(self._steps), None)

    def get_current_step(self) -> str:
        """Return the active step, defaulting to the first declared one."""

        if self.current_step is None:
            self.current_step = self.get_first_step()
        if self.current_step is None:
            raise NoStepDefinedError("No step is defined.", wizard=self.name)
        return self.current_step

    def get_step(self, name: str) -> WizardStep[Any]:
        try:
            return self._steps[name]
        except KeyError:
            raise UnknownStepError(f'The step "{name}" does not exist.', wizard=self.name, step=name) from None

    def set_step_data(self, name: str, data: Any) -> None:
        self.get_step(name).data = data

    def load_step_data(self, name: str, model: Any) -> None:
        """Populate ``model`` from storage and make it the step's data."""

        self.storage.load_step(self.name, name, model)
        self.set_step_data(name, model)

    def create_form(self) -> Form:
        return self.create_form_for_step(self.get_current_step())

    def create_form_for_step(self, name: str) -> Form:
        step = self.get_step(name)
        options: dict[str, Any] = {"action": f"?{STEP_QUERY_PARAM}={name}"}
        options.update(step.options)
        return self.form_engine.build(step.type, step.data, options)

    def handle_request(self, request: WizardRequest) -> Form:
        """Bind ``request`` to the current step's form and persist valid submissions.

        A ``step`` query parameter selects the step first. The step's data is
        replaced by the bound form data even when the submission is invalid;
        storage is only written for valid submissions.
        """

        query_step = request.query.get(STEP_QUERY_PARAM)
        if query_step is not None:
            if query_step not in self._steps:
                logger.warning("Wizard %s received unknown step %r.", self.name, query_step)
                raise UnknownStepError(
                    f'The step "{query_step}" does not exist.',
                    wizard=self.name,
                    step=query_step,
                )
            self.current_step = query_step

        if self.current_step is None:
            self.current_step = self.get_first_step()
        if self.current_step is None:
            raise NoCurrentStepError("No current step set.", wizard=self.name)

        self.request = request
        step_name = self.current_step
        with log_context(wizard=self.name, wizard_step=step_name):
            form = self.create_form_for_step(step_name)
            form.bind(request)
            self._steps[step_name].data = form.get_data()

            if request.is_submission and form.is_submitted() and form.is_valid():
                self.save()
                logger.info("Saved wizard %s after valid submission of step %s.", self.name, step_name)
            elif form.is_submitted():
                logger.debug("Step %s submitted without passing validation.", step_name)
        return form

    def save(self) -> None:
        """Write every step holding data to storage, replacing earlier state."""

        data = {name: step.data for name, step in self._steps.items() if step.data is not None}
        self.storage.set(self.name, data)

    def next_step(self) -> bool:
        current = self.get_current_step()
        names = list(self._steps)
        if current not in names:
            return False
        index = names.index(current) + 1
        if index < len(names):
            self.current_step = names[index]
            return True
        return False

    def clear(self) -> None:
        """Remove this wizard's persisted data; other wizards are untouched."""

        self.storage.remove(self.name)

    def reset(self) -> None:
        self.current_step = None
        self.request = None
        self._steps = {}
