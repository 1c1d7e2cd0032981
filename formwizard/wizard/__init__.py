"""Multi-step form wizard."""

from __future__ import annotations

from .engine import Wizard, WizardDefinition, wizard_name_for
from .forms import Form, FormEngine, FormType, ModelForm, ModelFormEngine
from .request import WizardRequest
from .step import StepDeclaration, WizardStep
from .streamlit_bridge import request_from_streamlit, sync_step_query_param

__all__ = [
    "Form",
    "FormEngine",
    "FormType",
    "ModelForm",
    "ModelFormEngine",
    "StepDeclaration",
    "Wizard",
    "WizardDefinition",
    "WizardRequest",
    "WizardStep",
    "request_from_streamlit",
    "sync_step_query_param",
    "wizard_name_for",
]
