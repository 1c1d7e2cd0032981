"""Glue between Streamlit's query parameters and :class:`WizardRequest`."""

from __future__ import annotations

from typing import Any, Mapping

import streamlit as st

from formwizard.config import STEP_QUERY_PARAM
from formwizard.wizard.engine import Wizard
from formwizard.wizard.request import WizardRequest


def request_from_streamlit(
    form: Mapping[str, Any] | None = None,
    *,
    method: str | None = None,
) -> WizardRequest:
    """Build a request from ``st.query_params`` and an optional form payload.

    Supplying ``form`` marks the request as a ``POST`` unless ``method`` says
    otherwise.
    """

    query = {str(key): str(st.query_params[key]) for key in st.query_params}
    resolved_method = method or ("POST" if form is not None else "GET")
    return WizardRequest(method=resolved_method, query=query, form=dict(form or {}))


def sync_step_query_param(wizard: Wizard) -> str:
    """Mirror the wizard's current step into ``st.query_params``."""

    step = wizard.get_current_step()
    if st.query_params.get(STEP_QUERY_PARAM) != step:
        st.query_params[STEP_QUERY_PARAM] = step
    return step
