"""Keys used for wizard data stored in session state and query parameters."""

from __future__ import annotations


class StateKeys:
    """Keys for data stored in the session."""

    WIZARDS = "_wizards"


class QueryKeys:
    """Query parameters understood by the wizard."""

    STEP = "step"
