"""Session state defaults and initialization for the matterdeploy UI."""

import streamlit as st

SESSION_DEFAULTS = {
    # Last backend responses
    "validation_errors": [],
    "rendered_documents": {},
    "last_error": None,
    # Target selection
    "render_target": "compose",
}


def init_session_state():
    """Initialize session state with defaults for any missing keys."""
    for key, default in SESSION_DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = default
