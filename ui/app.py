"""Streamlit UI for matterdeploy.

Operators fill in one form describing their Matter AI deployment; the backend
validates it and renders a docker-compose.yml or a Helm values.yaml. Every
validation problem is shown at once so the form can be fixed in one pass.
"""

import logging

import streamlit as st

from api_client import API_BASE_URL, render_document, validate_descriptor
from helpers import ROLE_DEFAULTS, ROLES, build_descriptor
from state import init_session_state

st.set_page_config(
    page_title="matterdeploy",
    layout="wide",
    initial_sidebar_state="expanded",
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

init_session_state()


def render_service_form(role: str) -> dict:
    """Form fields for one service role."""
    defaults = ROLE_DEFAULTS[role]
    form = {}

    with st.expander(f"{role.capitalize()} service", expanded=role != "database"):
        if role == "database":
            form["include"] = st.checkbox(
                "Run Postgres in this deployment",
                value=True,
                key=f"{role}_include",
                help="Untick when the backend uses an external database",
            )
        form["image"] = st.text_input("Image (repository:tag)", value=defaults["image"], key=f"{role}_image")
        form["replicas"] = st.number_input(
            "Replicas (Helm only)", min_value=1, value=1, step=1, key=f"{role}_replicas"
        )

        col1, col2 = st.columns(2)
        with col1:
            form["container_port"] = st.number_input(
                "Container port", min_value=1, max_value=65535,
                value=defaults["container_port"], key=f"{role}_container_port",
            )
            form["cpu_request"] = st.text_input("CPU request", value="", key=f"{role}_cpu_request")
            form["memory_request"] = st.text_input("Memory request", value="", key=f"{role}_memory_request")
        with col2:
            form["host_port"] = st.number_input(
                "Host / service port", min_value=1, max_value=65535,
                value=defaults["host_port"], key=f"{role}_host_port",
            )
            form["cpu_limit"] = st.text_input("CPU limit", value="", key=f"{role}_cpu_limit")
            form["memory_limit"] = st.text_input("Memory limit", value="", key=f"{role}_memory_limit")

        form["env"] = st.text_area(
            "Environment (KEY=VALUE per line, secret:NAME/KEY for secrets)",
            value="",
            key=f"{role}_env",
        )
    return form


def render_sidebar() -> dict:
    """Deployment-wide settings."""
    form = {}
    with st.sidebar:
        st.header("Deployment")
        form["namespace"] = st.text_input("Namespace", value="matterai")
        form["email_domain"] = st.text_input("Allowed email domain", value="")
        form["storage_class"] = st.text_input("Storage class (optional)", value="")
        form["persistence_size"] = st.text_input("Postgres volume size (Helm)", value="")

        st.header("Database")
        form["db_host"] = st.text_input("Host", value="postgres")
        form["db_port"] = st.number_input("Port", min_value=1, max_value=65535, value=5432)
        form["db_name"] = st.text_input("Database name", value="matter")
        form["db_user"] = st.text_input("User", value="matter")
        form["db_password_secret"] = st.text_input("Password secret name", value="postgres-password")
        form["db_password_key"] = st.text_input("Password secret key", value="password")

        st.header("Ingress")
        form["ingress_enabled"] = st.checkbox("Enable ingress", value=False)
        if form["ingress_enabled"]:
            form["ingress_host"] = st.text_input("Host", value="")
            form["ingress_tls_secret"] = st.text_input("TLS secret name", value="")

        st.header("Private registry (Helm)")
        form["registry_enabled"] = st.checkbox("Use registry credentials", value=False)
        if form["registry_enabled"]:
            form["registry"] = st.text_input("Registry URL", value="")
            form["registry_auth_mode"] = st.radio(
                "Credential type", options=["basic", "token"], horizontal=True,
                format_func=lambda mode: "Username / password" if mode == "basic" else "Auth token",
            )
            if form["registry_auth_mode"] == "token":
                form["registry_token_secret"] = st.text_input("Auth token secret name", value="")
            else:
                form["registry_username"] = st.text_input("Username", value="")
                form["registry_password_secret"] = st.text_input("Password secret name", value="")

        st.caption(f"Backend: {API_BASE_URL}")
    return form


def show_validation_errors(errors: list[dict]):
    st.error(f"The descriptor has {len(errors)} problem(s):")
    st.table(
        [
            {"Field": e.get("field_path"), "Problem": e.get("kind"), "Details": e.get("message")}
            for e in errors
        ]
    )


def main():
    st.title("matterdeploy")
    st.caption("Render Docker Compose or Helm values files for a Matter AI deployment.")

    form = render_sidebar()
    form["services"] = {role: render_service_form(role) for role in ROLES}
    descriptor = build_descriptor(form)

    target = st.radio(
        "Output", options=["compose", "helm"], horizontal=True,
        format_func=lambda t: "docker-compose.yml" if t == "compose" else "Helm values.yaml",
        key="render_target",
    )

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Check descriptor"):
            result = validate_descriptor(descriptor, target)
            st.session_state.validation_errors = result.get("errors", [])
            st.session_state.last_error = result.get("error")
            if result.get("valid"):
                st.success("No problems found.")
    with col2:
        if st.button("Render", type="primary"):
            with st.spinner("Rendering..."):
                result = render_document(descriptor, target)
            st.session_state.validation_errors = result.get("errors", [])
            st.session_state.last_error = result.get("error")
            if result["success"]:
                st.session_state.rendered_documents[target] = result

    if st.session_state.last_error:
        st.error(st.session_state.last_error)
    if st.session_state.validation_errors:
        show_validation_errors(st.session_state.validation_errors)

    document = st.session_state.rendered_documents.get(target)
    if document:
        st.subheader(document["filename"])
        st.code(document["content"], language="yaml")
        st.download_button(
            "Download",
            data=document["content"],
            file_name=document["filename"],
            mime="text/yaml",
        )


main()
