import os
from dataclasses import dataclass

import streamlit as st
from streamlit.errors import StreamlitAPIException

DEFAULT_API_BASE = "https://bharatdairy.pythonanywhere.com/apiapp"


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE
    request_timeout: float = 15.0
    log_level: str = "INFO"
    brand_name: str = "Bharat Dairy"


def _secret(key):
    # st.secrets raises when no secrets.toml exists at all
    try:
        return st.secrets.get(key)
    except (FileNotFoundError, StreamlitAPIException):
        return None


def _lookup(key, env_key, default):
    value = _secret(key)
    if value is None:
        value = os.getenv(env_key)
    if value is None or str(value).strip() == "":
        return default
    return value


def load_settings():
    base_url = str(_lookup("API_BASE", "DAIRYFLOW_API_BASE", DEFAULT_API_BASE)).strip()
    try:
        timeout = float(_lookup("TIMEOUT", "DAIRYFLOW_TIMEOUT", 15))
    except ValueError:
        timeout = 15.0
    return Settings(
        api_base_url=base_url.rstrip("/"),
        request_timeout=timeout,
        log_level=str(_lookup("LOG_LEVEL", "DAIRYFLOW_LOG_LEVEL", "INFO")).upper(),
        brand_name=str(_lookup("BRAND", "DAIRYFLOW_BRAND", "Bharat Dairy")),
    )
