"""App-wide configuration and environment settings."""

import os

import streamlit as st
from dotenv import load_dotenv
from streamlit import runtime

load_dotenv()  # Load from .env file


def get_secret(key, default=None):
    """Try st.secrets when running under Streamlit, then os.getenv."""
    if runtime.exists():
        try:
            # Accessing st.secrets raises FileNotFoundError if no secrets.toml
            if key in st.secrets:
                return st.secrets[key]
        except (FileNotFoundError, AttributeError, KeyError):
            pass
    return os.getenv(key, default)


# LLM (Google Gemini)
GOOGLE_API_KEY = get_secret("GOOGLE_API_KEY", "")
LLM_MODEL = get_secret("LLM_MODEL", "gemini-2.5-flash")

# Uploads
MAX_UPLOAD_MB = int(get_secret("MAX_UPLOAD_MB", "5"))
PROGRESS_TICK_SECONDS = float(get_secret("PROGRESS_TICK_SECONDS", "0.2"))
PROGRESS_CAP = 95  # Simulated progress never claims completion

# Journey
MAX_HISTORY_DEPTH = int(get_secret("MAX_HISTORY_DEPTH", "50"))
ELIGIBILITY_JITTER = float(get_secret("ELIGIBILITY_JITTER", "0.05"))  # +/- 5%

# LangSmith
LANGSMITH_TRACING = os.getenv("LANGSMITH_TRACING", "false").lower() in ("true", "1")
LANGSMITH_PROJECT = os.getenv("LANGSMITH_PROJECT", "scholarloan")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
