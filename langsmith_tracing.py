"""LangSmith tracing — one trace per remote AI call."""

import os
from contextlib import contextmanager

import langsmith as ls

from config import LANGSMITH_TRACING, LANGSMITH_PROJECT


def _ensure_env():
    """Ensure LangSmith env vars are set when tracing is enabled."""
    if LANGSMITH_TRACING:
        os.environ.setdefault("LANGCHAIN_TRACING_V2", "true")
        os.environ.setdefault("LANGCHAIN_PROJECT", LANGSMITH_PROJECT)


@contextmanager
def ai_call_trace(name: str, metadata: dict | None = None):
    """Trace a remote AI call. A no-op unless LANGSMITH_TRACING is on."""
    if not LANGSMITH_TRACING:
        yield
        return

    _ensure_env()
    with ls.tracing_context(
        project_name=LANGSMITH_PROJECT,
        enabled=True,
        metadata=dict(metadata or {}),
        tags=["scholarloan", name],
    ):
        yield
