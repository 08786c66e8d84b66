"""Pytest configuration and fixtures."""

import random
import threading
import time
from typing import Sequence

import pytest

from assistant.base import (
    BiometricIdFields,
    ChatAssistant,
    ChatMessage,
    DocumentExtractor,
    EducationDocumentFields,
    IdentityDocumentFields,
)
from journey.session import JourneySession
from journey.state import AppContext


class StubExtractor(DocumentExtractor):
    """Canned extraction results; set ``error`` to make every call fail.

    Events queued in ``gates`` hold the matching call (in call order) until set.
    """

    def __init__(self, delay: float = 0.0):
        self.calls: list[tuple[str, str]] = []
        self.gates: list[threading.Event] = []
        self.error: Exception | None = None
        self.delay = delay
        self.identity = IdentityDocumentFields(name="Asha Rao", pan="ABCDE1234F")
        self.biometric = BiometricIdFields(name="Asha Rao", aadhaar="1234 5678 9012")
        self.education = EducationDocumentFields(document_type="Admission Letter", institute="Stanford University")

    def _call(self, category: str, mime_type: str):
        self.calls.append((category, mime_type))
        gate = self.gates.pop(0) if self.gates else None
        if gate is not None:
            assert gate.wait(timeout=5)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error

    def extract_identity(self, payload_b64, mime_type):
        self._call("identity", mime_type)
        return self.identity

    def extract_biometric_id(self, payload_b64, mime_type):
        self._call("biometric_id", mime_type)
        return self.biometric

    def extract_education_document(self, payload_b64, mime_type):
        self._call("education", mime_type)
        return self.education


class StubAssistant(ChatAssistant):
    def __init__(self):
        self.received: list[tuple[str, list[ChatMessage]]] = []

    def reply(self, message: str, history: Sequence[ChatMessage]) -> str:
        self.received.append((message, list(history)))
        return f"You asked: {message}"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def rng(seed: int) -> random.Random:
    return random.Random(seed)


@pytest.fixture
def extractor() -> StubExtractor:
    return StubExtractor()


@pytest.fixture
def assistant() -> StubAssistant:
    return StubAssistant()


@pytest.fixture
def context() -> AppContext:
    return AppContext()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(extractor: StubExtractor, assistant: StubAssistant, rng: random.Random, clock: FakeClock):
    """Deterministic session: no eligibility jitter, fast ticker, fake clock."""
    journey = JourneySession(
        extractor=extractor,
        assistant=assistant,
        rng=rng,
        jitter=0,
        clock=clock,
        tick_interval=0.005,
    )
    yield journey
    journey.close()


@pytest.fixture
def png_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
