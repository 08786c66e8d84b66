"""Capability interfaces for the remote AI service.

Screens and workers depend only on these contracts; the Gemini-backed
implementation lives in ``assistant.gemini`` and tests substitute stubs.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, List, Literal, Sequence

from pydantic import BaseModel, field_validator


class IdentityDocumentFields(BaseModel):
    """PAN card."""

    name: str
    pan: str

    def display_fields(self) -> Dict[str, str]:
        return {"Name": self.name, "PAN": self.pan}


def mask_aadhaar(value: str) -> str:
    """Keep only the last four digits: XXXX-XXXX-NNNN."""
    digits = re.sub(r"\D", "", value or "")
    if len(digits) < 4:
        raise ValueError("Aadhaar number must end in four digits")
    return f"XXXX-XXXX-{digits[-4:]}"


class BiometricIdFields(BaseModel):
    """Aadhaar card. The number is always stored masked."""

    name: str
    aadhaar: str

    @field_validator("aadhaar")
    @classmethod
    def _mask(cls, value: str) -> str:
        return mask_aadhaar(value)

    def display_fields(self) -> Dict[str, str]:
        return {"Name": self.name, "Aadhaar Number": self.aadhaar}


class EducationDocumentFields(BaseModel):
    """Admission letter or marksheet."""

    document_type: str
    institute: str

    def display_fields(self) -> Dict[str, str]:
        return {"Document Type": self.document_type, "Institute": self.institute}


class ChatMessage(BaseModel):
    sender: Literal["user", "ai"]
    text: str


class DocumentExtractor(ABC):
    """Reads fields from a base64 payload.

    Implementations raise ``errors.DocumentExtractionError`` (or a subclass)
    with a message fit to show the user.
    """

    @abstractmethod
    def extract_identity(self, payload_b64: str, mime_type: str) -> IdentityDocumentFields:
        ...

    @abstractmethod
    def extract_biometric_id(self, payload_b64: str, mime_type: str) -> BiometricIdFields:
        ...

    @abstractmethod
    def extract_education_document(self, payload_b64: str, mime_type: str) -> EducationDocumentFields:
        ...


class ChatAssistant(ABC):
    @abstractmethod
    def reply(self, message: str, history: Sequence[ChatMessage]) -> str:
        """Answer ``message``. Must not raise; failures become a fallback text."""


def transcript(history: Sequence[ChatMessage]) -> List[Dict[str, str]]:
    return [m.model_dump() for m in history]
