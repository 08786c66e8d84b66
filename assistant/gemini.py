"""Gemini-backed document extraction and help chat.

The LLM is used ONLY for:
  reading fields off uploaded documents (structured output)
  answering free-text help questions
Loan arithmetic never goes through it.
"""

import logging
from typing import Optional, Sequence, Type

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, Field, ValidationError

from assistant.base import (
    BiometricIdFields,
    ChatAssistant,
    ChatMessage,
    DocumentExtractor,
    EducationDocumentFields,
    IdentityDocumentFields,
)
from config import GOOGLE_API_KEY, LLM_MODEL
from errors import (
    DocumentExtractionError,
    DocumentRejectedError,
    ExtractionUnavailableError,
    MissingFieldsError,
)
from langsmith_tracing import ai_call_trace
from prompts.extraction_prompts import CHAT_SYSTEM_INSTRUCTION, get_extraction_prompt

logger = logging.getLogger(__name__)

CHAT_UNAVAILABLE_MESSAGE = (
    "I'm sorry, my connection to the support service is currently unavailable. "
    "Please try again later."
)
CHAT_FALLBACK_MESSAGE = (
    "I'm having a little trouble connecting right now. "
    "Please try your question again in a moment."
)


# ── Structured output schemas (what the model must answer) ─────────────
class PanCardSchema(BaseModel):
    is_pan_card: bool = Field(description="True if the image is a valid Indian PAN card, false otherwise.")
    name: Optional[str] = Field(None, description="The full name, only if is_pan_card is true.")
    pan: Optional[str] = Field(None, description="The PAN number, only if is_pan_card is true.")


class AadhaarCardSchema(BaseModel):
    is_aadhaar_card: bool = Field(description="True if the image is a valid Indian Aadhaar card, false otherwise.")
    name: Optional[str] = Field(None, description="The full name, only if is_aadhaar_card is true.")
    aadhaar: Optional[str] = Field(
        None, description="The masked Aadhaar number, e.g., XXXX-XXXX-1234, only if is_aadhaar_card is true."
    )


class EducationDocumentSchema(BaseModel):
    is_educational_document: bool = Field(
        description="True if the image is a valid educational document (e.g., admission letter, marksheet)."
    )
    document_type: Optional[str] = Field(
        None, description="e.g., 'Admission Letter', 'Marksheet', only if is_educational_document is true."
    )
    institute: Optional[str] = Field(
        None, description="The name of the university or institute, only if is_educational_document is true."
    )


# ── LLM instances (lazy singletons, one per temperature) ───────────────
_llm_instances: dict[float, ChatGoogleGenerativeAI] = {}


def _get_llm(temperature: float) -> Optional[ChatGoogleGenerativeAI]:
    """Creates the LLM once per temperature; None without an API key."""
    if not GOOGLE_API_KEY:
        logger.warning("GOOGLE_API_KEY not set. Gemini API will not be available.")
        return None
    if temperature not in _llm_instances:
        _llm_instances[temperature] = ChatGoogleGenerativeAI(
            model=LLM_MODEL,
            google_api_key=GOOGLE_API_KEY,
            temperature=temperature,
        )
    return _llm_instances[temperature]


def clear_llm_instances():
    """Reset the LLM singletons (session reset, tests)."""
    _llm_instances.clear()


def _message_text(content) -> str:
    if isinstance(content, list):
        return "".join(
            part.get("text", "") if isinstance(part, dict) else str(part) for part in content
        ).strip()
    return str(content).strip()


class GeminiDocumentExtractor(DocumentExtractor):
    def __init__(self, llm: Optional[ChatGoogleGenerativeAI] = None):
        self._llm = llm

    def _structured(self, schema: Type[BaseModel], category: str, payload_b64: str, mime_type: str):
        llm = self._llm or _get_llm(temperature=0.0)
        if llm is None:
            raise ExtractionUnavailableError("API Key not configured for Gemini service.")

        message = HumanMessage(content=[
            {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{payload_b64}"}},
            {"type": "text", "text": get_extraction_prompt(category)},
        ])
        try:
            with ai_call_trace(f"extract_{category}", {"mime_type": mime_type}):
                return llm.with_structured_output(schema).invoke([message])
        except Exception as e:
            logger.error(f"Error in Gemini {category} extraction: {e}")
            raise DocumentExtractionError(
                "Failed to analyze the document. Please try a clearer image."
            ) from e

    def extract_identity(self, payload_b64: str, mime_type: str) -> IdentityDocumentFields:
        data = self._structured(PanCardSchema, "identity", payload_b64, mime_type)
        if not data.is_pan_card:
            raise DocumentRejectedError("The uploaded document does not appear to be a valid PAN card.")
        if not data.name or not data.pan:
            raise MissingFieldsError("Could not extract all required fields from the document.")
        return IdentityDocumentFields(name=data.name, pan=data.pan.upper())

    def extract_biometric_id(self, payload_b64: str, mime_type: str) -> BiometricIdFields:
        data = self._structured(AadhaarCardSchema, "biometric_id", payload_b64, mime_type)
        if not data.is_aadhaar_card:
            raise DocumentRejectedError("The uploaded document does not appear to be a valid Aadhaar card.")
        try:
            if not data.name or not data.aadhaar:
                raise ValueError("name or number missing")
            return BiometricIdFields(name=data.name, aadhaar=data.aadhaar)
        except (ValueError, ValidationError) as e:
            raise MissingFieldsError("Could not extract all required fields from Aadhaar card.") from e

    def extract_education_document(self, payload_b64: str, mime_type: str) -> EducationDocumentFields:
        data = self._structured(EducationDocumentSchema, "education", payload_b64, mime_type)
        if not data.is_educational_document:
            raise DocumentRejectedError("This does not appear to be a valid admission letter or marksheet.")
        if not data.document_type or not data.institute:
            raise MissingFieldsError("Could not extract required fields from the document.")
        return EducationDocumentFields(document_type=data.document_type, institute=data.institute)


class GeminiChatAssistant(ChatAssistant):
    def __init__(self, llm: Optional[ChatGoogleGenerativeAI] = None):
        self._llm = llm

    def reply(self, message: str, history: Sequence[ChatMessage]) -> str:
        llm = self._llm or _get_llm(temperature=0.7)
        if llm is None:
            return CHAT_UNAVAILABLE_MESSAGE

        messages: list[BaseMessage] = [SystemMessage(content=CHAT_SYSTEM_INSTRUCTION)]
        for past in history:
            cls = HumanMessage if past.sender == "user" else AIMessage
            messages.append(cls(content=past.text))
        messages.append(HumanMessage(content=message))

        try:
            with ai_call_trace("chat", {"turns": len(history)}):
                response = llm.invoke(messages)
            return _message_text(response.content)
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            return CHAT_FALLBACK_MESSAGE
