"""Document upload — constraint checks, remote extraction, status updates.

Flow per upload:
  reject wrong type / oversize locally (no remote call)
  mark uploading and start the progress ticker
  extract fields through the DocumentExtractor
  stop the ticker, then record uploaded or error unless a newer upload
  of the same document (even a rejected one) has superseded this one

Every failure stays on the document; nothing here raises to the caller
except an unknown document id.
"""

import base64
import logging
import random
import threading
from typing import Dict, Optional, Union

from assistant.base import (
    BiometricIdFields,
    DocumentExtractor,
    EducationDocumentFields,
    IdentityDocumentFields,
)
from config import MAX_UPLOAD_MB, PROGRESS_TICK_SECONDS
from errors import DocumentExtractionError
from journey.state import AppContext, Document, find_document
from workers.progress_ticker import ProgressTicker

logger = logging.getLogger(__name__)

ACCEPTED_MIME_TYPES = frozenset({"image/jpeg", "image/png", "application/pdf"})
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

INVALID_TYPE_MESSAGE = "Invalid file type. Please use JPG, PNG, or PDF."
TOO_LARGE_MESSAGE = f"File is too large. Maximum size is {MAX_UPLOAD_MB}MB."
UNREADABLE_MESSAGE = "Could not read details. Please re-upload a clearer image."

ExtractedFields = Union[IdentityDocumentFields, BiometricIdFields, EducationDocumentFields]


def check_upload_constraints(mime_type: str, size: int, max_bytes: int = MAX_UPLOAD_BYTES) -> Optional[str]:
    """User-facing message for a rejected file, None if it may be sent."""
    if mime_type not in ACCEPTED_MIME_TYPES:
        return INVALID_TYPE_MESSAGE
    if size > max_bytes:
        return TOO_LARGE_MESSAGE
    return None


class DocumentUploader:
    """Owns the upload operations (and their tickers) for one AppContext.

    Each document has at most one live upload. A newer upload of the same
    document, accepted or rejected, supersedes the older one: its ticker is
    cancelled and its late result is discarded.
    """

    def __init__(
        self,
        context: AppContext,
        extractor: DocumentExtractor,
        max_bytes: int = MAX_UPLOAD_BYTES,
        tick_interval: float = PROGRESS_TICK_SECONDS,
        rng: Optional[random.Random] = None,
    ):
        self._context = context
        self._extractor = extractor
        self._max_bytes = max_bytes
        self._tick_interval = tick_interval
        self._rng = rng
        self._lock = threading.Lock()
        self._tickers: Dict[str, ProgressTicker] = {}  # doc_id -> ticker of the live upload

    def active_tickers(self) -> Dict[str, ProgressTicker]:
        with self._lock:
            return dict(self._tickers)

    def upload(self, doc_id: str, payload: bytes, mime_type: str) -> Document:
        if find_document(self._context.state, doc_id) is None:
            raise KeyError(doc_id)

        rejection = check_upload_constraints(mime_type, len(payload), self._max_bytes)
        if rejection:
            logger.info(f"Rejected {doc_id} upload ({mime_type}, {len(payload)} bytes): {rejection}")
            self._release(doc_id)
            self._context.update_document(
                doc_id, status="error", error=rejection, progress=0, extracted_data=None,
            )
            return find_document(self._context.state, doc_id)

        ticker = self._claim(doc_id)
        self._context.update_document(
            doc_id, status="uploading", error=None, progress=0, extracted_data=None,
        )
        ticker.start()

        error = None
        fields: Optional[ExtractedFields] = None
        try:
            fields = self._extract(doc_id, base64.b64encode(payload).decode("ascii"), mime_type)
        except DocumentExtractionError as e:
            logger.warning(f"Extraction failed for {doc_id}: {e}")
            error = str(e) or UNREADABLE_MESSAGE
        except Exception:
            logger.exception(f"Unexpected error extracting {doc_id}")
            error = UNREADABLE_MESSAGE
        finally:
            ticker.cancel()

        # Checked and written under one lock so a superseding upload cannot interleave
        with self._lock:
            if self._tickers.get(doc_id) is not ticker:
                logger.info(f"Discarding superseded {doc_id} upload result")
                return find_document(self._context.state, doc_id)
            del self._tickers[doc_id]
            if error:
                self._context.update_document(doc_id, status="error", error=error, progress=0)
            else:
                if isinstance(fields, IdentityDocumentFields):
                    self._context.set_profile({"name": fields.name, "pan": fields.pan})
                self._context.update_document(
                    doc_id, status="uploaded", error=None, progress=100,
                    extracted_data=fields.display_fields(),
                )
            return find_document(self._context.state, doc_id)

    def cancel_all(self) -> None:
        with self._lock:
            tickers = list(self._tickers.values())
            self._tickers.clear()
        for ticker in tickers:
            ticker.cancel()

    # ── internals ──────────────────────────────────────────────────────
    def _claim(self, doc_id: str) -> ProgressTicker:
        """Register a fresh (unstarted) ticker for ``doc_id``, cancelling the one it replaces."""
        ticker = ProgressTicker(
            lambda progress: self._context.update_document(doc_id, progress=progress),
            interval=self._tick_interval,
            rng=self._rng,
            name=f"upload-progress-{doc_id}",
        )
        with self._lock:
            superseded = self._tickers.get(doc_id)
            self._tickers[doc_id] = ticker
        if superseded is not None:
            superseded.cancel()
        return ticker

    def _release(self, doc_id: str) -> None:
        """Drop the live upload of ``doc_id``, if any; its result will be discarded."""
        with self._lock:
            superseded = self._tickers.pop(doc_id, None)
        if superseded is not None:
            superseded.cancel()

    def _extract(self, doc_id: str, payload_b64: str, mime_type: str) -> ExtractedFields:
        if doc_id == "pan":
            return self._extractor.extract_identity(payload_b64, mime_type)
        if doc_id == "aadhaar":
            return self._extractor.extract_biometric_id(payload_b64, mime_type)
        if doc_id in ("admission", "marksheet"):
            return self._extractor.extract_education_document(payload_b64, mime_type)
        raise DocumentExtractionError(f"No extractor for document '{doc_id}'.")
