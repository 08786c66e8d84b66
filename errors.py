"""Exception hierarchy for ScholarLoan."""


class ScholarLoanError(Exception):
    """Base exception for all ScholarLoan errors."""


class DocumentExtractionError(ScholarLoanError):
    """Raised when the remote service cannot read an uploaded document."""


class DocumentRejectedError(DocumentExtractionError):
    """Raised when the document fails the remote type check."""


class MissingFieldsError(DocumentExtractionError):
    """Raised when the document was recognised but required fields are absent."""


class ExtractionUnavailableError(DocumentExtractionError):
    """Raised when no API key is configured for the extraction service."""


class SessionNotFoundError(ScholarLoanError):
    """Raised when a journey session id is unknown."""
