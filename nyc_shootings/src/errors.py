# src/errors.py


class ReportError(Exception):
    pass


class RetrievalError(ReportError):
    """Source unreachable, or the response is not a usable incident table."""


class DomainError(ReportError):
    """Inputs to the goodness-of-fit test do not line up."""
