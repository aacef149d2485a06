"""Error taxonomy for the analysis request/response cycle.

Every message is meant to be shown to the user as-is.
"""
from __future__ import annotations

from typing import Iterable, Tuple


class AnalysisError(Exception):
    """Base class for failures while producing an analysis report."""


class EmptyResponseError(AnalysisError):
    """The model returned no text at all."""

    def __init__(self, message: str = "Gemini returned an empty response; please try again later.") -> None:
        super().__init__(message)


class FormatError(AnalysisError):
    """No fenced ```json block was found in the model reply."""

    def __init__(self, message: str = "no JSON block found in the model response") -> None:
        super().__init__(message)


class ParseError(AnalysisError):
    """The fenced block is not strictly valid JSON."""


class SchemaError(AnalysisError):
    """Valid JSON that lacks required fields or carries malformed ones."""

    def __init__(self, fields: Iterable[str], detail: str = "") -> None:
        self.fields: Tuple[str, ...] = tuple(fields)
        message = "missing or invalid field(s): " + ", ".join(self.fields)
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class TransportError(AnalysisError):
    """The outbound call failed (network, auth, rate limit, credentials)."""
