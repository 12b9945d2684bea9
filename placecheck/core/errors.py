"""Error taxonomy shared by the analysis pipeline and the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class AnalysisError(RuntimeError):
    """Base class for failures reported back to API callers."""


class ResolutionError(AnalysisError):
    """A canonical place URL could not be derived from the request input."""


class NeedsDisambiguation(ResolutionError):
    """The business search returned zero or several plausible places."""

    def __init__(self, message: str, candidates: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.candidates = candidates or []


class ServiceMisconfigured(ResolutionError):
    """Required credentials for an external service are absent."""


class UpstreamError(AnalysisError):
    """The document collaborator failed (timeout, transport error, bad status)."""


class ExtractionBlocked(AnalysisError):
    """The fetched document looks like an access-restriction or challenge page."""

    def __init__(self, message: str, *, reason: str, snippet: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.snippet = snippet
        self.status = status

    def to_payload(self) -> Dict[str, Any]:
        return {
            "ok": False,
            "blocked": True,
            "reason": self.reason,
            "message": str(self),
            "snippet": self.snippet,
        }
