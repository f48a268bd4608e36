"""Caller-facing errors of the recommendation API.

Strategies never raise (store failures degrade to empty results); these
exceptions only describe requests the engine cannot serve at all.
"""

from typing import Any, Dict, Optional


class RecoServiceError(Exception):
    """Base exception for recommendation service errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class UnknownRecommendationKindError(RecoServiceError):
    """Raised when a caller asks for a recommendation kind the engine lacks."""

    def __init__(self, kind: str, supported: Optional[list] = None):
        super().__init__(
            message=f"Unknown recommendation kind '{kind}'.",
            status_code=400,
            details={"kind": kind, "supported": sorted(supported or [])},
        )


class MissingParameterError(RecoServiceError):
    """Raised when a kind needs a parameter the caller did not supply."""

    def __init__(self, kind: str, parameter: str):
        super().__init__(
            message=f"Recommendation kind '{kind}' requires '{parameter}'.",
            status_code=400,
            details={"kind": kind, "parameter": parameter},
        )


class StoreUnavailableError(RecoServiceError):
    """Raised when the catalog / interaction store was never initialized."""

    def __init__(self, store: str = "mongodb"):
        super().__init__(
            message=f"{store} is not available.",
            status_code=503,
            details={"store": store},
        )
