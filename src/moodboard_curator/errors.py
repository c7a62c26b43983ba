"""
Error taxonomy for provider calls and fetch cycles.

Every error here is local to the fetch cycle that raised it. None of them
is fatal to a curation session.
"""

from typing import Optional


# Status line shown when both the optimistic and the refined fetch come back empty
NO_MATCHES_MESSAGE = "No matches found. Try broader words."


class CurationError(Exception):
    """Base class for provider and fetch-cycle failures."""

    def user_message(self) -> str:
        return str(self) or self.__class__.__name__


class RateLimited(CurationError):
    """Provider asked us to back off. Never retried automatically."""

    def __init__(self, retry_after: Optional[float] = None, provider: str = "provider"):
        self.retry_after = retry_after
        self.provider = provider
        hint = f" (retry after {retry_after:g}s)" if retry_after is not None else ""
        super().__init__(f"{provider} rate limited{hint}")

    def user_message(self) -> str:
        if self.retry_after is not None:
            return f"Too many requests. Try again in {self.retry_after:g}s."
        return "Too many requests. Try again shortly."


class UpstreamError(CurationError):
    """Non-2xx, non-429 response from a provider."""

    def __init__(self, status_code: int, detail: str = "", provider: str = "provider"):
        self.status_code = status_code
        self.detail = detail
        self.provider = provider
        message = f"{provider} {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class TransientNetworkFailure(CurationError):
    """Timeout, abort or connection error."""


class MalformedResponse(CurationError):
    """Provider answered with content that could not be parsed."""
