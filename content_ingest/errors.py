"""Exception classes raised by the ingestion pipeline."""

from __future__ import annotations

from typing import Any, Optional


class IngestError(Exception):
    """Base exception for the ingestion pipeline."""

    def __init__(self, message: str, code: str = "INGEST_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the error shape the web layer returns."""
        return {"code": self.code, "message": str(self), "details": self.details}


class CompanyNotFoundError(IngestError):
    """Raised when a company is missing or inactive."""

    def __init__(self, company_name: str):
        super().__init__(
            f"Company {company_name} not found or inactive",
            code="COMPANY_NOT_FOUND",
            details={"company_name": company_name},
        )


class MissingLinkError(IngestError):
    """Raised when a company has no profile link for the requested platform."""

    def __init__(self, company_name: str, platform: str):
        super().__init__(
            f"No {platform} link found for company {company_name}",
            code="MISSING_LINK",
            details={"company_name": company_name, "platform": platform},
        )


class UnsupportedPlatformError(IngestError):
    def __init__(self, platform: str):
        super().__init__(
            f"Unsupported platform '{platform}'",
            code="UNSUPPORTED_PLATFORM",
            details={"platform": platform},
        )


class FetchError(IngestError):
    """Raised when an outbound fetch fails (network, timeout, non-2xx)."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        super().__init__(
            f"GET {url} failed: {reason}",
            code="FETCH_ERROR",
            details={"url": url, "status": status},
        )
        self.url = url
        self.status = status


class DuplicateRecordError(IngestError):
    """Raised by the content store when a post_id or url already exists."""

    def __init__(self, post_id: str, url: str):
        super().__init__(
            f"Post {post_id} already exists",
            code="DUPLICATE_RECORD",
            details={"post_id": post_id, "url": url},
        )
