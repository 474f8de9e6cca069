# app/errors.py
"""
Error taxonomy for hazard verification.

Every failure the endpoint can report is a VerificationError subclass carrying
the HTTP status and the client-facing message. Input errors are always 400.
"""
from typing import Any, Dict, Optional


class VerificationError(Exception):
    status_code: int = 500
    message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


# ---------- Input errors (400) ----------
class InputError(VerificationError):
    status_code = 400


class MalformedBody(InputError):
    message = "Invalid JSON body"


class InvalidShape(InputError):
    message = "Request body must be an object"


class MissingImage(InputError):
    message = "Image data is required"


class InvalidImageFormat(InputError):
    message = "Invalid image format. Must be base64 encoded."


class ImageTooLarge(InputError):
    message = "Image too large. Maximum size is 10MB."


class InvalidLatitude(InputError):
    message = "Latitude must be a number between -90 and 90"


class InvalidLongitude(InputError):
    message = "Longitude must be a number between -180 and 180"


# ---------- Configuration ----------
class ServiceUnconfigured(VerificationError):
    status_code = 500
    message = "AI service not configured"


# ---------- Upstream ----------
class RateLimited(VerificationError):
    status_code = 429
    message = "Rate limit exceeded. Please try again in a moment."


class QuotaExceeded(VerificationError):
    status_code = 402
    message = "AI service quota exceeded."


class UpstreamFailure(VerificationError):
    status_code = 500
    message = "AI verification failed. Please try again."
