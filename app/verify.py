# app/verify.py
"""
Hazard photo verifier:
- Validates the inbound payload (fail-fast, one specific error per field),
- Refuses to run without an AI gateway credential (no network call is made),
- Builds the system + user prompt with the image attached inline,
- Calls the chat-completions gateway once (no retries, bounded timeout),
- Extracts the model's JSON verdict from free text; unusable output degrades
  to a "Pending Manual Review" verdict instead of an error.

The verdict is returned as the model produced it. Rejecting spam or
category "invalid" is the caller's job (see app.reports.is_accepted).
"""
import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import (
    ImageTooLarge,
    InvalidImageFormat,
    InvalidLatitude,
    InvalidLongitude,
    InvalidShape,
    MalformedBody,
    MissingImage,
    ServiceUnconfigured,
)
from .gateway import GatewayClient
from .prompts import build_messages
from .utils import (
    MAX_IMAGE_BASE64_CHARS,
    extract_json_object,
    format_coordinate,
    is_valid_base64_image,
    is_valid_latitude,
    is_valid_longitude,
)

# Load .env file if present; silently skip if missing
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
CATEGORIES = ("pothole", "waste", "water", "other", "invalid")


# ----------------------------- Data models ----------------------------- #
@dataclass
class VerificationRequest:
    image_base64: str
    latitude: float
    longitude: float


@dataclass
class VerificationResult:
    isValid: bool
    category: str  # one of CATEGORIES
    title: str
    confidence: float  # 0..100
    isSpam: bool
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


MANUAL_REVIEW = VerificationResult(
    isValid=False,
    category="other",
    title="Pending Manual Review",
    confidence=0,
    isSpam=False,
    reason="AI could not analyze the image. Flagged for manual review.",
)


@dataclass
class VerifyConfig:
    api_key: Optional[str] = None
    gateway_url: str = DEFAULT_GATEWAY_URL
    model: str = DEFAULT_MODEL
    timeout_s: float = 30.0
    max_image_chars: int = MAX_IMAGE_BASE64_CHARS

    @classmethod
    def from_env(cls) -> "VerifyConfig":
        return cls(
            api_key=os.getenv("AI_GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY") or None,
            gateway_url=os.getenv("AI_GATEWAY_URL", DEFAULT_GATEWAY_URL),
            model=os.getenv("AI_GATEWAY_MODEL", DEFAULT_MODEL),
            timeout_s=float(os.getenv("AI_GATEWAY_TIMEOUT_S", "30")),
        )


# ----------------------------- Helpers ----------------------------- #
def parse_body(raw: bytes) -> Any:
    try:
        return json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise MalformedBody() from e


def validate_request(body: Any, max_image_chars: int = MAX_IMAGE_BASE64_CHARS) -> VerificationRequest:
    """
    Checks run in a fixed order and the first failure is raised:
    shape, image presence, image format, image size, latitude, longitude.
    """
    if not isinstance(body, dict):
        raise InvalidShape()

    image = body.get("imageBase64")
    lat = body.get("latitude")
    lng = body.get("longitude")

    if not isinstance(image, str) or not image:
        raise MissingImage()
    if not is_valid_base64_image(image):
        raise InvalidImageFormat()
    if len(image) > max_image_chars:
        raise ImageTooLarge()
    if not is_valid_latitude(lat):
        raise InvalidLatitude()
    if not is_valid_longitude(lng):
        raise InvalidLongitude()

    return VerificationRequest(image_base64=image, latitude=lat, longitude=lng)


def parse_verdict(content: str) -> Dict[str, Any]:
    """Model verdict as parsed, or the manual-review fallback."""
    verdict = extract_json_object(content)
    if verdict is None:
        logger.error("Failed to parse AI response, flagging for manual review")
        return MANUAL_REVIEW.to_dict()
    return verdict


# ----------------------------- Verifier ----------------------------- #
class HazardVerifier:
    """Stateless; one instance may serve any number of concurrent requests."""

    def __init__(self, cfg: Optional[VerifyConfig] = None, http: Optional[Any] = None):
        self.cfg = cfg or VerifyConfig()
        self.http = http

    def _gateway(self) -> GatewayClient:
        if not self.cfg.api_key:
            logger.error("AI gateway API key is not configured (AI_GATEWAY_API_KEY)")
            raise ServiceUnconfigured()
        return GatewayClient(
            api_key=self.cfg.api_key,
            url=self.cfg.gateway_url,
            model=self.cfg.model,
            timeout=self.cfg.timeout_s,
            http=self.http,
        )

    def verify(self, body: Any) -> Dict[str, Any]:
        req = validate_request(body, self.cfg.max_image_chars)
        gateway = self._gateway()

        logger.info(
            "Verifying hazard image at %s, %s",
            format_coordinate(req.latitude),
            format_coordinate(req.longitude),
        )
        content = gateway.complete(build_messages(req.image_base64, req.latitude, req.longitude))
        logger.info("AI response received")

        result = parse_verdict(content)
        logger.info("Verification completed: %s %s", result.get("category"), result.get("isValid"))
        return result

    def verify_json(self, raw: bytes) -> Dict[str, Any]:
        """verify() over an undecoded request body."""
        return self.verify(parse_body(raw))
