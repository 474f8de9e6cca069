"""Shared fixtures. No test talks to the real AI gateway."""

import json
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

from app.verify import HazardVerifier, VerifyConfig

SAMPLE_IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAAgGBgcGBQgHBwcJCQgKDBQNDAsLDBkSEw8U"


def make_response(status_code: int = 200, body: Any = None, text: Optional[str] = None) -> MagicMock:
    """Stand-in for requests.Response."""
    r = MagicMock()
    r.status_code = status_code
    if text is None:
        text = json.dumps(body) if body is not None else ""
    r.text = text
    if body is None:
        r.json.side_effect = ValueError("no JSON")
    else:
        r.json.return_value = body
    return r


def completion(content: Any) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def valid_body() -> Dict[str, Any]:
    return {"imageBase64": SAMPLE_IMAGE, "latitude": 12.971598, "longitude": 77.594566}


@pytest.fixture
def config() -> VerifyConfig:
    return VerifyConfig(api_key="test-key", gateway_url="https://gateway.test/v1/chat/completions")


@pytest.fixture
def http() -> MagicMock:
    """Mocked requests module; defaults to a well-formed pothole verdict."""
    mock = MagicMock()
    mock.post.return_value = make_response(
        200,
        completion(
            '{"isValid": true, "category": "pothole", "title": "Deep pothole", '
            '"confidence": 87, "isSpam": false, "reason": "Visible road damage"}'
        ),
    )
    return mock


@pytest.fixture
def verifier(config, http) -> HazardVerifier:
    return HazardVerifier(config, http=http)
