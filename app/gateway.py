# app/gateway.py
"""
Client for the AI gateway's chat-completions endpoint.

One POST per call, bearer-authenticated, no retries and no streaming.
Non-2xx statuses are mapped onto the verification error taxonomy; a 2xx
reply without usable message content yields an empty string.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import QuotaExceeded, RateLimited, UpstreamFailure

logger = logging.getLogger(__name__)


def _message_content(data: Any) -> str:
    """choices[0].message.content, or "" when any level is missing."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


class GatewayClient:
    def __init__(
        self,
        api_key: str,
        url: str,
        model: str,
        timeout: float = 30.0,
        http: Optional[Any] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        # anything exposing requests' post(); a Session in production, a mock in tests
        self.http = http if http is not None else requests

    def complete(self, messages: List[Dict[str, Any]]) -> str:
        """Send the conversation and return the first choice's text content."""
        try:
            r = self.http.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={"model": self.model, "messages": messages},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("AI gateway request failed: %s", e)
            raise UpstreamFailure() from e

        if not 200 <= r.status_code < 300:
            logger.error("AI gateway error: %s %s", r.status_code, r.text)
            if r.status_code == 429:
                raise RateLimited()
            if r.status_code == 402:
                raise QuotaExceeded()
            raise UpstreamFailure(details=f"AI gateway returned status {r.status_code}")

        try:
            data = r.json()
        except ValueError:
            logger.warning("AI gateway returned a non-JSON body")
            return ""
        return _message_content(data)
