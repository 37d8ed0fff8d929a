"""
Google reCAPTCHA verification for contact form submissions.

Handles both v2 (success flag only) and v3 (success flag plus a score) responses.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from src.common.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class CaptchaServiceError(Exception):
    """Raised when the verification provider cannot be reached or answers garbage."""
    pass


@dataclass
class CaptchaResult:
    """Outcome of a captcha check."""
    success: bool
    score: Optional[float] = None
    error_codes: List[str] = field(default_factory=list)
    bypassed: bool = False


class RecaptchaVerifier:
    """
    Verifies captcha tokens against the reCAPTCHA siteverify API.

    Usage:
        verifier = RecaptchaVerifier(secret="...")
        result = await verifier.verify(token, remote_ip="203.0.113.7")
    """

    VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

    def __init__(
        self,
        secret: Optional[str],
        min_score: float = 0.3,
        verify_url: str = VERIFY_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret = secret
        self.min_score = min_score
        self.verify_url = verify_url
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "RecaptchaVerifier":
        return cls(
            secret=app_settings.RECAPTCHA_SECRET,
            min_score=app_settings.RECAPTCHA_MIN_SCORE,
            verify_url=app_settings.RECAPTCHA_VERIFY_URL,
            timeout=app_settings.RECAPTCHA_TIMEOUT,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    async def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> CaptchaResult:
        """
        Verify a captcha token.

        Args:
            token: The response token produced by the widget on the page.
            remote_ip: Optional address of the submitting client.

        Returns:
            CaptchaResult; `success` is False when the provider rejects the token
            or its score is below `min_score`.

        Raises:
            CaptchaServiceError: If the provider cannot be reached or its answer
            cannot be read.
        """
        if not self.enabled:
            logger.warning("INSECURE MODE: captcha verification bypassed, no RECAPTCHA_SECRET configured")
            return CaptchaResult(success=True, bypassed=True)

        if not token:
            logger.warning("No captcha token provided")
            return CaptchaResult(success=False, error_codes=["missing-input-response"])

        payload = {"secret": self.secret, "response": token}
        if remote_ip:
            payload["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.verify_url, data=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise CaptchaServiceError(f"Captcha provider request failed: {e}") from e
        except ValueError as e:
            raise CaptchaServiceError("Captcha provider returned invalid JSON") from e

        if not isinstance(data, dict):
            raise CaptchaServiceError("Captcha provider returned an unexpected payload")

        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            score = None
        error_codes = data.get("error-codes") or []

        if data.get("success") is not True:
            logger.warning("Captcha rejected by provider: %s", error_codes)
            return CaptchaResult(success=False, score=score, error_codes=error_codes)

        if score is not None and score < self.min_score:
            logger.warning("Captcha score %.2f below threshold %.2f", score, self.min_score)
            return CaptchaResult(success=False, score=score, error_codes=error_codes)

        return CaptchaResult(success=True, score=score, error_codes=error_codes)


def get_captcha_verifier() -> RecaptchaVerifier:
    return RecaptchaVerifier.from_settings(default_settings)
