"""
Google reCAPTCHA v3 verification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from realty_portal.core.logging_config import get_logger
from realty_portal.server.core.config import settings

logger = get_logger(__name__)


class RecaptchaError(RuntimeError):
    """reCAPTCHA is not configured or Google could not be reached."""


@dataclass(frozen=True)
class RecaptchaResult:
    success: bool
    score: float = 0.0
    error: Optional[str] = None
    error_codes: List[str] = field(default_factory=list)


class RecaptchaVerifier:
    """Verifies client tokens against the siteverify endpoint."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        *,
        verify_url: Optional[str] = None,
        min_score: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        config = settings.recaptcha
        self.secret_key = secret_key if secret_key is not None else config.secret_key
        self.verify_url = verify_url or config.verify_url
        self.min_score = config.min_score if min_score is None else min_score
        self._http = client

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> RecaptchaResult:
        """Check ``token`` and apply the score threshold.

        Raises:
            RecaptchaError: no secret key is configured or the request failed
        """
        if not self.secret_key:
            raise RecaptchaError("RECAPTCHA_SECRET_KEY is not configured")

        form = {"secret": self.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            if self._http is not None:
                response = await self._http.post(self.verify_url, data=form)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await client.post(self.verify_url, data=form)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"reCAPTCHA verification request failed: {e}")
            raise RecaptchaError(f"reCAPTCHA verification request failed: {e}") from e

        if not payload.get("success"):
            codes = list(payload.get("error-codes") or [])
            logger.info(f"reCAPTCHA verification failed: {codes}")
            return RecaptchaResult(success=False, error="reCAPTCHA verification failed", error_codes=codes)

        score = float(payload.get("score") or 0)
        if score < self.min_score:
            logger.info(f"reCAPTCHA score {score} below threshold {self.min_score}")
            return RecaptchaResult(success=False, score=score, error="reCAPTCHA score too low. Please try again.")
        return RecaptchaResult(success=True, score=score)


async def verify_recaptcha(token: str, remote_ip: Optional[str] = None) -> RecaptchaResult:
    return await RecaptchaVerifier().verify(token, remote_ip)
