"""
Contact-form relay through the EmailJS REST API.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from realty_portal.core.logging_config import get_logger
from realty_portal.server.core.config import EmailJSConfig, settings

logger = get_logger(__name__)


class EmailRelayError(RuntimeError):
    """EmailJS is not configured or refused the message."""


def build_template_params(form: Any, to_email: Optional[str]) -> Dict[str, Any]:
    """Map a contact form onto the EmailJS template variables."""
    return {
        "from_name": form.full_name,
        "from_email": form.email,
        "phone": form.phone or "",
        "interest": form.interest or "",
        "message": form.message,
        "to_email": to_email or "",
    }


class EmailJSClient:
    """Sends templated emails through EmailJS."""

    def __init__(self, config: Optional[EmailJSConfig] = None, client: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config or settings.emailjs
        self._http = client

    async def send(self, template_params: Dict[str, Any]) -> None:
        """Send one email.

        Raises:
            EmailRelayError: missing configuration, transport failure or a non-200 reply
        """
        config = self.config
        if not config.is_configured:
            raise EmailRelayError("EmailJS is not properly configured. Please check your environment variables.")

        body: Dict[str, Any] = {
            "service_id": config.service_id,
            "template_id": config.template_id,
            "user_id": config.public_key,
            "template_params": template_params,
        }
        if config.private_key:
            body["accessToken"] = config.private_key

        try:
            if self._http is not None:
                response = await self._http.post(config.api_url, json=body)
            else:
                async with httpx.AsyncClient(timeout=15.0) as client:
                    response = await client.post(config.api_url, json=body)
        except httpx.HTTPError as e:
            logger.error(f"EmailJS request failed: {e}")
            raise EmailRelayError(f"Failed to send email: {e}") from e

        if response.status_code != 200:
            logger.error(f"EmailJS returned status {response.status_code}: {response.text}")
            raise EmailRelayError(f"EmailJS returned status {response.status_code}")
        logger.info(f"Contact email relayed for {template_params.get('from_email')}")


async def send_contact_email(form: Any) -> None:
    client = EmailJSClient()
    await client.send(build_template_params(form, client.config.to_email))
