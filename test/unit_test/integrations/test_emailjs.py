"""Unit tests for the EmailJS contact relay."""

import json
from types import SimpleNamespace

import httpx
import pytest

from realty_portal.integrations.emailjs import EmailJSClient, EmailRelayError, build_template_params
from realty_portal.server.core.config import EmailJSConfig

API_URL = "http://mock-emailjs/api/v1.0/email/send"


def _config(**overrides) -> EmailJSConfig:
    values = {
        "service_id": "service_1",
        "template_id": "template_1",
        "public_key": "public_1",
        "private_key": None,
        "to_email": "sales@example.com",
        "api_url": API_URL,
    }
    values.update(overrides)
    return EmailJSConfig(**values)


def _form(**overrides):
    values = {
        "full_name": "Juan dela Cruz",
        "email": "juan@example.com",
        "phone": None,
        "interest": "buying",
        "message": "Is the Makati unit still available?",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_build_template_params_fills_blanks():
    params = build_template_params(_form(), None)

    assert params == {
        "from_name": "Juan dela Cruz",
        "from_email": "juan@example.com",
        "phone": "",
        "interest": "buying",
        "message": "Is the Makati unit still available?",
        "to_email": "",
    }


class TestEmailJSClient:
    async def test_sends_expected_body(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, text="OK")

        client = EmailJSClient(_config(private_key="private_1"), httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        await client.send(build_template_params(_form(), "sales@example.com"))

        assert captured["url"] == API_URL
        assert captured["body"]["service_id"] == "service_1"
        assert captured["body"]["template_id"] == "template_1"
        assert captured["body"]["user_id"] == "public_1"
        assert captured["body"]["accessToken"] == "private_1"
        assert captured["body"]["template_params"]["to_email"] == "sales@example.com"

    async def test_access_token_omitted_without_private_key(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200)

        client = EmailJSClient(_config(), httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        await client.send({"from_email": "juan@example.com"})

        assert "accessToken" not in captured["body"]

    async def test_not_configured(self):
        client = EmailJSClient(_config(service_id=None))

        with pytest.raises(EmailRelayError, match="not properly configured"):
            await client.send({})

    async def test_non_200_reply(self):
        client = EmailJSClient(
            _config(), httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(400, text="bad")))
        )

        with pytest.raises(EmailRelayError, match="status 400"):
            await client.send({})

    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = EmailJSClient(_config(), httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        with pytest.raises(EmailRelayError, match="Failed to send email"):
            await client.send({})
