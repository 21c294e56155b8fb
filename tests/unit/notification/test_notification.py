"""Tests for OTP email rendering and HTTP delivery."""

import json

import httpx
import pytest

from linkup.core.modules.notification.mailer import HttpMailer
from linkup.core.modules.notification.models import EmailMessage, MailIntent
from linkup.core.modules.notification.templates import render_otp_email
from linkup.errors import EmailDeliveryError


class TestRenderOtpEmail:
    """Tests for render_otp_email function."""

    def test_verification_email(self):
        message = render_otp_email("alice@x.com", MailIntent.VERIFY, "482913")
        assert message.recipient == "alice@x.com"
        assert message.subject == "Verify your Linkup Account"
        assert "482913" in message.html
        assert message.text.startswith("Your Linkup verification code is: 482913")

    def test_password_reset_email(self):
        message = render_otp_email("bob@x.com", MailIntent.FORGOT_PASSWORD, "100000")
        assert message.subject == "Reset your Linkup Password"
        assert "Password Reset Code" in message.html
        assert "100000" in message.text

    def test_intent_values(self):
        assert MailIntent("verify") is MailIntent.VERIFY
        assert MailIntent("forgotpassword") is MailIntent.FORGOT_PASSWORD


def make_mailer(config, handler) -> HttpMailer:
    mailer = HttpMailer(config)
    mailer._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return mailer


MESSAGE = EmailMessage(recipient="alice@x.com", subject="Hi", html="<b>123456</b>", text="123456")


class TestHttpMailer:
    """Tests for HttpMailer against a mocked email API."""

    @pytest.mark.asyncio
    async def test_posts_payload_with_api_key(self, config):
        config.email_api_key = "key-123"
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"messageId": "abc"})

        mailer = make_mailer(config, handler)
        await mailer.send(MESSAGE)
        await mailer.close()

        assert len(requests) == 1
        assert str(requests[0].url) == config.email_api_url
        assert requests[0].headers["api-key"] == "key-123"
        payload = json.loads(requests[0].content)
        assert payload["to"] == [{"email": "alice@x.com"}]
        assert payload["sender"] == {"name": "Linkup", "email": config.email_from}
        assert payload["htmlContent"] == "<b>123456</b>"

    @pytest.mark.asyncio
    async def test_error_status_raises(self, config):
        config.email_api_key = "key-123"
        mailer = make_mailer(config, lambda request: httpx.Response(401, text="unauthorized"))
        with pytest.raises(EmailDeliveryError, match="401"):
            await mailer.send(MESSAGE)
        await mailer.close()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, config):
        config.email_api_key = "key-123"

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        mailer = make_mailer(config, handler)
        with pytest.raises(EmailDeliveryError, match="request failed"):
            await mailer.send(MESSAGE)
        await mailer.close()

    @pytest.mark.asyncio
    async def test_missing_api_key_raises(self, config):
        mailer = make_mailer(config, lambda request: httpx.Response(201))
        with pytest.raises(EmailDeliveryError, match="not configured"):
            await mailer.send(MESSAGE)
        await mailer.close()
