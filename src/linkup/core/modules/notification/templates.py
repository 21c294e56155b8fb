"""OTP email content per intent, rendered with Liquid."""

import structlog
from liquid import Environment
from pydantic import BaseModel

from linkup.core.modules.notification.models import EmailMessage, MailIntent

logger = structlog.get_logger(__name__)

_env = Environment()


class OtpTemplate(BaseModel):
    subject: str
    intro: str
    purpose: str
    fallback_text: str  # Liquid template, receives `otp`


OTP_TEMPLATES: dict[MailIntent, OtpTemplate] = {
    MailIntent.VERIFY: OtpTemplate(
        subject="Verify your Linkup Account",
        intro="Verify your Linkup Account",
        purpose="Use the code below to verify your Linkup account. This code is valid for a limited time only.",
        fallback_text=(
            "Your Linkup verification code is: {{ otp }}\n\nIf you did not request this code, please ignore this email."
        ),
    ),
    MailIntent.FORGOT_PASSWORD: OtpTemplate(
        subject="Reset your Linkup Password",
        intro="Password Reset Code",
        purpose="Use the code below to reset your Linkup account password. This code is valid for a limited time only.",
        fallback_text=(
            "Your Linkup password reset code is: {{ otp }}\n\n"
            "If you did not request a password reset, please ignore this email."
        ),
    ),
}

OTP_HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width:400px; margin:auto; padding:24px;">
  <h2 style="margin:0 0 16px 0;">{{ intro }}</h2>
  <p style="margin:0 0 24px 0; line-height:1.5;">{{ purpose }}</p>
  <div style="font-size:2.2em; letter-spacing:8px; text-align:center; font-family:'Courier New', monospace;">{{ otp }}</div>
  <p style="margin:24px 0 0 0; font-size:12px;">If you did not request this code, please ignore this email.</p>
</div>
"""


def render_otp_email(recipient: str, intent: MailIntent, otp: str) -> EmailMessage:
    """Build the OTP email for an intent.

    Raises:
        ValueError: If template rendering fails
    """
    template = OTP_TEMPLATES[intent]
    try:
        html = _env.from_string(OTP_HTML_TEMPLATE).render(intro=template.intro, purpose=template.purpose, otp=otp)
        text = _env.from_string(template.fallback_text).render(otp=otp)
    except Exception as e:
        logger.exception("otp_email_render_failed", intent=intent, error=str(e))
        raise ValueError(f"Failed to render template: {e}") from e
    return EmailMessage(recipient=recipient, subject=template.subject, html=html, text=text)
