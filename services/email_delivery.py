"""
Delivery of login codes through the Resend transactional email API.

Only submission to the API is confirmed; inbox arrival is not. Failed
submissions raise DeliveryError and are not retried, so the caller can abort
issuance instead of telling the user a code is on its way.
"""
import os
from typing import Optional

import requests

from services.errors import DeliveryError
from utils.logger_factory import new_logger, mask_email

RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
DEFAULT_FROM_ADDRESS = "FinXpress <onboarding@resend.dev>"
OTP_VALIDITY_MINUTES = 10


def render_otp_email(code: str, validity_minutes: int = OTP_VALIDITY_MINUTES):
    """Return (subject, html, text) for a login code message."""
    subject = "Your FinXpress Login Code"

    text = f"""
FinXpress Login Verification

Your one-time verification code is: {code}

This code will expire in {validity_minutes} minutes.
If you didn't request this code, please ignore this email.
"""

    html = f"""
<!DOCTYPE html>
<html>
  <head>
    <meta http-equiv="Content-Type" content="text/html; charset=utf-8">
    <title>FinXpress Login Verification</title>
  </head>
  <body style="margin:0; padding:0; background-color:#f6f7f9;">
    <table role="presentation" cellpadding="0" cellspacing="0" border="0" width="100%" style="background-color:#f6f7f9;">
      <tr>
        <td align="center" style="padding:24px 12px;">
          <table role="presentation" cellpadding="0" cellspacing="0" border="0" width="480" style="width:480px; max-width:480px; background-color:#ffffff; border-radius:16px;">
            <tr>
              <td align="center" style="padding:32px 24px 8px 24px; font-family:Arial, sans-serif;">
                <div style="font-size:22px; color:#333333; font-weight:700;">FinXpress Login Verification</div>
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:8px 24px; font-family:Arial, sans-serif; font-size:16px; color:#666666;">
                Your one-time verification code is:
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:16px 24px;">
                <div style="font-family:Arial, sans-serif; font-size:32px; letter-spacing:8px; color:#ffffff; font-weight:700; background-color:#667eea; border-radius:10px; padding:20px;">{code}</div>
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:0 24px 8px 24px; font-family:Arial, sans-serif; font-size:14px; color:#666666;">
                This code will expire in {validity_minutes} minutes.
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:0 24px 32px 24px; font-family:Arial, sans-serif; font-size:12px; color:#999999;">
                If you didn't request this code, please ignore this email.
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
"""
    return subject, html, text


class ResendEmailSender:
    """Submits login code emails to Resend."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_address: Optional[str] = None,
        api_url: str = RESEND_API_URL,
        timeout: float = 10,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("RESEND_API_KEY")
        self.from_address = from_address or os.getenv("OTP_EMAIL_FROM", DEFAULT_FROM_ADDRESS)
        self.api_url = api_url
        self.timeout = timeout
        self.log = new_logger("resend_email_sender")

    def send_otp(self, to_email: str, code: str) -> str:
        """Submit the message and return the provider's message id."""
        if not self.api_key:
            self.log.error("RESEND_API_KEY is not configured")
            raise DeliveryError()

        subject, html, text = render_otp_email(code)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            "from": self.from_address,
            "to": [to_email],
            "subject": subject,
            "html": html,
            "text": text,
        }

        try:
            resp = requests.post(self.api_url, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            self.log.error(f"Email API request failed for {mask_email(to_email)}: {e}")
            raise DeliveryError()

        if resp.status_code >= 300:
            self.log.error(
                f"Email API rejected message for {mask_email(to_email)}: {resp.status_code} {resp.text[:300]}"
            )
            raise DeliveryError()

        try:
            message_id = resp.json().get("id")
        except ValueError:
            message_id = None
        self.log.info(f"OTP email submitted to {mask_email(to_email)} (id={message_id})")
        return message_id
