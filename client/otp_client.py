import os
from typing import Optional

import httpx

from utils.logger_factory import new_logger, mask_email

DEFAULT_OTP_API_URL = "http://localhost:8000/api/send-otp"


class OtpApiError(Exception):
    """The OTP endpoint refused the request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class OtpApiClient:
    """Calls the send/verify endpoint. Every request is bounded by ``timeout``."""

    def __init__(self, url: Optional[str] = None, timeout: float = 15.0, http_client: Optional[httpx.Client] = None):
        self.url = url or os.getenv("OTP_API_URL", DEFAULT_OTP_API_URL)
        self.http = http_client or httpx.Client(timeout=timeout)
        self.log = new_logger("otp_api_client")

    def send(self, email: str, user_id: str) -> str:
        return self._post({"action": "send", "email": email, "userId": user_id},
                          fallback_error="Failed to send verification code")

    def verify(self, email: str, code: str) -> str:
        return self._post({"action": "verify", "email": email, "code": code},
                          fallback_error="Invalid verification code")

    def close(self):
        self.http.close()

    def _post(self, body, fallback_error):
        try:
            resp = self.http.post(self.url, json=body)
        except httpx.TimeoutException:
            self.log.warning(f"OTP {body['action']} timed out for {mask_email(body['email'])}")
            raise OtpApiError("The request timed out. Please try again.")
        except httpx.HTTPError as e:
            self.log.error(f"OTP {body['action']} request failed: {e}")
            raise OtpApiError(fallback_error)

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if resp.status_code != 200 or data.get("error") or not data.get("success"):
            message = data.get("error") or fallback_error
            self.log.info(f"OTP {body['action']} rejected ({resp.status_code}): {message}")
            raise OtpApiError(message, status_code=resp.status_code)
        return data.get("message", "")
