"""
Errors raised by the OTP issuance and verification paths.

Each error carries the HTTP status and the message that is safe to show to
the caller. Technical details belong in the logs, never in ``message``.
"""


class OtpError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(OtpError):
    """Missing or malformed request fields. Fixable by the client."""
    status_code = 400
    default_message = "Invalid request"


class InvalidOrExpiredCode(OtpError):
    """
    The submitted code cannot be accepted.

    Raised identically for a wrong code, an expired code, an already used code
    and an email that never had a code issued, so a guessing client learns
    nothing about which case it hit.
    """
    status_code = 400
    default_message = "Invalid or expired OTP"


class StorageError(OtpError):
    status_code = 500
    default_message = "Failed to generate OTP"


class DeliveryError(OtpError):
    status_code = 500
    default_message = "Failed to send verification email"
