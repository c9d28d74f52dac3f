"""
Issuance and verification of login codes.

``send`` and ``verify`` share nothing but the code store. Neither issues a
session: a successful verification only tells the client it may complete
the password sign-in.
"""
from datetime import datetime, timedelta, timezone

from schemas.otp import OtpResponse
from services.errors import ValidationError, InvalidOrExpiredCode
from services.otp_generator import generate_otp_code
from utils.logger_factory import new_logger, mask_email

CODE_EXPIRY_MINUTES = 10


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _blank(value) -> bool:
    return value is None or not str(value).strip()


class OtpService:
    def __init__(self, store, sender, clock=utc_now):
        self.store = store
        self.sender = sender
        self.clock = clock
        self.log = new_logger("otp_service")

    def send(self, email, owner_identity) -> OtpResponse:
        if _blank(email) or _blank(owner_identity):
            raise ValidationError("Email and userId are required")

        code = generate_otp_code()
        expires_at = self.clock() + timedelta(minutes=CODE_EXPIRY_MINUTES)

        # Not one transaction: a failure between the two leaves no code at all,
        # which only forces the user to ask for a new one.
        self.store.invalidate_all(email)
        self.store.put(owner_identity, email, code, expires_at)

        # DeliveryError propagates; the user must not be told a code was sent.
        self.sender.send_otp(email, code)

        self.log.info(f"OTP issued for {mask_email(email)}, expires at {expires_at.isoformat()}")
        return OtpResponse(success=True, message="OTP sent successfully")

    def verify(self, email, code) -> OtpResponse:
        if _blank(email) or _blank(code):
            raise ValidationError("Email and code are required")

        record = self.store.find_valid(email, code, self.clock())
        if record is None:
            self.log.info(f"OTP verification failed for {mask_email(email)}")
            raise InvalidOrExpiredCode()

        if not self.store.consume(record.id):
            raise InvalidOrExpiredCode()

        self.log.info(f"OTP verified for {mask_email(email)}")
        return OtpResponse(success=True, message="OTP verified successfully")
