"""
Persistence of outstanding OTP records.

The store is the only component that reads or writes ``otp_codes`` rows.
Transient connection failures are retried; anything else is rolled back and
reported as a StorageError.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log

from models.otp_code import OtpCode
from services.errors import StorageError
from utils.logger_factory import new_logger, mask_email

otp_store_retry_logger = new_logger("otp_store_retry")

db_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(otp_store_retry_logger, logging.WARNING),
    reraise=True,
)


class OtpCodeStore:
    def __init__(self, db: Session):
        self.db = db
        self.log = new_logger("otp_store")

    def invalidate_all(self, email: str) -> int:
        """Delete every record for ``email``. Returns how many rows went away."""
        try:
            deleted = self._delete_for_email(email)
        except SQLAlchemyError:
            self.log.exception(f"Failed to clear previous codes for {mask_email(email)}")
            raise StorageError()
        if deleted:
            self.log.info(f"Removed {deleted} previous code(s) for {mask_email(email)}")
        return deleted

    def put(self, owner_identity: str, email: str, code: str, expires_at: datetime) -> OtpCode:
        record = OtpCode(
            user_id=owner_identity,
            email=email,
            code=code,
            expires_at=expires_at,
            used=False,
        )
        try:
            self._insert(record)
        except SQLAlchemyError:
            self.log.exception(f"Failed to store code for {mask_email(email)}")
            raise StorageError()
        self.log.info(f"Stored code [{record.to_dict()}]")
        return record

    def find_valid(self, email: str, code: str, now: datetime) -> Optional[OtpCode]:
        try:
            return self._select_valid(email, code, now)
        except SQLAlchemyError:
            self.log.exception(f"Failed to look up code for {mask_email(email)}")
            raise StorageError("Failed to verify OTP")

    def consume(self, record_id: int) -> bool:
        """
        Mark the record used if it still is unused.

        Returns False only when another request consumed the record first.
        Backend failures are logged and treated as consumed: the caller has
        already established that the code is valid.
        """
        try:
            updated = self._mark_used(record_id)
        except SQLAlchemyError:
            self.log.exception(f"Failed to mark code {record_id} as used")
            return True
        if updated == 0:
            self.log.warning(f"Code {record_id} was consumed by a concurrent request")
            return False
        return True

    @db_retry
    def _delete_for_email(self, email):
        try:
            deleted = self.db.query(OtpCode).filter(OtpCode.email == email).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return deleted

    @db_retry
    def _insert(self, record):
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError:
            self.db.rollback()
            raise

    @db_retry
    def _select_valid(self, email, code, now):
        try:
            return (
                self.db.query(OtpCode)
                .filter(
                    OtpCode.email == email,
                    OtpCode.code == code,
                    OtpCode.used == False,  # noqa: E712
                    OtpCode.expires_at > now,
                )
                .order_by(OtpCode.created_at.desc())
                .first()
            )
        except SQLAlchemyError:
            self.db.rollback()
            raise

    @db_retry
    def _mark_used(self, record_id):
        try:
            updated = (
                self.db.query(OtpCode)
                .filter(OtpCode.id == record_id, OtpCode.used == False)  # noqa: E712
                .update({"used": True}, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return updated
