from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index, func
from database import Base


class OtpCode(Base):
    __tablename__ = "otp_codes"
    __table_args__ = (
        Index("idx_otp_codes_email_code", "email", "code"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    email = Column(String, index=True, nullable=False)
    code = Column(String(6), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, default=False, nullable=False)

    def to_dict(self):
        # code deliberately left out, this is what ends up in the logs
        return {
            "id": self.id,
            "user_id": self.user_id,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "used": self.used,
        }
