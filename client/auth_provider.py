"""
Password authentication provider used by the login flow.

The provider verifies email+password and issues or revokes sessions. The
login orchestrator depends only on ``AuthProvider``; ``SupabaseAuthProvider``
is the production implementation.
"""
import os
from abc import ABC, abstractmethod
from typing import Literal, Optional

from pydantic import BaseModel
from supabase import create_client, Client

from client.login_state import AuthSession
from utils.logger_factory import new_logger, mask_email


class AuthProviderError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SignUpDetails(BaseModel):
    email: str
    password: str
    full_name: str
    user_type: Literal["student", "professional"] = "student"
    language: str = "en"
    monthly_amount: Optional[str] = None
    email_redirect_to: Optional[str] = None


class AuthProvider(ABC):
    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """Return a live session, or raise AuthProviderError on bad credentials."""

    @abstractmethod
    def sign_out(self) -> None:
        pass

    @abstractmethod
    def update_user(self, password: str) -> None:
        pass

    @abstractmethod
    def sign_up(self, details: SignUpDetails) -> Optional[str]:
        """Create an account and return its user id when the provider reports one."""


class SupabaseAuthProvider(AuthProvider):
    def __init__(self, client: Optional[Client] = None):
        if client is None:
            url = os.getenv("SUPABASE_URL")
            key = os.getenv("SUPABASE_ANON_KEY")
            if not url or not key:
                raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment variables.")
            client = create_client(url, key)
        self.client = client
        self.log = new_logger("supabase_auth")

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            res = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            self.log.info(f"Password sign-in failed for {mask_email(email)}: {e}")
            raise AuthProviderError(str(e) or "Invalid login credentials")
        if not res.user:
            raise AuthProviderError("Invalid login credentials")
        session = res.session
        return AuthSession(
            user_id=str(res.user.id),
            email=res.user.email or email,
            access_token=session.access_token if session else None,
            refresh_token=session.refresh_token if session else None,
        )

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            self.log.error(f"Sign-out failed: {e}")
            raise AuthProviderError("Failed to sign out")

    def update_user(self, password: str) -> None:
        try:
            self.client.auth.update_user({"password": password})
        except Exception as e:
            self.log.error(f"Password update failed: {e}")
            raise AuthProviderError(str(e) or "Failed to update password")

    def sign_up(self, details: SignUpDetails) -> Optional[str]:
        options = {
            "data": {
                "full_name": details.full_name,
                "user_type": details.user_type,
                "language": details.language,
                "monthly_amount": details.monthly_amount,
            }
        }
        if details.email_redirect_to:
            options["email_redirect_to"] = details.email_redirect_to
        try:
            res = self.client.auth.sign_up({
                "email": details.email,
                "password": details.password,
                "options": options,
            })
        except Exception as e:
            self.log.info(f"Sign-up failed for {mask_email(details.email)}: {e}")
            raise AuthProviderError(str(e) or "Failed to create account")
        return str(res.user.id) if res.user else None
