from typing import Callable, Optional

from client.auth_provider import AuthProvider, AuthProviderError, SignUpDetails
from client.login_state import (
    LoginPhase, LoginState, reduce,
    SubmitCredentials, CredentialsRejected, OtpSent, OtpSendFailed,
    EnterDigits, RequestVerify, OtpRejected, OtpVerified,
    SessionEstablished, SessionFailed,
    RequestResend, ResendSucceeded, ResendFailed, BackToLogin,
    SignUpCompleted, SignUpFailed,
    PasswordChanged, PasswordChangeFailed,
)
from client.otp_client import OtpApiClient, OtpApiError
from utils.logger_factory import new_logger, mask_email

MIN_PASSWORD_LENGTH = 6


class LoginOrchestrator:
    """
    Drives password sign-in followed by an emailed one-time code.

    A successful password check alone never leaves a live session: the session
    is signed out straight away and only re-established, with the same
    credentials, once the code has been verified. Wrong credentials never
    trigger a code email.

    All state lives in ``self.state``; ``on_change`` is called with every new
    state, which is how a UI re-renders.
    """

    def __init__(
        self,
        auth: AuthProvider,
        otp: OtpApiClient,
        on_change: Optional[Callable[[LoginState], None]] = None,
    ):
        self.auth = auth
        self.otp = otp
        self.on_change = on_change
        self.state = LoginState()
        self.log = new_logger("login_orchestrator")

    def dispatch(self, event) -> LoginState:
        previous = self.state
        self.state = reduce(previous, event)
        if self.state is not previous:
            self.log.info(f"{type(event).__name__}: {previous.phase.value} -> {self.state.phase.value}")
            if self.on_change:
                self.on_change(self.state)
        return self.state

    def submit_credentials(self, email: str, password: str) -> LoginState:
        before = self.state
        if self.dispatch(SubmitCredentials(email=email, password=password)) is before:
            return self.state
        email = self.state.email

        try:
            verified = self.auth.sign_in_with_password(email, password)
        except AuthProviderError as e:
            return self.dispatch(CredentialsRejected(message=e.message))

        try:
            self.auth.sign_out()
        except AuthProviderError:
            # A session we could not revoke must not be left behind an OTP screen
            self.log.error(f"Could not revoke password-only session for {mask_email(email)}")
            return self.dispatch(OtpSendFailed(message="Unable to complete sign-in. Please try again."))

        try:
            self.otp.send(email, verified.user_id)
        except OtpApiError as e:
            self.log.warning(f"OTP send failed for {mask_email(email)}: {e.message}")
            return self.dispatch(OtpSendFailed(message="Failed to send verification code"))

        return self.dispatch(OtpSent(user_id=verified.user_id))

    def enter_digits(self, value: str) -> LoginState:
        return self.dispatch(EnterDigits(value=value))

    def verify(self) -> LoginState:
        before = self.state
        after = self.dispatch(RequestVerify())
        if after is before or after.phase != LoginPhase.VERIFYING:
            return self.state
        email, password = self.state.email, self.state.password

        try:
            self.otp.verify(email, self.state.otp_code)
        except OtpApiError as e:
            return self.dispatch(OtpRejected(message=e.message))
        self.dispatch(OtpVerified())

        try:
            session = self.auth.sign_in_with_password(email, password)
        except AuthProviderError as e:
            return self.dispatch(SessionFailed(message=e.message))
        return self.dispatch(SessionEstablished(session=session))

    def resend(self) -> LoginState:
        before = self.state
        if self.dispatch(RequestResend()) is before:
            return self.state

        try:
            self.otp.send(self.state.email, self.state.user_id)
        except OtpApiError as e:
            self.log.warning(f"OTP resend failed for {mask_email(self.state.email)}: {e.message}")
            return self.dispatch(ResendFailed(message="Failed to resend verification code"))
        return self.dispatch(ResendSucceeded())

    def back_to_login(self) -> LoginState:
        return self.dispatch(BackToLogin())

    def sign_up(self, details: SignUpDetails) -> LoginState:
        if self.state.phase != LoginPhase.IDLE or self.state.busy:
            return self.state
        try:
            user_id = self.auth.sign_up(details)
        except AuthProviderError as e:
            return self.dispatch(SignUpFailed(message=e.message))
        self.log.info(f"Account created for {mask_email(details.email)} (user_id={user_id})")
        return self.dispatch(SignUpCompleted())

    def change_password(self, new_password: str, confirm_password: str) -> LoginState:
        """Set a new password for the signed-in user. Only valid once AUTHENTICATED."""
        if self.state.phase != LoginPhase.AUTHENTICATED:
            return self.state
        if new_password != confirm_password:
            return self.dispatch(PasswordChangeFailed(message="New passwords do not match"))
        if len(new_password) < MIN_PASSWORD_LENGTH:
            return self.dispatch(PasswordChangeFailed(message="Password must be at least 6 characters"))

        try:
            self.auth.update_user(new_password)
        except AuthProviderError as e:
            self.log.warning(f"Password change failed for {mask_email(self.state.email)}: {e.message}")
            return self.dispatch(PasswordChangeFailed(message=e.message))
        return self.dispatch(PasswordChanged())
