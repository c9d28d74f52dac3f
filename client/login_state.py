"""
Two-phase sign-in as an explicit state machine.

``reduce`` is the single transition function: it takes the current
``LoginState`` and one event and returns the next state. It performs no I/O;
``client.orchestrator.LoginOrchestrator`` runs the network calls and feeds
their outcomes back in as events.

    IDLE -> CREDENTIALS_SUBMITTED -> AWAITING_OTP -> VERIFYING -> AUTHENTICATED

Failures fall back to IDLE before a code has been issued and to
AWAITING_OTP afterwards.
"""
import enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

OTP_LENGTH = 6


class LoginPhase(str, enum.Enum):
    IDLE = "idle"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    AWAITING_OTP = "awaiting_otp"
    VERIFYING = "verifying"
    AUTHENTICATED = "authenticated"


class AuthSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class LoginState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: LoginPhase = LoginPhase.IDLE
    email: str = ""
    user_id: str = ""
    # Held only until the final sign-in; cleared on every exit path.
    password: str = ""
    otp_code: str = ""
    in_flight: Optional[Literal["send", "verify"]] = None
    error: Optional[str] = None
    notice: Optional[str] = None
    session: Optional[AuthSession] = None

    @property
    def busy(self) -> bool:
        return self.in_flight is not None

    @property
    def can_verify(self) -> bool:
        return (
            self.phase == LoginPhase.AWAITING_OTP
            and not self.busy
            and len(self.otp_code) == OTP_LENGTH
        )


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class SubmitCredentials(_Event):
    email: str
    password: str


class CredentialsRejected(_Event):
    message: str


class OtpSent(_Event):
    user_id: str


class OtpSendFailed(_Event):
    message: str


class EnterDigits(_Event):
    value: str


class RequestVerify(_Event):
    pass


class OtpRejected(_Event):
    message: str


class OtpVerified(_Event):
    pass


class SessionEstablished(_Event):
    session: AuthSession


class SessionFailed(_Event):
    message: str


class RequestResend(_Event):
    pass


class ResendSucceeded(_Event):
    pass


class ResendFailed(_Event):
    message: str


class BackToLogin(_Event):
    pass


class SignUpCompleted(_Event):
    pass


class SignUpFailed(_Event):
    message: str


class PasswordChanged(_Event):
    pass


class PasswordChangeFailed(_Event):
    message: str


LoginEvent = Union[
    SubmitCredentials, CredentialsRejected, OtpSent, OtpSendFailed,
    EnterDigits, RequestVerify, OtpRejected, OtpVerified,
    SessionEstablished, SessionFailed,
    RequestResend, ResendSucceeded, ResendFailed, BackToLogin,
    SignUpCompleted, SignUpFailed,
    PasswordChanged, PasswordChangeFailed,
]


def _digits_only(value: str) -> str:
    return "".join(ch for ch in value if ch.isdigit())[:OTP_LENGTH]


def _update(state: LoginState, **changes) -> LoginState:
    return state.model_copy(update=changes)


def reduce(state: LoginState, event: LoginEvent) -> LoginState:
    phase = state.phase

    if isinstance(event, SubmitCredentials):
        if phase != LoginPhase.IDLE or state.busy:
            return state
        return LoginState(
            phase=LoginPhase.CREDENTIALS_SUBMITTED,
            email=event.email.strip(),
            password=event.password,
            in_flight="send",
        )

    if isinstance(event, (CredentialsRejected, OtpSendFailed)):
        if phase != LoginPhase.CREDENTIALS_SUBMITTED:
            return state
        # Nothing pending survives a failed first step.
        return LoginState(error=event.message)

    if isinstance(event, OtpSent):
        if phase != LoginPhase.CREDENTIALS_SUBMITTED:
            return state
        return _update(
            state,
            phase=LoginPhase.AWAITING_OTP,
            user_id=event.user_id,
            otp_code="",
            in_flight=None,
            error=None,
            notice="Verification code sent to your email!",
        )

    if isinstance(event, EnterDigits):
        if phase != LoginPhase.AWAITING_OTP or state.busy:
            return state
        return _update(state, otp_code=_digits_only(event.value), error=None)

    if isinstance(event, RequestVerify):
        if phase != LoginPhase.AWAITING_OTP or state.busy:
            return state
        if len(state.otp_code) != OTP_LENGTH:
            return _update(state, error="Please enter a valid 6-digit code", notice=None)
        return _update(state, phase=LoginPhase.VERIFYING, in_flight="verify", error=None, notice=None)

    if isinstance(event, OtpRejected):
        if phase != LoginPhase.VERIFYING:
            return state
        return _update(state, phase=LoginPhase.AWAITING_OTP, in_flight=None, error=event.message)

    if isinstance(event, OtpVerified):
        # Still VERIFYING while the final password sign-in runs.
        return state

    if isinstance(event, SessionEstablished):
        if phase != LoginPhase.VERIFYING:
            return state
        return LoginState(
            phase=LoginPhase.AUTHENTICATED,
            email=state.email,
            user_id=event.session.user_id,
            session=event.session,
            notice="Welcome back!",
        )

    if isinstance(event, SessionFailed):
        if phase != LoginPhase.VERIFYING:
            return state
        return _update(state, phase=LoginPhase.AWAITING_OTP, in_flight=None, error=event.message)

    if isinstance(event, RequestResend):
        if phase != LoginPhase.AWAITING_OTP or state.busy:
            return state
        return _update(state, in_flight="send", error=None, notice=None)

    if isinstance(event, ResendSucceeded):
        if phase != LoginPhase.AWAITING_OTP or state.in_flight != "send":
            return state
        return _update(state, in_flight=None, otp_code="", notice="New verification code sent!")

    if isinstance(event, ResendFailed):
        if phase != LoginPhase.AWAITING_OTP or state.in_flight != "send":
            return state
        return _update(state, in_flight=None, error=event.message)

    if isinstance(event, BackToLogin):
        if phase != LoginPhase.AWAITING_OTP or state.busy:
            return state
        return LoginState()

    if isinstance(event, SignUpCompleted):
        if phase != LoginPhase.IDLE:
            return state
        return _update(state, error=None, notice="Account created successfully!")

    if isinstance(event, SignUpFailed):
        if phase != LoginPhase.IDLE:
            return state
        return _update(state, error=event.message, notice=None)

    if isinstance(event, PasswordChanged):
        if phase != LoginPhase.AUTHENTICATED:
            return state
        return _update(state, error=None, notice="Password changed successfully!")

    if isinstance(event, PasswordChangeFailed):
        if phase != LoginPhase.AUTHENTICATED:
            return state
        return _update(state, error=event.message, notice=None)

    return state
