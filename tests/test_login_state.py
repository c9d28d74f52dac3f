from client.login_state import (
    AuthSession, LoginPhase, LoginState, reduce,
    SubmitCredentials, CredentialsRejected, OtpSent, OtpSendFailed,
    EnterDigits, RequestVerify, OtpRejected, OtpVerified,
    SessionEstablished, SessionFailed,
    RequestResend, ResendSucceeded, ResendFailed, BackToLogin,
    SignUpCompleted, SignUpFailed,
    PasswordChanged, PasswordChangeFailed,
)


def _awaiting(code=""):
    state = reduce(LoginState(), SubmitCredentials(email=" a@x.com ", password="hunter22"))
    state = reduce(state, OtpSent(user_id="user-1"))
    if code:
        state = reduce(state, EnterDigits(value=code))
    return state


def test_submit_moves_to_credentials_submitted():
    state = reduce(LoginState(), SubmitCredentials(email=" a@x.com ", password="hunter22"))
    assert state.phase == LoginPhase.CREDENTIALS_SUBMITTED
    assert state.email == "a@x.com"
    assert state.in_flight == "send"


def test_submit_ignored_while_in_flight():
    state = reduce(LoginState(), SubmitCredentials(email="a@x.com", password="pw"))
    assert reduce(state, SubmitCredentials(email="b@x.com", password="pw")) is state


def test_rejected_credentials_return_to_idle_without_password():
    state = reduce(LoginState(), SubmitCredentials(email="a@x.com", password="wrong"))
    state = reduce(state, CredentialsRejected(message="Invalid login credentials"))
    assert state.phase == LoginPhase.IDLE
    assert state.error == "Invalid login credentials"
    assert state.password == ""
    assert not state.busy


def test_send_failure_returns_to_idle():
    state = reduce(LoginState(), SubmitCredentials(email="a@x.com", password="pw"))
    state = reduce(state, OtpSendFailed(message="Failed to send verification code"))
    assert state.phase == LoginPhase.IDLE
    assert state.email == ""
    assert state.password == ""


def test_otp_sent_retains_identity():
    state = _awaiting()
    assert state.phase == LoginPhase.AWAITING_OTP
    assert state.user_id == "user-1"
    assert state.email == "a@x.com"
    assert state.password == "hunter22"
    assert state.notice == "Verification code sent to your email!"
    assert not state.busy


def test_enter_digits_keeps_six_digits_only():
    state = reduce(_awaiting(), EnterDigits(value="12a3 4-5678"))
    assert state.otp_code == "123456"


def test_verify_with_short_code_stays_put():
    state = reduce(_awaiting("12345"), RequestVerify())
    assert state.phase == LoginPhase.AWAITING_OTP
    assert state.error == "Please enter a valid 6-digit code"
    assert not state.busy


def test_verify_then_reject():
    state = reduce(_awaiting("123456"), RequestVerify())
    assert state.phase == LoginPhase.VERIFYING
    assert state.in_flight == "verify"
    assert reduce(state, RequestVerify()) is state

    state = reduce(state, OtpRejected(message="Invalid or expired OTP"))
    assert state.phase == LoginPhase.AWAITING_OTP
    assert state.error == "Invalid or expired OTP"
    assert state.otp_code == "123456"


def test_verified_then_session_established_clears_secrets():
    state = reduce(_awaiting("123456"), RequestVerify())
    state = reduce(state, OtpVerified())
    assert state.phase == LoginPhase.VERIFYING

    session = AuthSession(user_id="user-1", email="a@x.com", access_token="tok")
    state = reduce(state, SessionEstablished(session=session))
    assert state.phase == LoginPhase.AUTHENTICATED
    assert state.session == session
    assert state.password == ""
    assert state.otp_code == ""
    assert state.notice == "Welcome back!"


def test_session_failure_returns_to_awaiting_otp():
    state = reduce(_awaiting("123456"), RequestVerify())
    state = reduce(state, SessionFailed(message="Invalid login credentials"))
    assert state.phase == LoginPhase.AWAITING_OTP
    assert state.error == "Invalid login credentials"
    assert not state.busy


def test_resend_clears_digits():
    state = reduce(_awaiting("123"), RequestResend())
    assert state.in_flight == "send"
    assert reduce(state, RequestVerify()) is state
    state = reduce(state, ResendSucceeded())
    assert state.otp_code == ""
    assert state.notice == "New verification code sent!"
    assert state.phase == LoginPhase.AWAITING_OTP


def test_resend_failure_keeps_phase():
    state = reduce(reduce(_awaiting("123"), RequestResend()), ResendFailed(message="Failed to resend verification code"))
    assert state.phase == LoginPhase.AWAITING_OTP
    assert state.error == "Failed to resend verification code"
    assert state.otp_code == "123"


def test_back_to_login_discards_everything():
    state = reduce(_awaiting("123456"), BackToLogin())
    assert state == LoginState()


def test_events_for_other_phases_are_ignored():
    idle = LoginState()
    for event in (OtpSent(user_id="u"), RequestVerify(), RequestResend(), BackToLogin(),
                  EnterDigits(value="123456"), OtpRejected(message="x")):
        assert reduce(idle, event) is idle

    awaiting = _awaiting()
    assert reduce(awaiting, SignUpCompleted()) is awaiting


def test_sign_up_outcomes_in_idle():
    state = reduce(LoginState(), SignUpCompleted())
    assert state.notice == "Account created successfully!"
    state = reduce(state, SignUpFailed(message="User already registered"))
    assert state.error == "User already registered"
    assert state.phase == LoginPhase.IDLE


def test_password_change_outcomes_only_when_authenticated():
    idle = LoginState()
    assert reduce(idle, PasswordChanged()) is idle
    assert reduce(idle, PasswordChangeFailed(message="x")) is idle

    session = AuthSession(user_id="user-1", email="a@x.com")
    state = reduce(reduce(_awaiting("123456"), RequestVerify()), SessionEstablished(session=session))
    state = reduce(state, PasswordChangeFailed(message="New passwords do not match"))
    assert state.error == "New passwords do not match"
    state = reduce(state, PasswordChanged())
    assert state.error is None
    assert state.notice == "Password changed successfully!"
    assert state.session == session
