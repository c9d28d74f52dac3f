import secrets

OTP_LENGTH = 6
_LOWEST_CODE = 10 ** (OTP_LENGTH - 1)
_CODE_SPAN = 9 * _LOWEST_CODE


def generate_otp_code() -> str:
    """Uniform draw from 100000..999999, so the code is always six digits."""
    return str(_LOWEST_CODE + secrets.randbelow(_CODE_SPAN))
