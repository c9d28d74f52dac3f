from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from database import get_db
from schemas.otp import OtpRequest, SendOtpRequest, OtpResponse
from services.email_delivery import ResendEmailSender
from services.errors import OtpError, ValidationError
from services.otp_service import OtpService
from services.otp_store import OtpCodeStore
from utils.logger_factory import new_logger

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

otp_request_adapter = TypeAdapter(OtpRequest)


def get_email_sender():
    return ResendEmailSender()


def get_otp_service(db: Session = Depends(get_db), sender=Depends(get_email_sender)):
    return OtpService(OtpCodeStore(db), sender)


async def _parse_otp_request(request: Request):
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid request body")
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body")
    if body.get("action") not in ("send", "verify"):
        raise ValidationError("Invalid action")
    try:
        return otp_request_adapter.validate_python(body)
    except PydanticValidationError:
        raise ValidationError("Invalid request body")


@router.options("/send-otp")
def send_otp_preflight():
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("/send-otp", response_model=OtpResponse)
async def send_otp(request: Request, service: OtpService = Depends(get_otp_service)):
    """
    Issue (``action: "send"``) or verify (``action: "verify"``) a login code.

    Errors are returned as ``{"error": message}`` by the OtpError handler
    registered on the app.
    """
    log = new_logger("send_otp")
    payload = await _parse_otp_request(request)
    log.info(f"OTP request action={payload.action}")
    try:
        if isinstance(payload, SendOtpRequest):
            return await run_in_threadpool(service.send, payload.email, payload.user_id)
        return await run_in_threadpool(service.verify, payload.email, payload.code)
    except OtpError:
        raise
    except Exception:
        log.exception(f"Unexpected error handling OTP action={payload.action}")
        raise OtpError()
