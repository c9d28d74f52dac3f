from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from api.otp import CORS_HEADERS
from services.errors import OtpError
from utils.logger_factory import new_logger


app = FastAPI(title="FinXpress API")


@app.middleware("http")
async def log_request(request: Request, call_next):
    # Request bodies carry passwords and codes, so only the line is logged
    log = new_logger("log_request")
    log.info(f"INCOMING REQUEST: {request.method} {request.url.path}")
    response = await call_next(request)
    # Every response is CORS-open, with or without an Origin header.
    # Pre-flights are answered by the OPTIONS routes themselves.
    for name, value in CORS_HEADERS.items():
        response.headers.setdefault(name, value)
    log.info(f"RESPONSE: {request.method} {request.url.path} -> {response.status_code}")
    return response


@app.exception_handler(OtpError)
async def otp_error_handler(request: Request, exc: OtpError):
    log = new_logger("otp_error_handler")
    log.info(f"{request.url.path} -> {exc.status_code} {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=CORS_HEADERS)


@app.get("/")
def root():
    return {"message": "FinXpress API deployed."}


from api.otp import router as otp_router
from api.healthcheck import router as health_router

app.include_router(otp_router, prefix="/api")
app.include_router(health_router, prefix="/api")
