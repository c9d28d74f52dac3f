from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SendOtpRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["send"]
    email: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


class VerifyOtpRequest(BaseModel):
    action: Literal["verify"]
    email: Optional[str] = None
    code: Optional[str] = None


# Presence of email/userId/code is checked by the handlers so that a missing
# field answers 400 with a readable message rather than a schema dump.
OtpRequest = Annotated[Union[SendOtpRequest, VerifyOtpRequest], Field(discriminator="action")]


class OtpResponse(BaseModel):
    success: bool
    message: str


class OtpErrorResponse(BaseModel):
    error: str
