"""Response envelope shared by every endpoint."""

from typing import Any, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class SuccessResponse[T](BaseModel):
    """Successful response: status code, message and data payload."""

    response_code: int = Field(200, alias="ResponseCode")
    response_message: str = Field("Success", alias="ResponseMessage")
    data: T = Field(..., alias="Data")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error response: status code, message and error payload."""

    response_code: int = Field(..., alias="ResponseCode")
    response_message: str = Field(..., alias="ResponseMessage")
    error: Any = Field(None, alias="Error")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"ResponseCode": 401, "ResponseMessage": "Invalid email or password", "Error": None},
                {"ResponseCode": 400, "ResponseMessage": "Validation Error", "Error": {"[body.email]": "Email must be unique"}},
            ]
        },
    )


def success[T](data: T, message: str = "Success", code: int = 200) -> SuccessResponse[T]:
    return SuccessResponse(response_code=code, response_message=message, data=data)


def error_response(status_code: int, message: str, error: Any = None) -> JSONResponse:
    body = ErrorResponse(response_code=status_code, response_message=message, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))
