from datetime import date
from typing import Annotated

from fastapi import APIRouter
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from linkup import utils
from linkup.core.modules.auth.models import RegisterData, RegistrationResult, UsernameAvailability
from linkup.errors import ValidationError
from linkup.web.deps import AppDep
from linkup.web.openapi import ERROR_RESPONSES
from linkup.web.responses import SuccessResponse, success

router = APIRouter(prefix="/auth", tags=["auth"])


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not utils.is_email(value):
        raise ValueError("Email must be valid")
    return value


def _normalize_login_name(value: str) -> str:
    value = value.strip()
    if utils.is_email(value):
        return value.lower()
    if utils.is_login_username(value):
        return value
    raise ValueError("Must be a valid email or username")


def _alphanumeric(value: str) -> str:
    if not value.isascii() or not value.isalnum():
        raise ValueError("Username must be alphanumeric")
    return value


Email = Annotated[str, AfterValidator(_normalize_email)]
LoginName = Annotated[str, StringConstraints(min_length=1), AfterValidator(_normalize_login_name)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50), AfterValidator(_alphanumeric)]
Password = Annotated[str, StringConstraints(min_length=8)]
OtpCode = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\d{6}$")]


class RegisterRequest(BaseModel):
    """Account registration request."""

    first_name: PersonName = Field(..., alias="firstName")
    last_name: PersonName = Field(..., alias="lastName")
    date_of_birth: date = Field(..., alias="dateOfBirth", description="ISO 8601 date")
    username: Username
    email: Email
    password: Password

    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    """Authentication request."""

    login_name: LoginName = Field(..., alias="loginName", description="Email or username")
    password: Password

    model_config = ConfigDict(populate_by_name=True)


class ConfirmRegistrationRequest(BaseModel):
    email: Email
    otp: OtpCode


class ForgotPasswordRequest(BaseModel):
    login_name: LoginName = Field(..., alias="loginName", description="Email or username")

    model_config = ConfigDict(populate_by_name=True)


class ChangePasswordRequest(BaseModel):
    login_name: LoginName = Field(..., alias="loginName", description="Email or username")
    otp: OtpCode
    new_password: Password = Field(..., alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)


class GenerateUsernameRequest(BaseModel):
    base_username: Username = Field(..., alias="baseUsername")
    first_name: str | None = Field(None, alias="firstName", max_length=100)

    model_config = ConfigDict(populate_by_name=True)


class ValidateUsernameRequest(BaseModel):
    username: Username


class TokenData(BaseModel):
    """Session token for subsequent requests."""

    token: str = Field(..., description="Bearer token, valid for one day")


class GeneratedUsername(BaseModel):
    username: str


@router.post(
    "/register",
    summary="Register account",
    description="Create an account pending email verification. A verification OTP is emailed; no token is issued.",
    operation_id="register",
    responses=ERROR_RESPONSES,
)
async def register(request: RegisterRequest, app: AppDep) -> SuccessResponse[RegistrationResult]:
    errors: dict[str, str] = {}
    if await app.username_exists(request.username):
        errors["[body.username]"] = "Username must be unique"
    if await app.email_exists(request.email):
        errors["[body.email]"] = "Email must be unique"
    if errors:
        raise ValidationError("Validation Error", errors)

    result = await app.register(
        RegisterData(
            first_name=request.first_name,
            last_name=request.last_name,
            date_of_birth=request.date_of_birth,
            username=request.username,
            email=request.email,
            password=request.password,
        )
    )
    return success(result, "Registered")


@router.post(
    "/login",
    summary="Authenticate user",
    description="Authenticate a verified account with email or username and password.",
    operation_id="login",
    responses=ERROR_RESPONSES,
)
async def login(request: LoginRequest, app: AppDep) -> SuccessResponse[TokenData]:
    token = await app.login(request.login_name, request.password)
    return success(TokenData(token=token), "Login successful")


@router.post(
    "/confirm-registration",
    summary="Confirm registration",
    description="Verify the account with the emailed OTP and receive a session token.",
    operation_id="confirmRegistration",
    responses=ERROR_RESPONSES,
)
async def confirm_registration(request: ConfirmRegistrationRequest, app: AppDep) -> SuccessResponse[TokenData]:
    token = await app.confirm_registration(request.email, request.otp)
    return success(TokenData(token=token), "Account verified")


@router.post(
    "/forgot-password",
    summary="Request password reset",
    description="Email a password reset OTP to the account.",
    operation_id="forgotPassword",
    responses=ERROR_RESPONSES,
)
async def forgot_password(request: ForgotPasswordRequest, app: AppDep) -> SuccessResponse[None]:
    await app.forgot_password(request.login_name)
    return success(None, "Password reset OTP sent")


@router.post(
    "/change-password",
    summary="Reset password",
    description="Set a new password using a password reset OTP.",
    operation_id="changePassword",
    responses=ERROR_RESPONSES,
)
async def change_password(request: ChangePasswordRequest, app: AppDep) -> SuccessResponse[None]:
    await app.change_password(request.login_name, request.otp, request.new_password)
    return success(None, "Password changed successfully")


@router.post(
    "/generate-username",
    summary="Generate username",
    description="Return the base username if free, otherwise a generated available variant.",
    operation_id="generateUsername",
    responses=ERROR_RESPONSES,
)
async def generate_username(request: GenerateUsernameRequest, app: AppDep) -> SuccessResponse[GeneratedUsername]:
    username = await app.generate_username(request.base_username, request.first_name)
    return success(GeneratedUsername(username=username), "Username generated")


@router.post(
    "/validate-username",
    summary="Check username availability",
    description="Report whether a username is available, with suggestions when it is taken.",
    operation_id="validateUsername",
    responses=ERROR_RESPONSES,
)
async def validate_username(request: ValidateUsernameRequest, app: AppDep) -> SuccessResponse[UsernameAvailability]:
    availability = await app.validate_username(request.username)
    message = "Username is available" if availability.available else "Username is taken"
    return success(availability, message)
