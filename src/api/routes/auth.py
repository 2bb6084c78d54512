"""Authentication routes - registration, login, Google sign-in, setup and password reset."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from urllib.parse import urlencode, urlsplit

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import (
    get_current_user,
    get_db_session,
    get_email_service,
    get_google_client,
    get_otp_store,
)
from src.api.schemas.auth import (
    AuthResponse,
    CompleteSetupRequest,
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    OnboardingRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SetupStatusEnvelope,
    SetupStatusResponse,
    UserResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from src.core.config import get_settings
from src.domain import User
from src.domain.services.auth_service import (
    AuthError,
    AuthResult,
    AuthService,
    InvalidCredentialsError,
    RoleNotAllowedError,
    UnverifiedEmailError,
    UserExistsError,
    UserNotFoundError,
    VehicleExistsError,
    user_to_dict,
)
from src.domain.services.notifications import EmailDispatchError, EmailService, LoginDetails
from src.domain.services.password_reset import (
    InvalidOtpError,
    InvalidResetTokenError,
    PasswordResetService,
)
from src.domain.services.setup_status import (
    AccountNotFoundError,
    SetupStatusService,
    can_access_dashboard,
    next_setup_step,
)
from src.domain.validation import (
    validate_complete_registration_data,
    validate_registration_data,
    validate_vehicle_data,
)
from src.infrastructure.otp_store import OtpStore
from src.libs.google_oauth import GoogleOAuthClientProtocol, GoogleOAuthError

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])

MOBILE_CLIENT = "mobile"


def _auth_payload(result: AuthResult, message: str) -> dict:
    return {
        "message": message,
        "token": result.token,
        "user": UserResponse(**result.user_dict()),
        "setup_status": SetupStatusResponse(**result.setup_status.to_dict()),
        "requires_setup": result.setup_status.requires_setup,
    }


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _frontend_callback(state: str | None, frontend_url: str) -> str:
    """Return ``state`` when it points into the frontend, otherwise its default callback."""
    default = f"{frontend_url}/auth/callback"
    if not state:
        return default

    target = urlsplit(state)
    frontend = urlsplit(frontend_url)
    base_path = frontend.path.rstrip("/")
    # Same origin only; userinfo would let the real host differ from the prefix
    if (
        "@" in target.netloc
        or target.scheme != frontend.scheme
        or target.netloc != frontend.netloc
    ):
        return default
    if base_path and target.path != base_path and not target.path.startswith(f"{base_path}/"):
        return default
    return state


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description=(
        "Create an account with email and password. Mobile clients "
        "(`X-Client-Type: mobile`) always register as car owners and finish "
        "registration later through `/auth/setup/details`."
    ),
)
async def register(
    payload: RegisterRequest,
    x_client_type: str | None = Header(default=None, alias="X-Client-Type"),
    session: AsyncSession = Depends(get_db_session),
    email_service: EmailService = Depends(get_email_service),
) -> AuthResponse:
    """Register a new user."""
    validation = validate_registration_data(payload.model_dump())
    if not validation.is_valid:
        raise _bad_request(validation.message)

    service = AuthService(session)
    try:
        result = await service.register_user(
            email=payload.email,
            password=payload.password,
            name=payload.name,
            phone=payload.phone,
            role=payload.role,
            profile_data=payload.profile_data.model_dump(),
            is_mobile=(x_client_type or "").lower() == MOBILE_CLIENT,
        )
    except UserExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except AuthError as exc:
        raise _bad_request(str(exc)) from exc

    try:
        await email_service.send_welcome_email(result.user.email, result.user.name)
    except EmailDispatchError as exc:
        logger.warning("welcome_email_skipped", user_id=result.user.id, error=str(exc))

    return AuthResponse(**_auth_payload(result, "User registered successfully"))


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User login",
    description="Authenticate with email and password. Returns a JWT and the setup status.",
)
async def login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
    email_service: EmailService = Depends(get_email_service),
) -> LoginResponse:
    """Authenticate user and return a token."""
    service = AuthService(session)

    try:
        result = await service.login(email=payload.email, password=payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    details = LoginDetails(
        timestamp=datetime.now(UTC),
        ip=request.client.host if request.client else "unknown",
        device=request.headers.get("user-agent", "unknown"),
    )
    try:
        await email_service.send_login_notification_email(
            result.user.email, details, name=result.user.name
        )
    except EmailDispatchError as exc:
        logger.warning("login_email_skipped", user_id=result.user.id, error=str(exc))

    return LoginResponse(
        **_auth_payload(result, "Login successful"),
        is_registration_complete=result.user.is_registration_complete,
    )


@router.get(
    "/google",
    summary="Start Google sign-in",
    description="Redirect to Google's consent screen. `callback` is passed through `state`.",
)
async def google_login_redirect(
    callback: str = Query(default=""),
    google: GoogleOAuthClientProtocol = Depends(get_google_client),
) -> RedirectResponse:
    return RedirectResponse(
        google.authorization_url(state=callback), status_code=status.HTTP_302_FOUND
    )


@router.get(
    "/google/callback",
    summary="Google OAuth callback",
    description="Exchange the authorization code and redirect back to the frontend with a token.",
)
async def google_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    session: AsyncSession = Depends(get_db_session),
    google: GoogleOAuthClientProtocol = Depends(get_google_client),
) -> RedirectResponse:
    callback_url = _frontend_callback(state, get_settings().frontend_url)

    try:
        if not code:
            raise GoogleOAuthError("Authorization code missing")
        id_token = await google.exchange_code(code)
        identity = await google.verify_id_token(id_token)
        result, _ = await AuthService(session).login_with_google(identity)
    except (GoogleOAuthError, AuthError) as exc:
        logger.warning("google_callback_failed", error=str(exc))
        query = urlencode({"error": "Authentication failed"})
        return RedirectResponse(f"{callback_url}?{query}", status_code=status.HTTP_302_FOUND)

    query = urlencode(
        {
            "token": result.token,
            "user": json.dumps(result.user_dict()),
            "setup_status": json.dumps(result.setup_status.to_dict()),
            "requires_setup": str(result.setup_status.requires_setup).lower(),
        }
    )
    return RedirectResponse(f"{callback_url}?{query}", status_code=status.HTTP_302_FOUND)


@router.post(
    "/google",
    response_model=AuthResponse,
    summary="Google sign-in with an ID token",
    description="Verify a Google ID token obtained by the client and sign in or sign up.",
)
async def google_login(
    payload: GoogleLoginRequest,
    session: AsyncSession = Depends(get_db_session),
    google: GoogleOAuthClientProtocol = Depends(get_google_client),
) -> AuthResponse:
    id_token = payload.id_token or payload.token
    if not id_token:
        raise _bad_request("ID token is required")

    try:
        identity = await google.verify_id_token(id_token)
    except GoogleOAuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid Google token"
        ) from exc

    try:
        result, is_new_user = await AuthService(session).login_with_google(identity)
    except UserExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except UnverifiedEmailError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except AuthError as exc:
        raise _bad_request(str(exc)) from exc

    message = "Account created successfully" if is_new_user else "Login successful"
    return AuthResponse(**_auth_payload(result, message))


@router.get(
    "/setup-status",
    response_model=SetupStatusEnvelope,
    summary="Current setup status",
)
async def get_setup_status(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> SetupStatusEnvelope:
    try:
        setup_status = await SetupStatusService(session).check_setup_status(user.user_id)
    except AccountNotFoundError as exc:
        raise _not_found(str(exc)) from exc

    return SetupStatusEnvelope(
        setup_status=SetupStatusResponse(**setup_status.to_dict()),
        can_access_dashboard=can_access_dashboard(setup_status),
        next_step=next_setup_step(setup_status),
    )


@router.post(
    "/setup/details",
    response_model=AuthResponse,
    summary="Complete registration",
    description="Set phone and role and create the role profile. Re-issues the token.",
)
async def complete_setup_details(
    payload: CompleteSetupRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    data = payload.model_dump()
    validation = validate_complete_registration_data(data)
    if not validation.is_valid:
        raise _bad_request(validation.message)

    profile_data = data.get("profile_data") or {}
    if payload.role == "car_owner":
        for vehicle in profile_data.get("vehicles") or []:
            vehicle_check = validate_vehicle_data(vehicle)
            if not vehicle_check.is_valid:
                raise _bad_request(vehicle_check.message)

    try:
        result = await AuthService(session).complete_setup_details(
            user_id=user.user_id,
            phone=payload.phone,
            role=payload.role,
            profile_data=profile_data,
        )
    except UserNotFoundError as exc:
        raise _not_found(str(exc)) from exc
    except VehicleExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return AuthResponse(**_auth_payload(result, "Registration completed successfully"))


@router.post("/signout", response_model=MessageResponse, summary="Sign out")
async def signout(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    try:
        await AuthService(session).sign_out(user.user_id)
    except UserNotFoundError as exc:
        raise _not_found(str(exc)) from exc
    return MessageResponse(message="Signed out successfully")


@router.post(
    "/onboarding",
    response_model=MeResponse,
    summary="Car-owner onboarding",
    description="Set name, contact number and profile image for a car owner.",
)
async def onboarding(
    payload: OnboardingRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MeResponse:
    service = AuthService(session)
    try:
        account = await service.onboard_car_owner(
            user_id=user.user_id,
            name=payload.name,
            contact=payload.contact,
            profile_image=payload.profile_image,
        )
        setup_status = await service.setup_status.check_setup_status(account.id)
    except AccountNotFoundError as exc:
        raise _not_found(str(exc)) from exc
    except RoleNotAllowedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    return MeResponse(
        user=UserResponse(**user_to_dict(account)),
        setup_status=SetupStatusResponse(**setup_status.to_dict()),
    )


@router.delete("/delete-account", response_model=MessageResponse, summary="Delete account")
async def delete_account(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    try:
        await AuthService(session).delete_account(user.user_id)
    except UserNotFoundError as exc:
        raise _not_found(str(exc)) from exc
    return MessageResponse(message="Account deleted successfully")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request a password reset code",
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
    otp_store: OtpStore = Depends(get_otp_store),
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    service = PasswordResetService(session, otp_store, email_service)
    try:
        result = await service.request_reset(payload.email)
    except UserNotFoundError as exc:
        raise _not_found("User not found") from exc

    if not result.success:
        raise _bad_request(result.error or "Failed to send OTP email")
    return MessageResponse(message="OTP sent to your email")


@router.post("/verify-otp", response_model=VerifyOtpResponse, summary="Verify reset code")
async def verify_otp(
    payload: VerifyOtpRequest,
    session: AsyncSession = Depends(get_db_session),
    otp_store: OtpStore = Depends(get_otp_store),
    email_service: EmailService = Depends(get_email_service),
) -> VerifyOtpResponse:
    service = PasswordResetService(session, otp_store, email_service)
    try:
        reset_token = await service.verify_otp(payload.email, payload.otp)
    except InvalidOtpError as exc:
        raise _bad_request(str(exc)) from exc
    except UserNotFoundError as exc:
        raise _not_found("User not found") from exc
    return VerifyOtpResponse(reset_token=reset_token)


@router.post("/reset-password", response_model=MessageResponse, summary="Set a new password")
async def reset_password(
    payload: ResetPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
    otp_store: OtpStore = Depends(get_otp_store),
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    service = PasswordResetService(session, otp_store, email_service)
    try:
        await service.reset_password(
            email=payload.email, password=payload.password, token=payload.token
        )
    except InvalidResetTokenError as exc:
        raise _bad_request(str(exc)) from exc
    except UserNotFoundError as exc:
        raise _not_found("User not found") from exc
    return MessageResponse(message="Password reset successfully")


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user",
    description="Get the authenticated account together with its setup status.",
)
async def get_me(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MeResponse:
    service = AuthService(session)
    try:
        account = await service.get_user(user.user_id)
        setup_status = await service.setup_status.check_setup_status(user.user_id)
    except AccountNotFoundError as exc:
        raise _not_found(str(exc)) from exc

    return MeResponse(
        user=UserResponse(**user_to_dict(account)),
        setup_status=SetupStatusResponse(**setup_status.to_dict()),
    )
