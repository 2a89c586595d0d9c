"""
Authentication Endpoints for the Visa Processing System
Handles registration, login, logout and the authentication guard dependencies

Tokens are accepted from the Authorization header (Bearer) or from the
httpOnly cookie set at login.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import uuid

from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError, ConflictError
from app.core.security import create_access_token, verify_token, create_user_token_claims
from app.crud import user as crud_user
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.common import success_response
from app.schemas.user import UserRegister, LoginRequest, PasswordChange, UserResponse, AuthPayload
from app.services import user_service
from app.services.audit_service import audit_service

router = APIRouter()
security = HTTPBearer(auto_error=False)
settings = get_settings()


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from the bearer token or the auth cookie
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise AuthenticationError("Not authorized to access this route")

    payload = verify_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationError("Invalid authentication credentials")

    user = crud_user.get(db, user_id)
    if user is None:
        raise AuthenticationError("No user found with this token")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: 403 unless the current user has one of the roles"""
    allowed = set(roles)

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise AuthorizationError(
                f"User role '{current_user.role.value}' is not authorized to access this route"
            )
        return current_user

    return checker


require_staff = require_roles(UserRole.ADMIN, UserRole.OFFICER)
require_admin = require_roles(UserRole.ADMIN)


def _issue_token(user: User) -> str:
    return create_access_token(subject=user.id, additional_claims=create_user_token_claims(user))


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register Applicant")
def register(user_in: UserRegister, db: Session = Depends(get_db)):
    """
    Create an applicant account and return an access token
    """
    if crud_user.get_by_email(db, email=user_in.email):
        raise ConflictError("User already exists with this email")

    user = crud_user.create_user(db, obj_in=user_in)
    audit_service.log_user_action(user.id, "register", {"email": user.email})
    return success_response(
        AuthPayload(user=UserResponse.model_validate(user), token=_issue_token(user)),
        "User registered successfully",
    )


@router.post("/login", summary="User Login")
def login(login_data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Authenticate user, return an access token and set it as an httpOnly cookie
    """
    user = crud_user.authenticate(db, email=login_data.email, password=login_data.password)
    if not user:
        audit_service.log_user_action("anonymous", "login_failed", {"email": login_data.email})
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated. Please contact support.")

    user = crud_user.record_login(db, user=user)
    token = _issue_token(user)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
    )
    audit_service.log_user_action(user.id, "login")
    return success_response(AuthPayload(user=UserResponse.model_validate(user), token=token), "Login successful")


@router.post("/logout", summary="User Logout")
def logout(response: Response, current_user: User = Depends(get_current_user)):
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME, httponly=True, secure=settings.COOKIE_SECURE, samesite="strict"
    )
    audit_service.log_user_action(current_user.id, "logout")
    return success_response(message="Logged out successfully")


@router.get("/me", summary="Current User")
def get_me(current_user: User = Depends(get_current_user)):
    return success_response({"user": UserResponse.model_validate(current_user)})


@router.post("/change-password", summary="Change Password")
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_service.change_password(db, current_user, payload)
    return success_response(message="Password changed successfully")
