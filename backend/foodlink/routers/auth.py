from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Security, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger

from ..database import InMemoryDatabase, get_database, settings
from ..memory.repository import VolunteerRepository
from ..models.user import AdminLogin, AuthResponse, Principal, UserRole, VolunteerLogin
from ..services.errors import NotFound, VolunteerUnavailable
from ..services.volunteers import VolunteerService
from ..utils.security import create_access_token, decode_token, verify_demo_credentials

router = APIRouter(prefix="/auth", tags=["auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/admin/login", auto_error=False)

DEMO_ADMIN = Principal(subject="admin", role="admin", name="Demo Admin")


def get_volunteer_service(database: InMemoryDatabase = Depends(get_database)) -> VolunteerService:
    return VolunteerService(VolunteerRepository(database))


def _issue(principal: Principal, message: str) -> AuthResponse:
    token = create_access_token(principal.subject, principal.role, principal.name)
    return AuthResponse(access_token=token, user=principal, message=message)


@router.post("/admin/login", response_model=AuthResponse)
async def login_admin(payload: AdminLogin) -> AuthResponse:
    if not verify_demo_credentials(payload.username, payload.password):
        logger.warning("Failed admin login for {}", payload.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid credentials. Use {settings.admin_username}/{settings.admin_password} for demo.",
        )
    principal = Principal(subject=payload.username, role="admin", name="Administrator")
    return _issue(principal, "Welcome back")


@router.post("/volunteer/login", response_model=AuthResponse)
async def login_volunteer(
    payload: VolunteerLogin,
    volunteers: VolunteerService = Depends(get_volunteer_service),
) -> AuthResponse:
    if not payload.identifier.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please enter your volunteer ID, email, or number",
        )
    try:
        volunteer = volunteers.authenticate(payload.identifier)
    except (NotFound, VolunteerUnavailable) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
    principal = Principal(subject=volunteer.id, role="volunteer", name=volunteer.name)
    return _issue(principal, f"Welcome, {volunteer.name}")


async def get_current_user(token: str | None = Security(oauth2_scheme)) -> Principal:
    if not token:
        if settings.auto_authorize_demo:
            return DEMO_ADMIN
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authorization token")

    try:
        payload = decode_token(token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    if not payload.get("sub") or payload.get("role") not in ("admin", "volunteer"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return Principal(subject=payload["sub"], role=payload["role"], name=payload.get("name", payload["sub"]))


def require_roles(*roles: UserRole):
    def dependency(user: Principal = Depends(get_current_user)) -> Principal:
        if roles and user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions for this action",
            )
        return user

    return dependency
