from dataclasses import dataclass

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.auth import jwt_handler
from backend.core.errors import ForbiddenError, UnauthorizedError
from backend.models.user import Role

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """An already-verified caller: who they are, what role, which tenant."""

    user_id: str
    role: str
    tenant_id: str
    email: str = ""

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def is_instructor(self) -> bool:
        return self.role == Role.INSTRUCTOR

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def identity_from_token(token: str) -> Identity:
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise UnauthorizedError("Invalid or expired access token.") from exc

    user_id = payload.get("sub")
    tenant_id = payload.get("tenant_id")
    role = payload.get("role")
    if not user_id or not tenant_id:
        raise UnauthorizedError("Invalid token subject.")
    if role not in {member.value for member in Role}:
        raise UnauthorizedError("Invalid token role.")

    return Identity(user_id=user_id, role=role, tenant_id=tenant_id, email=payload.get("email") or "")


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("No token provided.")
    return identity_from_token(credentials.credentials)


def require_roles(*roles: Role):
    allowed = {role.value for role in roles}

    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            raise ForbiddenError(f"Requires role: {' or '.join(sorted(allowed))}.")
        return identity

    return dependency
