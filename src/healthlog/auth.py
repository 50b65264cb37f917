import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from fastapi import HTTPException, Request
from jose import JWTError, jwt

from src.healthlog.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    login: str
    roles: frozenset = field(default_factory=frozenset)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_role(get_settings().admin_role)


# Decodes and verifies a bearer token issued by the identity provider
def decode_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    if token.count(".") != 2:
        raise HTTPException(status_code=401, detail="Token is not a valid JWT.")
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Token verification failed: {str(e)}")


# Resolves the caller once per request; nothing below the routes looks up identity on its own
def get_caller(request: Request) -> Caller:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid token.")

    claims = decode_token(auth_header.split(" ", 1)[1].strip())
    login = str(claims.get("sub") or "").strip()
    if not login:
        raise HTTPException(status_code=401, detail="Token has no subject.")

    raw_roles = claims.get("auth") or ""
    if isinstance(raw_roles, str):
        raw_roles = raw_roles.split(",")
    roles = frozenset(str(role).strip() for role in raw_roles if str(role).strip())
    return Caller(login=login, roles=roles)


def create_token(login: str, roles: list[str] | tuple[str, ...] = ("ROLE_USER",)) -> str:
    settings = get_settings()
    return jwt.encode({"sub": login, "auth": ",".join(roles)}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
