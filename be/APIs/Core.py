import logging
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from starlette import status

from Database.session import Session
from Planning.service import ProjectService
from utils.audit_log import get_client_ip

load_dotenv()
logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login")
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ALL_PERMISSIONS = "*"


@dataclass
class Principal:
    """Caller identity taken from a verified access token. Tokens are issued elsewhere."""
    id: str
    kind: str = "user"
    name: str = ""
    permissions: List[str] = field(default_factory=list)

    def can(self, code: str) -> bool:
        return ALL_PERMISSIONS in self.permissions or code in self.permissions


def get_db():
    db = Session()
    try:
        yield db
    finally:
        db.close()


async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not SECRET_KEY:
        logger.error("SECRET_KEY is not set; rejecting access token")
        raise credentials_exception
    try:
        payload = jwt.decode(token,
                             SECRET_KEY,
                             algorithms=[ALGORITHM]
                             )
        subject: str = payload.get("sub")
        if subject is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    permissions = payload.get("permissions") or []
    if isinstance(permissions, str):
        permissions = [permissions]
    return Principal(
        id=subject,
        kind=payload.get("kind") or "user",
        name=payload.get("name") or "",
        permissions=list(permissions),
    )


def require_permission(code: str):
    """Dependency that lets the request through only when the token grants `code`."""

    async def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.can(code):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You are not authorized to perform this action.",
            )
        return principal

    return checker


def build_service(request: Request, db, principal: Principal) -> ProjectService:
    return ProjectService(
        db,
        actor=principal.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
