from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from frontdesk.auth import jwt_handler
from frontdesk.core import config

security = HTTPBearer()


@dataclass(frozen=True)
class Operator:
    username: str
    role: str


def get_current_operator(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Operator:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    username = payload.get("sub")
    if not username:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    return Operator(username=username, role=payload.get("role", ""))


def require_desk_operator(operator: Operator = Depends(get_current_operator)) -> Operator:
    if operator.role != config.DESK_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only front-desk operators can change staff, schedules or appointments.",
        )
    return operator
