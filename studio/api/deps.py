from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from studio.db.session import get_db
from studio.core.clock import Clock, system_clock
from studio.core.tokens import decode_access
from studio.services.notifications import DbNotificationSink, NotificationSink

@dataclass(frozen=True)
class Principal:
    id: int
    role: str

# ----------------------------------------------------------------------
# Lê o Bearer do header Authorization (sem usar OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: str = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    return parts[1]

# ----------------------------------------------------------------------
# Identidade vem do token emitido pelo serviço de usuários
# ----------------------------------------------------------------------
def get_current_user(token: str = Depends(get_bearer_token)) -> Principal:
    payload = decode_access(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        member_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    return Principal(id=member_id, role=payload["role"])

def get_clock() -> Clock:
    return system_clock

def get_notifier(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)) -> NotificationSink:
    return DbNotificationSink(db, clock)
