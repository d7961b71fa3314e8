# studio/core/rbac.py
from fastapi import Depends, HTTPException, status
from studio.api.deps import Principal, get_current_user

ROLE_MEMBER = "member"
ROLE_INSTRUCTOR = "instructor"
ROLE_STUDIO_ADMIN = "studio_admin"

_HIERARCHY = [ROLE_MEMBER, ROLE_INSTRUCTOR, ROLE_STUDIO_ADMIN]
_RANK = {name: idx for idx, name in enumerate(_HIERARCHY)}

def require_roles(*roles: str):
    allowed = set(roles)
    def dep(user: Principal = Depends(get_current_user)) -> Principal:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user
    return dep

def require_min_role(min_role: str):
    if min_role not in _RANK:
        raise RuntimeError(f"Unknown role: {min_role}")
    need = _RANK[min_role]
    def dep(user: Principal = Depends(get_current_user)) -> Principal:
        if _RANK.get(user.role, -1) >= need:
            return user
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
    return dep
