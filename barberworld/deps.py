# barberworld/deps.py

from fastapi import HTTPException


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def require_self_or_role(user: dict, user_id: int, role: str):
    """Clients may only touch their own records; the given role may touch any"""
    if user["role"] != role and user["id"] != user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
