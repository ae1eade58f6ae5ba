# barberworld/routers/auth_routes.py
"""Password login for clients and barbers"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from barberworld.db import get_session
from barberworld.models import User
from barberworld.schemas import Token
from barberworld.auth import verify_password, token_for

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


def _account_for(session: Session, email: str, password: str) -> Optional[User]:
    user = session.exec(select(User).where(User.email == email.strip())).first()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    """
    Exchange email and password for a bearer token.

    The token carries the user's id and role, which the booking client reads
    to resolve who is signed in without calling /me.
    """
    user = _account_for(session, form_data.username, form_data.password)
    if user is None:
        logger.info(f"Rejected login for {form_data.username!r}")
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"{user.role} {user.id} signed in")
    return Token(access_token=token_for(user))
