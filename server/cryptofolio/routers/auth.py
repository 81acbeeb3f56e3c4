# cryptofolio/routers/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cryptofolio.auth import create_access_token, current_user_id, hash_password, verify_password
from cryptofolio.db import get_db
from cryptofolio.errors import BadRequest, Conflict, Unauthorized
from cryptofolio.models.common import ERROR_RESPONSES
from cryptofolio.orm_models import UserORM

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"], responses=ERROR_RESPONSES)

ROLES = ["ROLE_USER"]


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3, max_length=180)
    password: str = Field(min_length=6, max_length=200)


class RegisterResponse(BaseModel):
    id: int
    email: str


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=180)
    password: str = Field(min_length=1, max_length=200)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int  # unix timestamp exp


class MeResponse(BaseModel):
    id: int
    email: str
    roles: list[str]


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    if "@" not in email or "." not in email:
        raise BadRequest("Invalid data", ["email: This value is not a valid email address."])

    user = UserORM(email=email, password_hash=hash_password(body.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User already exists")
    db.refresh(user)

    logger.info("user_registered id=%s", user.id)
    return RegisterResponse(id=user.id, email=user.email)


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    email = body.email.strip().lower()

    u = db.execute(select(UserORM).where(UserORM.email == email)).scalar_one_or_none()
    if not u or not verify_password(body.password, u.password_hash):
        raise Unauthorized("bad credentials")

    token, exp = create_access_token(u.id, u.email)
    return TokenResponse(token=token, expires_in=exp)


@router.api_route("/me", methods=["GET", "HEAD"], response_model=MeResponse)
def me(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    u = db.get(UserORM, user_id)
    if u is None:
        raise Unauthorized("user no longer exists")
    return MeResponse(id=u.id, email=u.email, roles=ROLES)
