# songpig/api/v1/auth.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api.deps import get_db_dep, require_user
from ...models.enums import UserRole
from ...models.user import User
from ...schemas.user import LoginOut, LoginRequest, RegisterRequest, UserOut
from ...security import issue_token
from ...services.users import UsernameTaken, authenticate, create_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db_dep),
):
    if not data.username or not data.password:
        raise HTTPException(status_code=400, detail="Username and password are required")
    if len(data.username.strip()) < 3:
        raise HTTPException(status_code=400, detail="Username must be at least 3 characters")
    if len(data.password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    # admin はここでは作れない
    role = UserRole.ARTIST if data.role == "artist" else UserRole.LISTENER

    try:
        user = create_user(db, data.username, data.password, data.email, role)
    except UsernameTaken:
        raise HTTPException(status_code=409, detail="Username already exists")
    return user


@router.post("/login", response_model=LoginOut)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db_dep),
):
    identifier = data.identifier or data.username
    if not identifier or not data.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    user = authenticate(db, identifier, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = issue_token(user.id, user.role.value, user.username)
    logger.info("login: user=%s role=%s", user.id, user.role.value)
    return LoginOut(access_token=token, user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(require_user)):
    return user
