# gaadiyaan/api/users.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import schemas, services
from ..config import Settings
from ..db import get_db
from ..dependencies import Identity, get_current_user, get_settings, require_roles

router = APIRouter()


@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    user = services.register_user(db, payload)
    return schemas.UserResponse(message="User registered successfully", user=schemas.UserOut.model_validate(user))


@router.post("/login", response_model=schemas.TokenResponse)
def login(
    payload: schemas.LoginRequest,
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    token, user = services.authenticate(db, payload.email, payload.password, config)
    return schemas.TokenResponse(token=token, user=schemas.UserOut.model_validate(user))


@router.get("/profile", response_model=schemas.UserResponse)
def get_profile(identity: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    return schemas.UserResponse(user=schemas.UserOut.model_validate(services.get_user(db, identity.id)))


@router.put("/profile", response_model=schemas.UserResponse)
def update_profile(
    payload: schemas.ProfileUpdate,
    identity: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = services.update_profile(db, identity, payload)
    return schemas.UserResponse(message="Profile updated successfully", user=schemas.UserOut.model_validate(user))


@router.get("", response_model=schemas.UserList)
def list_users(
    identity: Identity = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    return schemas.UserList(users=[schemas.UserOut.model_validate(u) for u in services.list_users(db)])
