# gaadiyaan/services.py
"""Operations behind the HTTP routes.

Each function validates its input before touching storage and translates
"nothing matched" results into `NotFoundError`.
"""
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy.orm import Session

from . import crud, mapper
from .config import Settings
from .dependencies import Identity
from .exceptions import (
    AuthenticationError, ConflictError, NotFoundError, PermissionDenied, ValidationError,
)
from .models import CallbackRequest, DealerProfile, User
from .presenter import present
from .query import parse_filters
from .schemas import DealerProfileIn, ListingPage, ProfileUpdate, RegisterRequest
from .security import create_access_token, hash_password, verify_password
from .uploads import ImageStore
from .utils import logger

SELF_REGISTER_ROLES = ("client", "dealer")


# listings

def create_listing(
    db: Session,
    store: ImageStore,
    fields: Mapping[str, Any],
    uploads: Sequence,
    identity: Identity,
    max_files: int = 10,
) -> Dict[str, Any]:
    """Validate a new listing, store its images, then insert it.

    Images already written are removed again if the insert fails.
    """
    payload = {k: v for k, v in fields.items() if k in mapper.FIELD_MAP and k != "images"}
    dealer_id = fields.get("dealerId") or fields.get("dealer_id") or identity.dealer_id
    if identity.role != "admin" and dealer_id != identity.dealer_id:
        raise PermissionDenied("Dealers can only create listings under their own dealer ID")
    payload["dealerId"] = dealer_id
    for name in ("specifications", "features"):
        if name in payload:
            payload[name] = mapper.decode_form_value(payload[name], name)
    if len(uploads) > max_files:
        raise ValidationError(f"At most {max_files} images are allowed", ["vehicleImages"])

    mapper.to_storage(dict(payload, images=[]))

    urls = store.save_all(uploads)
    try:
        obj = crud.create_listing(db, mapper.to_storage(dict(payload, images=urls)))
    except Exception:
        logger.warning("Removing %d uploaded image(s) after failed listing create", len(urls))
        store.delete(urls)
        raise
    return mapper.from_storage(obj.as_dict())

def list_listings(db: Session, params: Mapping[str, str], settings: Settings) -> ListingPage:
    filters, sort, page, page_size = parse_filters(
        params, settings.default_page_size, settings.max_page_size
    )
    rows, total = crud.list_listings(db, filters, sort, page, page_size)
    return present([mapper.from_storage(row) for row in rows], total, page, page_size)

def get_listing(db: Session, listing_id: int) -> Dict[str, Any]:
    obj = crud.get_listing(db, listing_id)
    if not obj:
        raise NotFoundError("Vehicle listing not found")
    return mapper.from_storage(obj.as_dict())

def _check_listing_owner(db: Session, listing_id: int, identity: Identity):
    if identity.role == "admin":
        return
    obj = crud.get_listing(db, listing_id)
    if not obj:
        raise NotFoundError("Vehicle listing not found")
    if obj.dealer_id != identity.dealer_id:
        raise PermissionDenied("Dealers can only modify their own listings")

def update_listing(db: Session, listing_id: int, payload: Mapping[str, Any], identity: Identity) -> Dict[str, Any]:
    values = mapper.to_storage_partial(payload)
    _check_listing_owner(db, listing_id, identity)
    if crud.update_listing(db, listing_id, values) == 0:
        raise NotFoundError("Vehicle listing not found")
    return get_listing(db, listing_id)

def delete_listing(db: Session, store: ImageStore, listing_id: int, identity: Identity):
    _check_listing_owner(db, listing_id, identity)
    obj = crud.get_listing(db, listing_id)
    images = mapper.from_storage(obj.as_dict())["images"] if obj else []
    if crud.delete_listing(db, listing_id) == 0:
        raise NotFoundError("Vehicle listing not found")
    store.delete(images)


# dealers

def generate_dealer_id(db: Session) -> str:
    return crud.reserve_dealer_id(db)

def upsert_dealer_profile(db: Session, payload: DealerProfileIn) -> tuple:
    email = payload.email.strip()
    missing = [name for name, value in (("email", email), ("full_name", payload.full_name)) if not value.strip()]
    if missing:
        raise ValidationError("Email and full name are required", missing)
    values = payload.model_dump(exclude={"email"}, exclude_unset=True)
    if values.get("user_type") is None:
        values.pop("user_type", None)
    dealer_id = values.get("dealer_id")
    if dealer_id and crud.dealer_id_taken(db, dealer_id, exclude_email=email):
        raise ConflictError("This dealer ID is already in use")
    return crud.upsert_dealer_profile(db, email, values)

def get_dealer_profile(db: Session, email: str) -> DealerProfile:
    profile = crud.get_dealer_profile(db, email)
    if not profile:
        raise NotFoundError("Dealer not found")
    return profile


# users

def register_user(db: Session, payload: RegisterRequest) -> User:
    role = payload.role or "client"
    if role not in SELF_REGISTER_ROLES:
        raise ValidationError(f"Invalid role: {role}", ["role"])
    if crud.get_user_by_username(db, payload.username):
        raise ConflictError("username already exists")
    if crud.get_user_by_email(db, payload.email):
        raise ConflictError("email already exists")

    dealer_id = None
    if role == "dealer":
        dealer_id = payload.dealer_id
        if dealer_id and crud.dealer_id_taken(db, dealer_id, exclude_email=payload.email):
            raise ConflictError("dealer ID already exists")
        if not dealer_id:
            dealer_id = crud.reserve_dealer_id(db)

    return crud.create_user(db, {
        "username": payload.username,
        "email": payload.email,
        "password_hash": hash_password(payload.password),
        "role": role,
        "dealer_id": dealer_id,
    })

def authenticate(db: Session, email: str, password: str, settings: Settings):
    """Return ``(token, user)`` for valid credentials."""
    user = crud.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")
    return create_access_token(user.id, user.role, settings), user

def get_user(db: Session, user_id: int) -> User:
    user = crud.get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user

def update_profile(db: Session, identity: Identity, payload: ProfileUpdate) -> User:
    if not payload.username or len(payload.username.strip()) < 3:
        raise ValidationError("Username must be at least 3 characters long", ["username"])
    updates = {"username": payload.username.strip()}
    for name in ("email", "dealership_name", "phone", "full_name"):
        value = getattr(payload, name)
        if value:
            updates[name] = value

    other = crud.get_user_by_username(db, updates["username"])
    if other and other.id != identity.id:
        raise ConflictError("username already exists")
    if "email" in updates:
        other = crud.get_user_by_email(db, updates["email"])
        if other and other.id != identity.id:
            raise ConflictError("email already exists")

    user = crud.update_user(db, identity.id, updates)
    if not user:
        raise NotFoundError("User not found")
    return user

def list_users(db: Session) -> List[User]:
    return crud.list_users(db)


# callback requests

def create_callback(db: Session, name: str, phone: str) -> CallbackRequest:
    name, phone = (name or "").strip(), (phone or "").strip()
    missing = [field for field, value in (("name", name), ("phone", phone)) if not value]
    if missing:
        raise ValidationError("Name and phone number are required", missing)
    return crud.create_callback(db, name, phone)

def list_callbacks(db: Session) -> List[CallbackRequest]:
    return crud.list_callbacks(db)
