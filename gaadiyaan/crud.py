# gaadiyaan/crud.py
"""Storage operations for listings, dealers, users and callback requests.

Every statement is built with SQLAlchemy constructs so user supplied values
always travel as bound parameters. Database failures are translated into
`ConflictError` (constraint violations) or `StorageError` (everything else)
after the session has been rolled back.
"""
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import dealer_ids
from .dealer_ids import MAX_RESERVE_ATTEMPTS, next_dealer_id, parse_dealer_id
from .exceptions import ConflictError, GenerationExhausted, StorageError, ValidationError
from .models import INT_MAX, CallbackRequest, DealerIdRegistration, DealerProfile, User, VehicleListing, utcnow
from .query import ListingFilters, build_query
from .utils import logger, retry


@contextmanager
def storage_errors(db: Session, action: str, commit: bool = False):
    try:
        yield
        if commit:
            db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Constraint violation while %s: %s", action, e.orig)
        raise ConflictError(f"Conflict while {action}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while %s", action)
        raise StorageError(f"Storage failure while {action}") from e


# listings

def create_listing(db: Session, values: Dict[str, Any]) -> VehicleListing:
    obj = VehicleListing(**values)
    with storage_errors(db, "creating listing", commit=True):
        db.add(obj)
    db.refresh(obj)
    logger.info("Created listing %s for dealer %s", obj.id, obj.dealer_id)
    return obj

def _valid_id(listing_id: int) -> bool:
    return 0 < listing_id <= INT_MAX

def get_listing(db: Session, listing_id: int) -> Optional[VehicleListing]:
    if not _valid_id(listing_id):
        return None
    with storage_errors(db, "fetching listing"):
        return db.get(VehicleListing, listing_id)

def list_listings(
    db: Session,
    filters: Optional[ListingFilters] = None,
    sort: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
) -> Tuple[List[Dict[str, Any]], int]:
    data_query, count_query = build_query(filters, sort, page, page_size)
    with storage_errors(db, "listing vehicles"):
        rows = [obj.as_dict() for obj in db.execute(data_query).scalars()]
        total = db.execute(count_query).scalar_one()
    return rows, total

def update_listing(db: Session, listing_id: int, values: Dict[str, Any]) -> int:
    """Apply a partial update; returns the number of rows changed (0 if missing)."""
    if not _valid_id(listing_id):
        return 0
    values = dict(values, updated_at=utcnow())
    stmt = update(VehicleListing).where(VehicleListing.id == listing_id).values(**values)
    with storage_errors(db, "updating listing", commit=True):
        result = db.execute(stmt)
    if result.rowcount:
        logger.info("Updated listing %s (%s)", listing_id, ", ".join(sorted(values)))
    return result.rowcount

def delete_listing(db: Session, listing_id: int) -> int:
    if not _valid_id(listing_id):
        return 0
    stmt = delete(VehicleListing).where(VehicleListing.id == listing_id)
    with storage_errors(db, "deleting listing", commit=True):
        result = db.execute(stmt)
    if result.rowcount:
        logger.info("Deleted listing %s", listing_id)
    return result.rowcount


# dealer ids

def _rollback(db: Session, year: int):
    db.rollback()

@retry(IntegrityError, tries=MAX_RESERVE_ATTEMPTS, on_retry=_rollback)
def _insert_next_dealer_id(db: Session, year: int) -> str:
    max_sequence = db.execute(
        select(func.max(DealerIdRegistration.sequence)).where(DealerIdRegistration.year == year)
    ).scalar()
    dealer_id = next_dealer_id(max_sequence, year)
    db.add(DealerIdRegistration(dealer_id=dealer_id, year=year, sequence=(max_sequence or 0) + 1))
    db.commit()
    return dealer_id

def reserve_dealer_id(db: Session, year: Optional[int] = None) -> str:
    """Reserve the next free dealer id of `year` (default: this year)."""
    year = dealer_ids.current_year() if year is None else year
    try:
        dealer_id = _insert_next_dealer_id(db, year)
    except IntegrityError as e:
        db.rollback()
        raise GenerationExhausted("Unable to generate unique dealer ID") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database error while reserving dealer id")
        raise StorageError("Storage failure while reserving dealer id") from e
    logger.info("Reserved dealer id %s", dealer_id)
    return dealer_id

def register_dealer_id(db: Session, dealer_id: str):
    """Record a client supplied dealer id in the registry (no commit)."""
    parsed = parse_dealer_id(dealer_id)
    if parsed is None:
        raise ValidationError(f"Invalid dealer ID: {dealer_id}", ["dealer_id"])
    exists = db.execute(
        select(DealerIdRegistration.id).where(DealerIdRegistration.dealer_id == dealer_id)
    ).first()
    if exists is None:
        year, sequence = parsed
        db.add(DealerIdRegistration(dealer_id=dealer_id, year=year, sequence=sequence))


# dealer profiles

def get_dealer_profile(db: Session, email: str) -> Optional[DealerProfile]:
    with storage_errors(db, "fetching dealer profile"):
        return db.execute(select(DealerProfile).where(DealerProfile.email == email)).scalar_one_or_none()

def dealer_id_taken(db: Session, dealer_id: str, exclude_email: Optional[str] = None) -> bool:
    """True when a dealer profile or a user under another email holds `dealer_id`."""
    stmts = []
    for model in (DealerProfile, User):
        stmt = select(func.count()).select_from(model).where(model.dealer_id == dealer_id)
        if exclude_email is not None:
            stmt = stmt.where(model.email != exclude_email)
        stmts.append(stmt)
    with storage_errors(db, "checking dealer id"):
        return any(db.execute(stmt).scalar_one() > 0 for stmt in stmts)

def upsert_dealer_profile(db: Session, email: str, values: Dict[str, Any]) -> Tuple[DealerProfile, bool]:
    """Create the profile for `email` or update the supplied fields in place."""
    profile = get_dealer_profile(db, email)
    created = profile is None
    with storage_errors(db, "saving dealer profile", commit=True):
        if values.get("dealer_id"):
            register_dealer_id(db, values["dealer_id"])
        if created:
            profile = DealerProfile(email=email, **values)
            db.add(profile)
        else:
            for k, v in values.items():
                setattr(profile, k, v)
    db.refresh(profile)
    logger.info("%s dealer profile %s", "Created" if created else "Updated", profile.id)
    return profile, created


# users

def create_user(db: Session, values: Dict[str, Any]) -> User:
    user = User(**values)
    with storage_errors(db, "creating user", commit=True):
        if user.dealer_id:
            register_dealer_id(db, user.dealer_id)
        db.add(user)
    db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role)
    return user

def get_user(db: Session, user_id: int) -> Optional[User]:
    with storage_errors(db, "fetching user"):
        return db.get(User, user_id)

def _get_user_by(db: Session, column, value) -> Optional[User]:
    with storage_errors(db, "fetching user"):
        return db.execute(select(User).where(column == value)).scalar_one_or_none()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return _get_user_by(db, User.email, email)

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return _get_user_by(db, User.username, username)

def update_user(db: Session, user_id: int, updates: Dict[str, Any]) -> Optional[User]:
    user = get_user(db, user_id)
    if not user:
        return None
    with storage_errors(db, "updating user", commit=True):
        for k, v in updates.items():
            setattr(user, k, v)
    db.refresh(user)
    return user

def list_users(db: Session) -> List[User]:
    with storage_errors(db, "listing users"):
        return list(db.execute(select(User).order_by(User.id)).scalars())


# callback requests

def create_callback(db: Session, name: str, phone: str) -> CallbackRequest:
    obj = CallbackRequest(name=name, phone=phone)
    with storage_errors(db, "creating callback request", commit=True):
        db.add(obj)
    db.refresh(obj)
    logger.info("Created callback request %s", obj.id)
    return obj

def list_callbacks(db: Session) -> List[CallbackRequest]:
    stmt = select(CallbackRequest).order_by(CallbackRequest.created_at.desc(), CallbackRequest.id.desc())
    with storage_errors(db, "listing callback requests"):
        return list(db.execute(stmt).scalars())
