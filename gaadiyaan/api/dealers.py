# gaadiyaan/api/dealers.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas, services
from ..db import get_db

router = APIRouter()


@router.get("/generate-dealer-id", response_model=schemas.DealerIdResponse)
def generate_dealer_id(db: Session = Depends(get_db)):
    return schemas.DealerIdResponse(dealer_id=services.generate_dealer_id(db))


@router.put("/profile", response_model=schemas.DealerProfileResponse)
def save_profile(payload: schemas.DealerProfileIn, db: Session = Depends(get_db)):
    profile, created = services.upsert_dealer_profile(db, payload)
    message = "Dealer profile created successfully" if created else "Dealer profile updated successfully"
    return schemas.DealerProfileResponse(message=message, dealer=schemas.DealerProfileOut.model_validate(profile))


@router.get("/{email}", response_model=schemas.DealerProfileResponse)
def get_profile(email: str, db: Session = Depends(get_db)):
    return schemas.DealerProfileResponse(dealer=schemas.DealerProfileOut.model_validate(services.get_dealer_profile(db, email)))
