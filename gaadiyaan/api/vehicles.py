# gaadiyaan/api/vehicles.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from .. import schemas, services
from ..config import Settings
from ..db import get_db
from ..dependencies import Identity, get_image_store, get_settings, require_roles
from ..uploads import ImageStore

router = APIRouter()

IMAGE_FIELD = "vehicleImages"

dealer_or_admin = require_roles("dealer", "admin")


@router.get("", response_model=schemas.ListingPage)
def listings(
    dealer_id: Optional[str] = Query(None),
    minPrice: Optional[str] = Query(None),
    maxPrice: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    fuelType: Optional[str] = Query(None),
    transmission: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sortBy: Optional[str] = Query(None, description="price_low, price_high, oldest or newest"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    params = {
        "dealer_id": dealer_id,
        "minPrice": minPrice,
        "maxPrice": maxPrice,
        "year": year,
        "fuelType": fuelType,
        "transmission": transmission,
        "search": search,
        "sortBy": sortBy,
        "page": page,
        "limit": limit,
    }
    return services.list_listings(db, params, config)


@router.get("/{listing_id}", response_model=schemas.ListingResponse)
def get_listing(listing_id: int, db: Session = Depends(get_db)):
    return schemas.ListingResponse(data=services.get_listing(db, listing_id))


@router.post("", response_model=schemas.ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    request: Request,
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
    identity: Identity = Depends(dealer_or_admin),
    config: Settings = Depends(get_settings),
):
    """Create a listing from a multipart form; images go in `vehicleImages`."""
    form = await request.form(max_files=config.max_upload_files + 1)
    try:
        uploads = [f for f in form.getlist(IMAGE_FIELD) if isinstance(f, UploadFile) and f.filename]
        fields = {k: v for k, v in form.multi_items() if k != IMAGE_FIELD and isinstance(v, str)}
        data = await run_in_threadpool(
            services.create_listing, db, store, fields, uploads, identity, config.max_upload_files
        )
    finally:
        await form.close()
    return schemas.ListingResponse(message="Vehicle listing created successfully", data=data)


@router.put("/{listing_id}", response_model=schemas.ListingResponse)
def update_listing(
    listing_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    identity: Identity = Depends(dealer_or_admin),
):
    data = services.update_listing(db, listing_id, payload, identity)
    return schemas.ListingResponse(message="Vehicle listing updated successfully", data=data)


@router.delete("/{listing_id}", response_model=schemas.MessageResponse)
def delete_listing(
    listing_id: int,
    db: Session = Depends(get_db),
    store: ImageStore = Depends(get_image_store),
    identity: Identity = Depends(dealer_or_admin),
):
    services.delete_listing(db, store, listing_id, identity)
    return schemas.MessageResponse(message="Vehicle listing deleted successfully")
