# gaadiyaan/api/callbacks.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import schemas, services
from ..db import get_db
from ..dependencies import Identity, require_roles

router = APIRouter()


@router.post("", response_model=schemas.CallbackResponse, status_code=status.HTTP_201_CREATED)
def create_callback(payload: schemas.CallbackIn, db: Session = Depends(get_db)):
    callback = services.create_callback(db, payload.name, payload.phone)
    return schemas.CallbackResponse(callback=schemas.CallbackOut.model_validate(callback))


@router.get("", response_model=schemas.CallbackList)
def list_callbacks(
    identity: Identity = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    return schemas.CallbackList(callbacks=[schemas.CallbackOut.model_validate(c) for c in services.list_callbacks(db)])
