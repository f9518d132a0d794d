# gaadiyaan/api/routes.py
from fastapi import APIRouter

from . import callbacks, dealers, users, vehicles

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok"}

router.include_router(vehicles.router, prefix="/api/vehicles", tags=["vehicles"])
router.include_router(users.router, prefix="/api/users", tags=["users"])
router.include_router(dealers.router, prefix="/api/dealers", tags=["dealers"])
router.include_router(callbacks.router, prefix="/api/callbacks", tags=["callbacks"])
