from fastapi import APIRouter
from landchain.api.routes import (
    land_records,
    transfers,
    wallets,
    admin,
)

api_router = APIRouter()

api_router.include_router(transfers.router)
api_router.include_router(land_records.router)
api_router.include_router(wallets.router)
api_router.include_router(admin.router)
