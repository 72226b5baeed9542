from fastapi import APIRouter
from smsjobs.api import sms

api_router = APIRouter()
api_router.include_router(sms.router, prefix="/api/sms", tags=["sms"])
