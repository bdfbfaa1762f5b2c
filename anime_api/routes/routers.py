"""Initialize all the routers for the API."""

from fastapi import APIRouter

telegram_router = APIRouter(tags=["telegram"])
status_check_bp = APIRouter(tags=["status_check"])
