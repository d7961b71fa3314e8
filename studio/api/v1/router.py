# studio/api/v1/router.py
from fastapi import APIRouter
from studio.api.v1 import attendance, bookings, tasks

api_router = APIRouter()

api_router.include_router(bookings.router,   prefix="/bookings",        tags=["bookings"])
api_router.include_router(attendance.router, prefix="/attendance-logs", tags=["attendance"])
api_router.include_router(tasks.router,      prefix="/tasks",           tags=["tasks"])
