from fastapi import APIRouter

from hrms_core.api.attendance import attendance_router
from hrms_core.api.leave import leave_balance_router, leave_year_router

api_router = APIRouter()
api_router.include_router(attendance_router)
api_router.include_router(leave_balance_router)
api_router.include_router(leave_year_router)
