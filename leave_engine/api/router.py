from fastapi import APIRouter

from leave_engine.api.balances import employee_balance_router
from leave_engine.api.carryover import carryover_router
from leave_engine.api.leave_requests import leave_requests_router

api_router = APIRouter()
api_router.include_router(employee_balance_router)
api_router.include_router(leave_requests_router)
api_router.include_router(carryover_router)
