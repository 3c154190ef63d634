from fastapi import APIRouter

from leavedesk.api.balances import balances_router
from leavedesk.api.capacity import capacity_router
from leavedesk.api.holidays import holidays_router
from leavedesk.api.leaves import leaves_router

api_router = APIRouter()
api_router.include_router(leaves_router)
api_router.include_router(holidays_router)
api_router.include_router(capacity_router)
api_router.include_router(balances_router)
