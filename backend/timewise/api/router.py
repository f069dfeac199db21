from fastapi import APIRouter

from timewise.api.analytics import analytics_router, calendar_router
from timewise.api.balances import balance_router
from timewise.api.employees import employees_router
from timewise.api.requests import requests_router
from timewise.api.team import team_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(employees_router)
api_router.include_router(balance_router)
api_router.include_router(analytics_router)
api_router.include_router(calendar_router)
api_router.include_router(team_router)
