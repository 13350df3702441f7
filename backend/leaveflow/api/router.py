from fastapi import APIRouter

from leaveflow.api.employees import employees_router
from leaveflow.api.holidays import holidays_router
from leaveflow.api.jobs import jobs_router
from leaveflow.api.leave_requests import leave_requests_router

api_router = APIRouter()
api_router.include_router(leave_requests_router)
api_router.include_router(employees_router)
api_router.include_router(holidays_router)
api_router.include_router(jobs_router)
