"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from airtech.api.auth import router as auth_router, admin_router as admin_auth_router
from airtech.api.orders import router as orders_router
from airtech.api.equipment import router as equipment_router
from airtech.api.service_reports import router as service_reports_router
from airtech.api.checklists import router as checklists_router, instructions_router
from airtech.api.customers import router as customers_router
from airtech.api.technicians import router as technicians_router
from airtech.api.quotes import router as quotes_router
from airtech.api.uploads import router as uploads_router
from airtech.api.reports import router as reports_router
from airtech.api.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(admin_auth_router)
api_router.include_router(orders_router)
api_router.include_router(equipment_router)
api_router.include_router(service_reports_router)
api_router.include_router(checklists_router)
api_router.include_router(instructions_router)
api_router.include_router(customers_router)
api_router.include_router(technicians_router)
api_router.include_router(quotes_router)
api_router.include_router(uploads_router)
api_router.include_router(reports_router)
