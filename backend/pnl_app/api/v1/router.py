from fastapi import APIRouter

from pnl_app.api.v1 import (
    dashboard_routes,
    data_stats_routes,
    health,
    job_routes,
    marketing_routes,
    order_routes,
    price_entry_routes,
    supplier_routes,
    upload_routes,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(upload_routes.router, prefix="/uploads", tags=["Uploads"])
api_router.include_router(order_routes.router)
api_router.include_router(price_entry_routes.router, prefix="/price-entries", tags=["Price Entries"])
api_router.include_router(supplier_routes.router, prefix="/suppliers", tags=["Suppliers"])
api_router.include_router(marketing_routes.router, prefix="/marketing-spend", tags=["Marketing"])
api_router.include_router(dashboard_routes.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(data_stats_routes.router, prefix="/data-stats", tags=["Data Stats"])
api_router.include_router(job_routes.router, prefix="/jobs", tags=["Jobs"])
