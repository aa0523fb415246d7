from fastapi import APIRouter

from dealership.api.endpoints import (
    analytics,
    audit_logs,
    auth,
    communications,
    customers,
    health,
    insights,
    leads,
    parts,
    sales,
    service,
    transactions,
    vehicles,
)

# Create API router
api_router = APIRouter()

# Include endpoint routers with appropriate prefixes and tags
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(leads.router, prefix="/leads", tags=["leads"])
api_router.include_router(sales.router, prefix="/sales", tags=["sales"])
api_router.include_router(service.router, prefix="/service", tags=["service"])
api_router.include_router(parts.router, prefix="/parts", tags=["parts"])
api_router.include_router(communications.router, prefix="/communications", tags=["communications"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(insights.router, prefix="/ai", tags=["ai"])
