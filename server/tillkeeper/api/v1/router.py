from fastapi import APIRouter
from tillkeeper.api.v1.endpoints import (
    auth,
    employees,
    cash_drawer,
    transactions,
    shift_history,
    audit_logs,
    display,
    health,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(cash_drawer.router, prefix="/cash-drawers", tags=["cash-drawers"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
api_router.include_router(shift_history.router, prefix="/shift-history", tags=["shift-history"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit-logs"])
api_router.include_router(display.router, prefix="/display", tags=["display"])
