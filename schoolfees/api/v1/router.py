"""API v1 router aggregating all route modules."""

from fastapi import APIRouter

from schoolfees.api.v1.routes import (
    audit_logs,
    auth,
    fees,
    grades,
    parents,
    payments,
    pupils,
    rbac,
    reports,
    terms,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(rbac.router)
api_router.include_router(grades.router)
api_router.include_router(parents.router)
api_router.include_router(pupils.router)
api_router.include_router(fees.router)
api_router.include_router(payments.router)
api_router.include_router(terms.router)
api_router.include_router(reports.router)
api_router.include_router(audit_logs.router)
