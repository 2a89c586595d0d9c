"""
Main API Router for the Visa Processing System v1
Includes all endpoint routers
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth
from app.api.v1.endpoints import applications
from app.api.v1.endpoints import admin
from app.api.v1.endpoints import biometrics
from app.api.v1.endpoints import payments
from app.api.v1.endpoints import documents
from app.api.v1.endpoints import notifications
from app.api.v1.endpoints import users

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(applications.router, prefix="/applications", tags=["Applications"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(biometrics.router, prefix="/biometrics", tags=["Biometrics"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
