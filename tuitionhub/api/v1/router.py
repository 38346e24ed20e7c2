# tuitionhub/api/v1/router.py
# Master router -- registers all endpoint routers under /api/v1
# Each endpoint module owns its routes; prefixes and tags are set here

from fastapi import APIRouter

from tuitionhub.api.v1.endpoints import (
    admin,
    applications,
    auth,
    notifications,
    payments,
    reviews,
    student,
    tuitions,
    users,
)

api_router = APIRouter()

# Auth
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Tuitions & Applications
api_router.include_router(tuitions.router, prefix="/tuitions", tags=["Tuitions"])
api_router.include_router(applications.router, prefix="/applications", tags=["Applications"])

# Payments (acceptance flow)
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Reviews
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])

# Student
api_router.include_router(student.router, prefix="/student", tags=["Student"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
