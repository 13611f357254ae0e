# 📄 File: user_directory/api/v1/router.py
# 🧭 Purpose (Layman Explanation):
# The traffic director that sends health checks and user requests to the right handlers.
# 🧪 Purpose (Technical Summary):
# Router aggregation combining the health router and the user management router
# under their route prefixes.
# 🔗 Dependencies:
# FastAPI, user_directory.api.v1.health, user management presentation router
# 🔄 Connected Modules / Calls From:
# user_directory.main

from fastapi import APIRouter

from user_directory.modules.user_management.presentation.api.v1.users import users_router

from .health import health_router

ROUTE_PREFIXES = {
    "users": "/users",
}

api_router = APIRouter()

api_router.include_router(health_router, tags=["Health Check"])

api_router.include_router(
    users_router,
    prefix=ROUTE_PREFIXES["users"],
    tags=["Users"],
)
