from fastapi import APIRouter

from coperex.api.routes import health, auth, users, companies

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])  # GET /
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])  # POST /register, /login
api_router.include_router(users.router, prefix="/user", tags=["user"])  # ADMIN user management + self service
api_router.include_router(companies.router, prefix="/company", tags=["company"])  # ADMIN company management + report
