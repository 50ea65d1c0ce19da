from fastapi import APIRouter
from capacity.api.routers import engineers, projects, licenses, planning, reports, imports

api_router = APIRouter()
api_router.include_router(engineers.router, prefix="/engineers", tags=["engineers"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(licenses.router, prefix="/licenses", tags=["licenses"])
api_router.include_router(planning.router, prefix="/planning", tags=["planning"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(imports.router, prefix="/imports", tags=["imports"])
