from fastapi import APIRouter

from shopfloor.api.routes import efficiency, jobs, logs, rejects, terminal, users

api_router = APIRouter()
api_router.include_router(terminal.router)
api_router.include_router(jobs.router)
api_router.include_router(logs.router)
api_router.include_router(efficiency.router)
api_router.include_router(rejects.router)
api_router.include_router(users.router)
