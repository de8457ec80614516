from fastapi import APIRouter

from community.api.v1 import audit, events, health, organizations, persons, projects, relationships, visibility


api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(persons.router, prefix="/persons", tags=["persons"])
api_router.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(relationships.router, prefix="/relationships", tags=["relationships"])
api_router.include_router(visibility.router, prefix="/visibility", tags=["visibility"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
