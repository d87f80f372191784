from fastapi import APIRouter

from app.features.health.routes.health import router as health_router
from app.features.scraping.routes.results_routes import router as results_router
from app.features.scraping.routes.scraping_routes import router as scraping_router

api_router = APIRouter()


# Register all feature routes
api_router.include_router(scraping_router)
api_router.include_router(results_router)
api_router.include_router(health_router)
