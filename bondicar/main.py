"""FastAPI application."""

from fastapi import FastAPI

from bondicar.api.routes.bookings import router as bookings_router
from bondicar.api.routes.dashboard import router as dashboard_router
from bondicar.api.routes.health import router as health_router
from bondicar.api.routes.metrics import router as metrics_router
from bondicar.api.routes.offers import router as offers_router
from bondicar.api.routes.profiles import router as profiles_router
from bondicar.api.routes.trips import router as trips_router

app = FastAPI(title="BondiCar API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router, tags=["trips"])
app.include_router(bookings_router, tags=["bookings"])
app.include_router(offers_router, tags=["offers"])
app.include_router(dashboard_router, tags=["dashboard"])
app.include_router(profiles_router, tags=["profiles"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "BondiCar API", "version": "0.1.0"}
