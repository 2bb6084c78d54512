from fastapi import FastAPI

from . import (
    admin,
    auth,
    emails,
    health,
    packages,
    profiles,
    service_types,
    services,
    subscriptions,
    vehicles,
)


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(emails.router)
    app.include_router(profiles.router)
    app.include_router(vehicles.router)
    app.include_router(subscriptions.router)
    app.include_router(service_types.router)
    app.include_router(services.router)
    app.include_router(packages.router)
    app.include_router(admin.router)
