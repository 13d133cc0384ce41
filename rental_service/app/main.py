import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, engine
from shared.helpers.exception_handler import setup_exception_handlers

from . import models  # noqa: F401  registers every table on Base.metadata
from .router.common import health_router
from .router.financials import payments_router, receipts_router, verification_router
from .router.leasing_tenants import documents_router, leases_router, tenants_router
from .router.space_sites import properties_router, rooms_router


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Rental Service API")

    # Create all tables
    Base.metadata.create_all(bind=engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(properties_router.router)
    app.include_router(rooms_router.router)
    app.include_router(tenants_router.router)
    app.include_router(leases_router.router)
    app.include_router(documents_router.router)
    app.include_router(payments_router.router)
    app.include_router(receipts_router.router)
    app.include_router(verification_router.router)

    return app


app = create_app()
