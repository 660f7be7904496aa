import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront_admin.api.routes import auth, categories, contact, customers, dashboard, orders, products, reviews
from storefront_admin.core.config import Settings
from storefront_admin.core.database import Database
from storefront_admin.core.errors import register_error_handlers
from storefront_admin.core.log import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.database.close()

    app = FastAPI(
        title="Storefront Admin API",
        description="Backend for the storefront administration dashboard",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # Include routers
    app.include_router(customers.router, prefix="/api/customers", tags=["customers"])
    app.include_router(products.router, prefix="/api/products", tags=["products"])
    app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
    app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
    app.include_router(reviews.router, prefix="/api/reviews", tags=["reviews"])
    app.include_router(contact.router, prefix="/api/contact", tags=["contact"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
