"""FastAPI main application."""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.gateway.api.health import router as health_router
from apps.gateway.api.tenants import router as tenants_router
from apps.gateway.api.webhooks import router as webhooks_router
from apps.gateway.config import get_settings

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ]
)

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Tenant Zoom Gateway", version="1.0.0", default_tenant=settings.default_tenant_id)
    yield
    logger.info("Shutting down Tenant Zoom Gateway")


app = FastAPI(
    title="Tenant Zoom Gateway",
    description="Per-tenant Zoom OAuth token exchange and meeting artifact access",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, tags=["Health"])
app.include_router(tenants_router, prefix="/tenants", tags=["Tenants"])
app.include_router(webhooks_router, prefix="/webhooks", tags=["Webhooks"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Tenant Zoom Gateway",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
