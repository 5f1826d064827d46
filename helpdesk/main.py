"""
Helpdesk SLA Service - Main Application
========================================

Multi-tenant helpdesk core with SLA tracking.

Modules:
- Tickets: Ticket lifecycle, assignment and comments
- SLA: Per-organization rules, ticket timers and breach monitoring

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects and repository interfaces
- Infrastructure: Database, scheduler, rule seeding
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from helpdesk.config import settings
from helpdesk.core import ApplicationException

# Infrastructure
from helpdesk.infrastructure.database import close_database, create_tables, init_database

# SLA Module
from helpdesk.sla.application import SLAMonitoringJob
from helpdesk.sla.infrastructure import SLARuleSeeder, SLAScheduler, rule_repository_scope
from helpdesk.tickets.infrastructure import ticket_repository_scope

# Module Routers
from helpdesk.sla.interfaces import sla_router
from helpdesk.tickets.interfaces import tickets_router

# Shared
from helpdesk.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
    validation_exception_handler,
)
from helpdesk.shared.infrastructure.events import EventBus
from helpdesk.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)

sla_scheduler: Optional[SLAScheduler] = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables
    3. Seed SLA rules from the configured YAML file
    4. Start the SLA monitoring scheduler

    SHUTDOWN:
    1. Stop SLA scheduler
    2. Close database connections
    """
    global sla_scheduler

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Helpdesk Service", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()

    # Create tables (for development - use Alembic in production)
    # If the database is not available the server still starts, but
    # database-dependent endpoints will fail
    try:
        await create_tables()
    except Exception as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    if settings.sla_rules_seed_path:
        try:
            await SLARuleSeeder(rule_repository_scope).seed(settings.sla_rules_seed_path)
        except ApplicationException as e:
            logger.error(
                "SLA rule seeding failed",
                extra={"error": e.message, "details": e.details}
            )

    monitoring_job = SLAMonitoringJob(
        ticket_repository_scope,
        event_bus=app.state.event_bus,
        max_error_details=settings.sla_monitor_max_error_details,
        timeout_seconds=settings.sla_monitor_timeout_seconds
    )
    sla_scheduler = SLAScheduler(interval_seconds=settings.sla_monitor_interval_seconds)
    await sla_scheduler.start(monitoring_job.execute)

    logger.info("Helpdesk Service started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Helpdesk Service")

    if sla_scheduler:
        await sla_scheduler.stop()

    await close_database()

    logger.info("Helpdesk Service shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Helpdesk SLA API",
    description="""
    ## Multi-tenant Helpdesk with SLA Tracking

    ### Tickets
    - `POST /tickets` - Open a ticket (SLA due dates from the organization's rule)
    - `PATCH /tickets/{id}` - Change status, assignee, subject, description or tags
    - `POST /tickets/{id}/comments` - Reply; the first public agent reply is the first response

    ### SLA
    - `POST /sla/organizations/{org}/rules` - One rule per organization and priority
    - `GET /sla/tickets/{id}` - Stored timer plus a live breach evaluation
    - `POST /sla/monitor/run` - Run the breach sweep now (also runs every 5 minutes)

    ### Errors
    Every error response is `{"error": {"code", "message", "details"}, "correlation_id"}`
    with codes `VALIDATION_ERROR` (400), `NOT_FOUND` (404), `CONFLICT` (409)
    and `INTERNAL_ERROR` (500).
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Shared by the scheduled sweep and the request handlers
app.state.event_bus = EventBus()
app.state.settings = settings

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(tickets_router)
app.include_router(sla_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {"sla_scheduler": "running"}
                }
            }
        }
    }
})
async def health_check(request: Request):
    """Health check endpoint for load balancers and orchestrators."""
    if sla_scheduler and sla_scheduler.is_running:
        scheduler_state = "running"
    elif settings.sla_monitor_interval_seconds == 0:
        scheduler_state = "disabled"
    else:
        scheduler_state = "stopped"

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": {"sla_scheduler": scheduler_state}
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "tickets": {
                "prefix": "/tickets",
                "endpoints": [
                    "POST /tickets - Open ticket",
                    "GET /tickets - List tickets",
                    "GET /tickets/{id} - Get ticket",
                    "PATCH /tickets/{id} - Update ticket",
                    "POST /tickets/{id}/comments - Add comment",
                    "GET /tickets/{id}/comments - List comments"
                ]
            },
            "sla": {
                "prefix": "/sla",
                "endpoints": [
                    "POST /sla/organizations/{org}/rules - Create rule",
                    "GET /sla/organizations/{org}/rules - List rules",
                    "GET /sla/organizations/{org}/rules/{priority} - Get rule",
                    "PUT /sla/organizations/{org}/rules/{priority} - Update rule",
                    "GET /sla/tickets/{id} - Get ticket SLA status",
                    "POST /sla/monitor/run - Run monitoring sweep"
                ]
            }
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "helpdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
