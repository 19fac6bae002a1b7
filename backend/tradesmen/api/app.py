"""
FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradesmen.api.routes import bookings, contact, customers, health, quotes
from tradesmen.api.middleware import (
    AppException,
    CorrelationIdMiddleware,
    app_exception_handler,
    model_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from tradesmen.lib.logging import get_logger
from tradesmen.lib.settings import settings
from tradesmen.services.email_service import EmailService
from tradesmen.services.errors import ModelError
from tradesmen.services.notification_service import NotificationChannel

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Builds the SMTP client once and exposes it to routes through the
    notification channel on ``app.state``.
    """
    logger.info(f"{settings.app_name} starting up...")
    app.state.notification_channel = NotificationChannel(EmailService.from_settings(settings))
    yield
    logger.info(f"{settings.app_name} shutting down...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Bookings, contact form, customers and quotes for XF Tradesmen",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)


# Register exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(ModelError, model_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# Include routers
app.include_router(health.router)
app.include_router(contact.router)
app.include_router(bookings.router)
app.include_router(customers.router)
app.include_router(quotes.router)
app.include_router(quotes.public_router)
