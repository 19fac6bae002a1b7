"""
Tests for error handler middleware and custom exceptions.
"""
import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradesmen.api.middleware import CorrelationIdMiddleware
from tradesmen.api.middleware.error_handler import (
    AppException,
    NotFoundException,
    UnauthorizedException,
    ForbiddenException,
    BadRequestException,
    ConflictException,
    ValidationException,
    app_exception_handler,
    model_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from tradesmen.services.errors import (
    EntityNotFoundError,
    ModelError,
    ModelValidationError,
    UniqueViolationError,
)


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(ModelError, model_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    class Item(BaseModel):
        name: str = Field(..., min_length=3)
        price: float = Field(..., gt=0)

    @app.post("/items")
    def create_item(item: Item):
        return item

    @app.get("/missing-booking")
    def missing_booking():
        raise EntityNotFoundError("Booking", 42)

    @app.get("/duplicate")
    def duplicate():
        raise UniqueViolationError("customers", "customers_email_key")

    @app.get("/bad-row")
    def bad_row():
        raise ModelValidationError("Constraint violation on bookings")

    @app.get("/model-failure")
    def model_failure():
        raise ModelError("connection reset while reading postgres://user:secret@db")

    @app.get("/not-found")
    def not_found():
        raise NotFoundException("Customer", 7)

    @app.get("/forbidden")
    def forbidden():
        raise ForbiddenException()

    @app.get("/boom")
    def boom():
        raise RuntimeError("secret stack detail")

    return app


@pytest.fixture
def error_client():
    return TestClient(_build_app(), raise_server_exceptions=False)


@pytest.mark.unit
def test_app_exception_creation():
    exc = AppException(message="Test error", status_code=500, detail="more")

    assert exc.message == "Test error"
    assert exc.status_code == 500
    assert exc.detail == "more"


@pytest.mark.unit
def test_not_found_exception():
    exc = NotFoundException("Booking", 123)

    assert exc.message == "Resource not found"
    assert exc.status_code == 404
    assert exc.detail == "Booking with id 123 not found"


@pytest.mark.unit
def test_not_found_exception_without_id():
    exc = NotFoundException("Customer")

    assert exc.detail == "Customer not found"
    assert exc.status_code == 404


@pytest.mark.unit
def test_auth_exceptions():
    assert UnauthorizedException().status_code == 401
    assert UnauthorizedException().message == "Authentication required"
    assert ForbiddenException("Access denied").status_code == 403
    assert ForbiddenException("Access denied").message == "Access denied"


@pytest.mark.unit
def test_bad_request_and_conflict_exceptions():
    bad = BadRequestException("Invalid input", detail="email")
    conflict = ConflictException("Already exists")

    assert (bad.status_code, bad.detail) == (400, "email")
    assert conflict.status_code == 409


@pytest.mark.unit
def test_validation_exception():
    exc = ValidationException("Name is required")

    assert exc.message == "Validation failed"
    assert exc.status_code == 400
    assert exc.detail == "Name is required"


@pytest.mark.unit
def test_entity_not_found_maps_to_404(error_client):
    response = error_client.get("/missing-booking")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Resource not found"
    assert body["detail"] == "Booking with id 42 not found"
    assert body["correlation_id"] == response.headers["X-Correlation-ID"]


@pytest.mark.unit
def test_unique_violation_maps_to_409(error_client):
    response = error_client.get("/duplicate")

    assert response.status_code == 409
    assert response.json()["error"] == "Unique constraint violation"
    assert "customers" in response.json()["detail"]


@pytest.mark.unit
def test_model_validation_maps_to_400(error_client):
    response = error_client.get("/bad-row")

    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


@pytest.mark.unit
def test_other_model_errors_are_opaque(error_client):
    response = error_client.get("/model-failure")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal server error"
    assert "detail" not in body
    assert "secret" not in response.text


@pytest.mark.unit
def test_app_exception_handler_in_route(error_client):
    response = error_client.get("/not-found")

    assert response.status_code == 404
    assert response.json()["detail"] == "Customer with id 7 not found"


@pytest.mark.unit
def test_forbidden_has_no_detail(error_client):
    response = error_client.get("/forbidden")

    assert response.status_code == 403
    assert response.json()["error"] == "Insufficient permissions"
    assert "detail" not in response.json()


@pytest.mark.unit
def test_request_validation_maps_to_400(error_client):
    response = error_client.post("/items", json={"name": "ab", "price": -1})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    fields = {tuple(error["loc"]) for error in body["detail"]}
    assert ("body", "name") in fields
    assert ("body", "price") in fields


@pytest.mark.unit
def test_unknown_route_uses_error_shape(error_client):
    response = error_client.get("/nowhere")

    assert response.status_code == 404
    assert response.json()["error"] == "Not Found"
    assert "correlation_id" in response.json()


@pytest.mark.unit
def test_unhandled_exception_hides_details(error_client):
    response = error_client.get("/boom", headers={"X-Correlation-ID": "req-1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "correlation_id": "req-1"}
