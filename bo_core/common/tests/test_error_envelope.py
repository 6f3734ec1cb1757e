import pytest
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIRequestFactory

from bo_core.common.api.exceptions import DependencyConflict, VersionConflict, api_exception_handler


def _handle(exc):
    request = APIRequestFactory().get("/api/v1/categories/")
    return api_exception_handler(exc, {"request": request, "view": None})


@pytest.mark.parametrize(
    "exc, status, code",
    [
        (VersionConflict(), 409, "version_conflict"),
        (DependencyConflict("Cannot delete: 2 items still reference this category."), 409, "dependency_conflict"),
        (NotFound("Category not found."), 404, "not_found"),
        (ValidationError({"name": "Name is required."}), 400, "validation_error"),
    ],
)
def test_known_errors_use_the_envelope(exc, status, code):
    res = _handle(exc)

    assert res.status_code == status
    assert res.data["error"]["code"] == code
    assert res.data["error"]["request_id"]


def test_dependency_conflict_message_is_kept():
    res = _handle(DependencyConflict("Cannot delete: 2 items still reference this category."))
    assert res.data["error"]["message"] == "Cannot delete: 2 items still reference this category."


def test_validation_details_are_kept():
    res = _handle(ValidationError({"name": "Name is required."}))
    assert res.data["error"]["details"] == {"name": "Name is required."}


def test_unhandled_error_is_generic_and_logged(caplog):
    with caplog.at_level("ERROR", logger="bo_core.common.api.exceptions"):
        res = _handle(RuntimeError("database password is hunter2"))

    assert res.status_code == 500
    assert res.data["error"]["code"] == "server_error"
    assert "hunter2" not in str(res.data)
    assert any("Unhandled error" in r.getMessage() for r in caplog.records)


def test_caller_request_id_is_echoed():
    request = APIRequestFactory().get("/api/v1/categories/", HTTP_X_REQUEST_ID="req-12345678")
    res = api_exception_handler(NotFound(), {"request": request, "view": None})
    assert res.data["error"]["request_id"] == "req-12345678"


def test_malformed_request_id_is_replaced():
    request = APIRequestFactory().get("/api/v1/categories/", HTTP_X_REQUEST_ID="bad id!")
    res = api_exception_handler(NotFound(), {"request": request, "view": None})
    assert res.data["error"]["request_id"] != "bad id!"
