"""Error Hierarchy — status codes, categories and the response envelope."""

from circle.core.errors import (
    AuthenticationRequiredError, CircleError, DatabaseError, ErrorCategory,
    RequestRejectedError, ResourceNotFoundError,
)


def test_request_rejected_is_400_without_detail():
    err = RequestRejectedError()

    assert err.http_status == 400
    assert err.to_response()["error"]["message"] == "Request could not be completed"


def test_not_found_names_resource():
    err = ResourceNotFoundError("Group", "abc")

    assert err.http_status == 404
    assert err.category == ErrorCategory.RESOURCE_NOT_FOUND
    assert "Group 'abc'" in err.message


def test_authentication_and_database_errors():
    assert AuthenticationRequiredError().http_status == 401
    db = DatabaseError("timeout", "commit")
    assert db.http_status == 503
    assert db.operation == "commit"


def test_all_errors_share_base():
    for err in (RequestRejectedError(), AuthenticationRequiredError()):
        assert isinstance(err, CircleError)
        body = err.to_response()["error"]
        assert set(body) == {"code", "message", "category", "severity", "timestamp"}
