from src.core.common.envelope import fail, guarded, ok
from src.core.common.errors import DomainViolationError, ErrorCode, NotFoundError


def test_ok_envelope():
    response = ok({"value": 1}, message="done")

    assert response.success is True
    assert response.data == {"value": 1}
    assert response.message == "done"
    assert response.errors is None
    assert response.error_code is None


def test_fail_defaults_errors_to_message():
    response = fail("Scheme not found", code=ErrorCode.NOT_FOUND)

    assert response.success is False
    assert response.data is None
    assert response.errors == ["Scheme not found"]
    assert response.error_code == ErrorCode.NOT_FOUND


def test_guarded_keeps_engine_error_codes():
    def _raise():
        raise DomainViolationError("NAV not available for this scheme")

    response = guarded(_raise, failure_message="Failed to calculate redemption")

    assert response.error_code == ErrorCode.DOMAIN_VIOLATION
    assert response.message == "NAV not available for this scheme"


def test_guarded_keeps_detail_errors():
    def _raise():
        raise NotFoundError("Client not found", errors=["client 9 is unknown"])

    response = guarded(_raise, failure_message="Failed to fetch portfolio")

    assert response.error_code == ErrorCode.NOT_FOUND
    assert response.errors == ["client 9 is unknown"]


def test_guarded_maps_unexpected_errors_to_upstream_failure(caplog):
    def _raise():
        raise ConnectionError()

    response = guarded(_raise, failure_message="Failed to fetch holdings")

    assert response.error_code == ErrorCode.UPSTREAM_FAILURE
    assert response.message == "Failed to fetch holdings"
    assert response.errors == ["Unknown error"]
    assert "Failed to fetch holdings" in caplog.text
