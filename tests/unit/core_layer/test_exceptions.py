"""
Unit Tests for Exception Hierarchy

Tests the error taxonomy, retryability table, message rendering and the
immutability of classified errors.
"""

import copy
import pickle

import pytest

from maple_gateway.core.exceptions import (
    ERROR_CLASSES,
    MESSAGE_TEMPLATES,
    ConfigurationError,
    ConnectionFailedError,
    DomainError,
    ErrorKind,
    MapleGatewayError,
    NotFoundError,
    QuotaExceededError,
    ResourceKind,
    ServiceUnavailableError,
    UnauthorizedError,
    UnavailableReason,
    ValidationFailedError,
    create_domain_error,
    is_retryable,
    render_message,
)


@pytest.mark.unit
class TestBaseException:
    """Test suite for MapleGatewayError."""

    def test_details_are_copied(self):
        """Test that mutating the caller's dict does not change the error."""
        details = {"setting": "NEXON_API_KEY"}
        error = ConfigurationError("missing", details=details)
        details["setting"] = "other"

        assert error.details == {"setting": "NEXON_API_KEY"}

    def test_to_dict(self):
        error = ConfigurationError("missing", details={"setting": "NEXON_API_KEY"})
        assert error.to_dict() == {
            "error_type": "ConfigurationError",
            "message": "missing",
            "details": {"setting": "NEXON_API_KEY"},
        }

    def test_configuration_error_is_gateway_error(self):
        error = ConfigurationError("missing")

        assert isinstance(error, MapleGatewayError)
        assert repr(error) == "ConfigurationError(message='missing')"


@pytest.mark.unit
class TestRetryability:
    """Test suite for the retryability table."""

    @pytest.mark.parametrize(
        "kind,sub_kind,expected",
        [
            (ErrorKind.UNAUTHORIZED, "expired", False),
            (ErrorKind.FORBIDDEN, None, False),
            (ErrorKind.NOT_FOUND, "character", False),
            (ErrorKind.RATE_LIMITED, None, True),
            (ErrorKind.QUOTA_EXCEEDED, "daily", False),
            (ErrorKind.QUOTA_EXCEEDED, "concurrent", True),
            (ErrorKind.VALIDATION_FAILED, None, False),
            (ErrorKind.SERVER_ERROR, None, True),
            (ErrorKind.SERVICE_UNAVAILABLE, "maintenance", False),
            (ErrorKind.SERVICE_UNAVAILABLE, "generic", True),
            (ErrorKind.SERVICE_UNAVAILABLE, "queue_timeout", False),
            (ErrorKind.GATEWAY_TIMEOUT, None, True),
            (ErrorKind.CONNECTION_FAILED, "timeout", True),
            (ErrorKind.CONNECTION_FAILED, "network", True),
            (ErrorKind.CONNECTION_FAILED, "gateway", False),
            (ErrorKind.UNKNOWN, None, False),
        ],
    )
    def test_table(self, kind, sub_kind, expected):
        assert is_retryable(kind, sub_kind) is expected

    def test_unlisted_sub_kind_falls_back_to_kind_default(self):
        """Test that an unknown sub-kind uses the kind's default row."""
        assert is_retryable(ErrorKind.RATE_LIMITED, "something_new") is True
        assert is_retryable(ErrorKind.NOT_FOUND, "something_new") is False

    def test_enum_sub_kind_accepted(self):
        assert is_retryable(ErrorKind.SERVICE_UNAVAILABLE, UnavailableReason.MAINTENANCE) is False


@pytest.mark.unit
class TestDomainError:
    """Test suite for DomainError construction and behaviour."""

    def test_every_kind_has_class_and_template(self):
        """Test that each ErrorKind maps to a subclass and a message template."""
        for kind in ErrorKind:
            assert ERROR_CLASSES[kind].kind is kind
            assert kind in MESSAGE_TEMPLATES

    def test_default_sub_kind(self):
        assert NotFoundError().sub_kind == "resource"
        assert UnauthorizedError().sub_kind == "invalid"
        assert ConnectionFailedError().sub_kind == "network"

    def test_enum_sub_kind_normalized_to_string(self):
        error = NotFoundError(ResourceKind.CHARACTER, http_status=404)

        assert error.sub_kind == "character"
        assert error.http_status == 404
        assert error.retryable is False
        assert "character" in error.message

    def test_message_is_stable_and_ignores_upstream_wording(self):
        """Test that the rendered message comes only from the template."""
        a = ServiceUnavailableError("generic", context={"upstream_message": "Backend exploded"})
        b = ServiceUnavailableError("generic", context={"upstream_message": "other wording"})

        assert a.message == b.message
        assert "Backend exploded" not in a.message

    def test_validation_message_names_field_and_requirement(self):
        error = ValidationFailedError(
            context={"field": "date", "value": "2099-01-01", "requirement": "cannot be in the future"}
        )

        assert error.field == "date"
        assert error.requirement == "cannot be in the future"
        assert error.message == "Invalid value for 'date': cannot be in the future."

    def test_render_message_fills_missing_placeholders(self):
        assert "unknown" in render_message(ErrorKind.VALIDATION_FAILED)

    def test_error_is_immutable(self):
        """Test that classified fields cannot be reassigned."""
        error = QuotaExceededError("daily", http_status=429)

        for attr in ("kind", "sub_kind", "http_status", "retryable", "message", "details"):
            with pytest.raises(AttributeError):
                setattr(error, attr, None)

    def test_details_are_read_only(self):
        error = NotFoundError(context={"endpoint": "character.basic"})

        with pytest.raises(TypeError):
            error.details["endpoint"] = "other"

    def test_context_returns_copy(self):
        error = NotFoundError(context={"endpoint": "character.basic"})
        ctx = error.context
        ctx["endpoint"] = "changed"

        assert error.context["endpoint"] == "character.basic"

    def test_context_is_redacted(self):
        """Test that credentials never enter an error's context."""
        error = UnauthorizedError(
            "invalid",
            http_status=401,
            context={
                "params": {"character_name": "Hero", "api_key": "live_0123456789abcdef0123"},
                "authorization": "secret",
            },
        )

        assert error.context["params"]["api_key"] == "[REDACTED]"
        assert error.context["params"]["character_name"] == "Hero"
        assert error.context["authorization"] == "[REDACTED]"
        assert "0123456789abcdef" not in str(error.to_dict())

    def test_to_dict_includes_classification(self):
        data = ServiceUnavailableError("maintenance", http_status=503).to_dict()

        assert data["error_type"] == "ServiceUnavailableError"
        assert data["kind"] == "service_unavailable"
        assert data["sub_kind"] == "maintenance"
        assert data["http_status"] == 503
        assert data["retryable"] is False

    def test_create_domain_error_picks_subclass(self):
        error = create_domain_error(ErrorKind.NOT_FOUND, "guild", http_status=404)

        assert isinstance(error, NotFoundError)
        assert isinstance(error, DomainError)
        assert error.sub_kind == "guild"

    def test_repr(self):
        assert repr(NotFoundError("guild", http_status=404)) == (
            "NotFoundError(kind=not_found{guild}, http_status=404, retryable=False)"
        )

    @pytest.mark.parametrize("copier", [copy.copy, copy.deepcopy, lambda e: pickle.loads(pickle.dumps(e))])
    def test_copy_and_pickle_keep_classification(self, copier):
        """Test that a rebuilt error has the same kind, sub-kind, status and context."""
        original = NotFoundError(
            ResourceKind.CHARACTER,
            http_status=404,
            context={"endpoint": "character.basic", "params": {"api_key": "live_0123456789abcdef0123"}},
        )

        rebuilt = copier(original)

        assert type(rebuilt) is NotFoundError
        assert rebuilt.sub_kind == "character"
        assert rebuilt.http_status == 404
        assert rebuilt.message == original.message
        assert rebuilt.context == original.context
        assert rebuilt.context["params"]["api_key"] == "[REDACTED]"
