"""
Unit Tests for ParamValidator

Tests the parameter rules shared by pre-flight validation and upstream 400
classification.
"""

from datetime import date

import pytest

from maple_gateway.application.validators import BaseValidator, ParamValidator, ParamViolation
from maple_gateway.core.exceptions import ValidationFailedError


@pytest.fixture
def validator():
    return ParamValidator(today=lambda: date(2026, 10, 17))


@pytest.mark.unit
class TestParamValidator:
    """Test suite for ParamValidator."""

    def test_valid_params_pass(self, validator):
        validator.validate(
            {
                "world_name": "Aquila",
                "character_name": "Hero123",
                "guild_name": "My Guild",
                "ocid": "0123456789abcdef",
                "date": "2026-10-16",
            }
        )

    def test_empty_params_pass(self, validator):
        validator.validate({})
        assert validator.find_violation(None) is None

    def test_unknown_world(self, validator):
        with pytest.raises(ValidationFailedError) as exc_info:
            validator.validate({"world_name": "Scania"})

        assert exc_info.value.field == "world_name"
        assert exc_info.value.requirement == "must be one of Aquila, Bootes, Cassiopeia, Delphinus"

    @pytest.mark.parametrize(
        "name,requirement",
        [
            ("A", "must be between 2 and 13 characters"),
            ("Abcdefghijklmn", "must be between 2 and 13 characters"),
            ("Bad Name", "may only contain letters and numbers"),
            ("Hero!", "may only contain letters and numbers"),
            ("   ", "is required and cannot be empty"),
        ],
    )
    def test_character_name_rules(self, validator, name, requirement):
        violation = validator.find_violation({"character_name": name})

        assert violation == ParamViolation("character_name", name, requirement)

    def test_character_name_allows_hangul(self, validator):
        assert validator.find_violation({"character_name": "한글이름"}) is None

    def test_name_alias_checked(self, validator):
        assert validator.find_violation({"name": "X"}).field == "name"

    def test_guild_name_rules(self, validator):
        assert validator.find_violation({"guild_name": "A"}).requirement == (
            "must be between 2 and 20 characters"
        )
        assert validator.find_violation({"guild_name": "Guild#1"}).requirement == (
            "may only contain letters, numbers and spaces"
        )

    def test_identifier_min_length(self, validator):
        violation = validator.find_violation({"ocid": "short"})

        assert violation.field == "ocid"
        assert violation.requirement == "must be at least 10 characters"

    @pytest.mark.parametrize(
        "value,requirement",
        [
            ("2026/10/16", "must be in YYYY-MM-DD format"),
            ("2026-02-30", "must be a valid calendar date"),
            ("2026-10-18", "cannot be in the future"),
            ("2003-04-28", "cannot be before 2003-04-29"),
        ],
    )
    def test_date_rules(self, validator, value, requirement):
        assert validator.find_violation({"date": value}).requirement == requirement

    def test_today_is_allowed(self, validator):
        assert validator.find_violation({"date": "2026-10-17"}) is None

    def test_none_date_ignored(self, validator):
        assert validator.find_violation({"date": None}) is None

    def test_first_violation_in_field_order(self, validator):
        """Test that world_name is reported before character_name."""
        violation = validator.find_violation({"character_name": "A", "world_name": "Scania"})

        assert violation.field == "world_name"

    def test_violation_to_error(self):
        violation = ParamViolation("date", "x", "must be in YYYY-MM-DD format")
        error = violation.to_error(http_status=400, endpoint="ranking.overall")

        assert error.http_status == 400
        assert error.field == "date"
        assert error.context["endpoint"] == "ranking.overall"
        assert error.retryable is False

    def test_base_validator_is_abstract(self):
        with pytest.raises(TypeError):
            BaseValidator()

    @pytest.mark.parametrize("endpoint", ["character.basic", "ranking.overall", "/maplestorysea/v1/notice"])
    def test_known_endpoints_pass(self, validator, endpoint):
        validator.validate_endpoint(endpoint)

    @pytest.mark.parametrize("endpoint", ["character.bogus", "", None])
    def test_unknown_endpoint_rejected(self, validator, endpoint):
        with pytest.raises(ValidationFailedError) as exc_info:
            validator.validate_endpoint(endpoint)

        assert exc_info.value.field == "endpoint"
