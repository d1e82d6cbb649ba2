"""
Application Validators Module

Parameter validation shared by pre-flight checks and 400 classification.

USAGE:
------
    from maple_gateway.application.validators import ParamValidator

    ParamValidator().validate({"world_name": "Aquila", "character_name": "Hero"})
"""

from maple_gateway.application.validators.base import BaseValidator
from maple_gateway.application.validators.param_validator import ParamValidator, ParamViolation

__all__ = [
    "BaseValidator",
    "ParamValidator",
    "ParamViolation",
]
