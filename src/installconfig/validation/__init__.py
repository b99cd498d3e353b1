"""Install-config validation: field-level verdicts and the aggregate error."""

from installconfig.validation.install_config import (
    AWS_REGIONS,
    FieldError,
    InstallConfigValidationError,
    Validator,
    assert_valid_install_config,
    validate_install_config,
)

__all__ = [
    "AWS_REGIONS",
    "FieldError",
    "InstallConfigValidationError",
    "Validator",
    "assert_valid_install_config",
    "validate_install_config",
]
