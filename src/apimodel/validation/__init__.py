# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Cross-reference checks for built API models."""

from apimodel.validation.checks import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate,
)

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "validate",
]
