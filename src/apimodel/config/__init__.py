# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generator options and service configuration loading."""

from apimodel.config.options import (
    OPTIONS_FILE_NAME,
    GeneratorOptions,
    OptionsError,
    SpecificationFormat,
    load_options,
)
from apimodel.config.service_config import (
    ServiceConfigError,
    load_service_config,
    parse_service_config,
    split_api_name,
)

__all__ = [
    "OPTIONS_FILE_NAME",
    "GeneratorOptions",
    "OptionsError",
    "SpecificationFormat",
    "load_options",
    "ServiceConfigError",
    "load_service_config",
    "parse_service_config",
    "split_api_name",
]
