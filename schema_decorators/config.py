# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration management for schema validation."""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Type

import jsonschema

from .exceptions import ConfigurationError
from .utils.logging_utils import configure_split_stream_logging


# JSON Schema drafts accepted for composed schemas
DRAFT_VALIDATORS: Dict[str, Type] = {
    "2020-12": jsonschema.Draft202012Validator,
    "2019-09": jsonschema.Draft201909Validator,
    "7": jsonschema.Draft7Validator,
    "6": jsonschema.Draft6Validator,
    "4": jsonschema.Draft4Validator,
}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class ValidationConfig:
    """Configuration class for schema composition and validation."""
    log_level: str = "INFO"
    print_level: str = "ERROR"
    abort_early: bool = True
    format_check: bool = True
    draft: str = "2020-12"

    @classmethod
    def from_env(cls) -> 'ValidationConfig':
        """Create configuration from environment variables."""
        return cls(
            log_level=os.getenv('SCHEMA_DECORATORS_LOG_LEVEL', 'INFO'),
            print_level=os.getenv('SCHEMA_DECORATORS_PRINT_LEVEL', 'ERROR'),
            abort_early=_env_flag('SCHEMA_DECORATORS_ABORT_EARLY', 'true'),
            format_check=_env_flag('SCHEMA_DECORATORS_FORMAT_CHECK', 'true'),
            draft=os.getenv('SCHEMA_DECORATORS_DRAFT', '2020-12'),
        )

    def validator_class(self) -> Type:
        """Get the jsonschema validator class for the configured draft."""
        try:
            return DRAFT_VALIDATORS[self.draft]
        except KeyError:
            raise ConfigurationError(
                f"Unsupported JSON Schema draft '{self.draft}'. "
                f"Supported drafts: {list(DRAFT_VALIDATORS)}"
            ) from None

    def set_logging(self) -> logging.Logger:
        """Setup package logging based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        stderr_level = getattr(logging, self.print_level.upper(), logging.ERROR)

        formatter = logging.Formatter('%(name)s - %(levelname)s - %(message)s')
        return configure_split_stream_logging(level=level, stderr_level=stderr_level, formatter=formatter)


# Global configuration instance
validation_config = ValidationConfig.from_env()
