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

"""Configuration for validators."""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .utils.logging_utils import configure_split_stream_logging, parse_level

DEFAULT_VERSION_FALLBACKS: Dict[str, str] = {
    "deckhouse.io/v1alpha1": "deckhouse.io/v1",
}


def _default_fallbacks() -> Dict[str, str]:
    return dict(DEFAULT_VERSION_FALLBACKS)


@dataclass
class ValidatorConfig:
    """Configuration passed to a Validator at construction time."""
    log_level: str = "INFO"
    print_level: str = "ERROR"
    version_fallbacks: Dict[str, str] = field(default_factory=_default_fallbacks)
    logger: Optional[logging.Logger] = None

    @classmethod
    def from_env(cls) -> 'ValidatorConfig':
        """Create configuration from environment variables."""
        return cls(
            log_level=os.getenv('YAML_VALIDATION_LOG_LEVEL', 'INFO'),
            print_level=os.getenv('YAML_VALIDATION_PRINT_LEVEL', 'ERROR'),
        )

    def get_logger(self) -> logging.Logger:
        if self.logger is None:
            return logging.getLogger('yaml_validation')
        return self.logger

    def set_logging(self) -> logging.Logger:
        """Setup logging based on configuration."""
        configure_split_stream_logging(
            level=parse_level(self.log_level, logging.INFO),
            stderr_level=parse_level(self.print_level, logging.ERROR),
        )

        self.logger = logging.getLogger('yaml_validation')
        return self.logger
