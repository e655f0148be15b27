# Copyright PulseMCP contributors. All Rights Reserved.
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

"""Environment variable validation run before a server starts."""

import os
from loguru import logger
from pulsemcp.common.errors import ConfigurationError
from typing import Dict, Iterable, Mapping, NamedTuple, Optional


class EnvVar(NamedTuple):
    """An environment variable a server reads."""

    name: str
    description: str
    example: Optional[str] = None
    default: Optional[str] = None


def validate_environment(
    server_name: str,
    required: Iterable[EnvVar],
    optional: Iterable[EnvVar] = (),
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Optional[str]]:
    """Check that every required variable is set.

    Args:
        server_name: Name used in log messages
        required: Variables that must be set
        optional: Variables that may be set
        environ: Environment mapping, defaults to os.environ

    Returns:
        The value of every required and optional variable, with defaults applied

    Raises:
        ConfigurationError: If a required variable is missing or empty
    """
    env = os.environ if environ is None else environ
    required = list(required)
    optional = list(optional)

    missing = [var for var in required if not env.get(var.name)]
    if missing:
        logger.error(f'{server_name}: missing required environment variables:')
        for var in missing:
            example = f' (example: {var.example})' if var.example else ''
            logger.error(f'  - {var.name}: {var.description}{example}')
        if optional:
            logger.error('Optional environment variables:')
            for var in optional:
                default = f' (default: {var.default})' if var.default else ''
                logger.error(f'  - {var.name}: {var.description}{default}')
        names = [var.name for var in missing]
        raise ConfigurationError(
            f'Missing required environment variables: {", ".join(names)}', missing=names
        )

    values: Dict[str, Optional[str]] = {var.name: env.get(var.name) for var in required}
    for var in optional:
        values[var.name] = env.get(var.name) or var.default
    return values
