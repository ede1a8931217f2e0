"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to
access configuration data stored in **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application*. Configuration data is stored as a JSON document
under a configuration profile and deployed to the corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 42,
        "configs": {
            "redirect_url": {
                "database": {"url": "postgresql+psycopg://..."},
                "cache": {"backend": "elasticache"},
                "shortener": {"cache_ttl": 3600}
            },
            "manage_links": { ... },
            "sweep_expired_links": { ... }
        }
    }

Each Lambda loads its own section (e.g., `"redirect_url"`) from this
AppConfig document. When running locally, the same section is assembled
from environment variables instead (`DATABASE_URL`, `REDIS_HOST`, ...).

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    load_config(lambda_name: str) -> dict
        Load configuration for a given Lambda.

Classes:
    ShortenerSettings
        Tunables of the code generator, cache-aside protocol and sweeper.

Example:
    Typical usage inside a Lambda handler:

        >>> from edgeshortener.utils.config import load_config
        >>> config = load_config('redirect_url')
        >>> config['database']['url']
        'postgresql+psycopg://shortener@db.internal/shortener'
"""

import os
import json
import logging
from dataclasses import dataclass, fields
from typing import Any

import boto3

from edgeshortener.constants import ENV, TTL, Lifetime, Defaults
from edgeshortener.exceptions import BadConfigurationError, MalformedResponseError
from edgeshortener.utils.helpers import require_environment
from edgeshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'"""
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'edgeshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'edgeshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


@dataclass(frozen=True)
class ShortenerSettings:
    """Tunables shared by the services (see `constants.Defaults`)."""

    code_length: int = Defaults.CODE_LENGTH
    max_generation_attempts: int = Defaults.MAX_GENERATION_ATTEMPTS
    cache_ttl: int = TTL.CACHE_ENTRY
    default_link_lifetime_ms: int = Lifetime.DEFAULT_LINK_MS
    max_batch_size: int = Defaults.MAX_BATCH_SIZE
    sweep_batch_size: int = Defaults.SWEEP_BATCH_SIZE
    sweep_batch_delay: float = Defaults.SWEEP_BATCH_DELAY
    max_workers: int = Defaults.MAX_WORKERS

    @classmethod
    def from_config(cls, section: dict[str, Any] | None) -> 'ShortenerSettings':
        """Build settings from a config section, ignoring unknown keys.

        Raises:
            BadConfigurationError: If a known key holds a non-numeric or non-positive value.
        """
        section = section or {}
        values = {}
        for f in fields(cls):
            if f.name not in section:
                continue
            caster = float if f.type in (float, 'float') else int
            try:
                value = caster(section[f.name])
            except (TypeError, ValueError) as e:
                raise BadConfigurationError(f'Invalid value for shortener setting {f.name!r}: {section[f.name]!r}') from e
            if value < 0 or (value == 0 and caster is int):
                raise BadConfigurationError(f'Shortener setting {f.name!r} must be positive (given value: {value}).')
            values[f.name] = value
        return cls(**values)


def _load_local_config() -> dict:
    """Assemble a lambda's config section from environment variables (local development)"""
    return {
        'database': {'url': os.environ.get(ENV.Database.URL, 'sqlite:///edgeshortener.db')},
        'cache': {
            'backend': 'redis',
            'host': os.environ.get(ENV.Cache.HOST, 'localhost'),
            'port': int(os.environ.get(ENV.Cache.PORT, 6379)),
            'db': int(os.environ.get(ENV.Cache.DB, 0)),
        },
        'shortener': {},
    }


@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def _load_appconfig(lambda_name: str) -> dict:
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    try:
        content = response['Configuration'].read()
        config = json.loads(content.decode('utf-8'))
        data = config['configs'][lambda_name]
    except (KeyError, json.JSONDecodeError) as e:
        raise MalformedResponseError(f'AppConfig document has no usable section for {lambda_name!r}') from e

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': config.get('build')})
    return data


def load_config(lambda_name: str) -> dict:
    """Load configuration for a given Lambda

    Locally (APP_ENV=local or under SAM) the section is assembled from
    environment variables. Otherwise the AppConfig JSON is fetched once and
    the section relevant to the requested Lambda is returned.

    Environment variables required (non-local):
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "redirect_url" or "manage_links").

    Returns:
        dict: The lambda's config section with 'database', 'cache' and 'shortener' keys.

    Raises:
        MissingEnvironmentVariableError: If AppConfig identifiers are missing (non-local).
        MalformedResponseError: If the AppConfig document lacks the lambda's section.
    """
    if running_locally():
        logger.debug('Loading config from environment variables.', extra={'lambdaName': lambda_name})
        return _load_local_config()
    return _load_appconfig(lambda_name)
