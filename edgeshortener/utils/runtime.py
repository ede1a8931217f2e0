"""Runtime utilities

Functions:
    running_locally() -> bool:
        True if lambda is running in local SAM, False otherwise.
    get_user_id(event) -> str | None:
        Verified principal id supplied by the upstream authorizer.
    get_header(event, name) -> str | None:
        Case-insensitive request header lookup.
    get_domain(event) -> str | None:
        Host the request was addressed to.

Example:
    >>> from edgeshortener.utils.runtime import running_locally
    >>> os.environ['APP_ENV'] = 'local'
    >>> running_locally()
    True
    >>> os.environ['APP_ENV'] = 'dev'
    >>> running_locally()
    False
"""

import os
from urllib.parse import urlsplit

from edgeshortener.constants import ENV
from edgeshortener.types import LambdaEvent


def running_locally() -> bool:
    """Return True if running in SAM local invoke/api, False otherwise."""
    env = os.getenv(ENV.App.APP_ENV, '').lower()
    return env == 'local' or os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true'


def get_user_id(event: LambdaEvent) -> str | None:
    """Return the verified principal ('sub' claim) from the authorizer context

    Token verification happens upstream (API Gateway authorizer); the handler
    only reads the resulting claims.
    """
    claims = (event.get('requestContext') or {}).get('authorizer', {}).get('claims', {})
    return claims.get('sub')


def get_header(event: LambdaEvent, name: str) -> str | None:
    headers = event.get('headers') or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def get_domain(event: LambdaEvent) -> str | None:
    """Return the lowercased request host without a port: API Gateway's domainName, falling back to the Host header"""
    domain = (event.get('requestContext') or {}).get('domainName') or get_header(event, 'Host')
    return urlsplit(f'//{domain}').hostname if domain else None
