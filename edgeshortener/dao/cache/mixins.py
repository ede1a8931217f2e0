"""Redis / ElastiCache client wiring for the edge cache DAOs

The edge cache sits on the redirect path and is best-effort, so clients are
built with short socket timeouts: a sick node costs one store read, not a
stalled request.

Classes:
    CacheEndpoint:
        Resolved host, port, db and optional username of a cache node.
    RedisClientMixin:
        Builds (or adopts) a Redis client, pings it and sets up the key schema.
    ElastiCacheClientMixin:
        Resolves the endpoint from AWS SSM Parameter Store and the AUTH
        credentials from AWS Secrets Manager, then defers to RedisClientMixin.

Environment variables (ElastiCacheClientMixin):
    ELASTICACHE_HOST_PARAM  : SSM parameter path for the node host
    ELASTICACHE_PORT_PARAM  : SSM parameter path for the node port
    ELASTICACHE_DB_PARAM    : SSM parameter path for the DB index
    ELASTICACHE_USER_PARAM  : SSM parameter path for the ACL username (optional)
    ELASTICACHE_SECRET      : Secrets Manager name for {"username": "...", "password": "..."}
    LOCALSTACK_ENDPOINT     : LocalStack endpoint URL for local runs

Example:
    >>> class LinkCacheDAO(RedisClientMixin, EdgeCacheBaseDAO):
    ...     pass
    ...
    >>> dao = LinkCacheDAO(redis_host='localhost', prefix='edgeshortener:local')
    >>> dao.keys.url_key('9f2e')
    'cache:edgeshortener:local:url:9f2e'
"""

import os
import json
from typing import Any, NamedTuple

import boto3
import redis

from edgeshortener.constants import ENV, Defaults
from edgeshortener.dao.cache.cache_key_schema import CacheKeySchema
from edgeshortener.dao.cache.helpers import describe_client
from edgeshortener.dao.exceptions import CacheUnavailableError
from edgeshortener.exceptions import BadConfigurationError, MalformedResponseError
from edgeshortener.types import SSMClient, SecretsManagerClient
from edgeshortener.utils.helpers import require_environment
from edgeshortener.utils.runtime import running_locally


class CacheEndpoint(NamedTuple):
    host: str
    port: int
    db: int
    username: str | None = None


def _client_options(socket_timeout: float) -> dict[str, Any]:
    # Snapshots are JSON text; decoded responses keep DAO values as str
    return {
        'decode_responses': True,
        'socket_timeout': socket_timeout,
        'socket_connect_timeout': socket_timeout,
    }


class RedisClientMixin:
    """Redis client setup and health check for edge cache DAOs

    Attributes:
        redis (redis.Redis):
            Client used by the DAO methods.
        keys (CacheKeySchema):
            Builder for the namespaced url:/og: keys.

    Raises:
        CacheUnavailableError:
            From __init__ when the node doesn't answer PING.
    """

    def __init__(
        self,
        redis_host: str | None = 'localhost',
        redis_port: int | None = 6379,
        redis_db: int | None = 0,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
        socket_timeout: float = Defaults.CACHE_SOCKET_TIMEOUT,
    ):
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                username=redis_username,
                password=redis_password,
                **_client_options(socket_timeout),
            )

        self.redis = redis_client
        self.keys = CacheKeySchema(prefix=prefix)
        self.healthcheck()

    def healthcheck(self, raise_error: bool = True) -> bool:
        """PING the node; False (or CacheUnavailableError) when it's unreachable"""
        try:
            self.redis.ping()
        except redis.exceptions.RedisError as e:
            if not raise_error:
                return False
            raise CacheUnavailableError(f"Can't reach the edge cache at {describe_client(self.redis)}.") from e
        return True

    def close(self) -> None:
        self.redis.close()


class ElastiCacheClientMixin(RedisClientMixin):
    """RedisClientMixin whose client targets AWS ElastiCache

    The node endpoint comes from SSM Parameter Store in a single
    get_parameters call, the AUTH token from Secrets Manager. TLS is on
    outside local runs (local Redis has none).

    Args:
        prefix (str | None):
            Namespace prefix for all cache keys, e.g. 'edgeshortener:dev'.
        ssm_client (SSMClient | None):
            boto3 SSM client to reuse. Created on demand (LocalStack when local).
        secrets_client (SecretsManagerClient | None):
            boto3 Secrets Manager client to reuse. Created on demand.
        tls_verify (bool):
            Require certificate verification.
        ca_bundle_path (str | None):
            CA bundle for certificate verification.
        socket_timeout (float):
            Connect and read timeout in seconds.

    Raises:
        MissingEnvironmentVariableError:
            If the ELASTICACHE_* variables are missing.
        BadConfigurationError:
            If SSM lacks a parameter, port/db aren't integers, or the secret has no password outside local runs.
        MalformedResponseError:
            If the SSM response or the secret payload can't be parsed.
        CacheUnavailableError:
            If the node doesn't answer PING.
    """

    def __init__(
        self,
        prefix: str | None = None,
        ssm_client: SSMClient | None = None,
        secrets_client: SecretsManagerClient | None = None,
        tls_verify: bool = False,
        ca_bundle_path: str | None = None,
        socket_timeout: float = Defaults.CACHE_SOCKET_TIMEOUT,
    ):
        endpoint = self.resolve_endpoint(ssm_client)
        username, password = self.resolve_credentials(secrets_client)

        options = _client_options(socket_timeout)
        if running_locally():
            options['ssl'] = False
        else:
            options.update(ssl=True, ssl_cert_reqs='required' if tls_verify else None)
            if tls_verify and ca_bundle_path:
                options['ssl_ca_certs'] = ca_bundle_path

        redis_client = redis.Redis(
            host=endpoint.host,
            port=endpoint.port,
            db=endpoint.db,
            username=username or endpoint.username,
            password=password,
            **options,
        )
        super().__init__(redis_client=redis_client, prefix=prefix)

    @staticmethod
    def _aws_client(service: str):
        if running_locally():
            return boto3.client(service, endpoint_url=os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'))
        return boto3.client(service)

    @staticmethod
    @require_environment(ENV.ElastiCache.HOST_PARAM, ENV.ElastiCache.PORT_PARAM, ENV.ElastiCache.DB_PARAM)
    def resolve_endpoint(ssm_client: SSMClient | None = None) -> CacheEndpoint:
        names = {
            'host': os.environ[ENV.ElastiCache.HOST_PARAM],
            'port': os.environ[ENV.ElastiCache.PORT_PARAM],
            'db': os.environ[ENV.ElastiCache.DB_PARAM],
        }
        if user_param := os.environ.get(ENV.ElastiCache.USER_PARAM):
            names['username'] = user_param

        ssm = ssm_client or ElastiCacheClientMixin._aws_client('ssm')
        response = ssm.get_parameters(Names=list(names.values()))

        if missing := response.get('InvalidParameters'):
            raise BadConfigurationError(f'ElastiCache parameters not found in SSM: {", ".join(missing)}')
        try:
            values = {parameter['Name']: parameter['Value'] for parameter in response['Parameters']}
            resolved = {field: values[name] for field, name in names.items()}
        except KeyError as e:
            raise MalformedResponseError('Malformed SSM get_parameters response') from e

        try:
            resolved['port'] = int(resolved['port'])
            resolved['db'] = int(resolved['db'])
        except (TypeError, ValueError) as e:
            raise BadConfigurationError(f'Invalid ElastiCache port/db values: port={resolved["port"]!r} db={resolved["db"]!r}') from e

        return CacheEndpoint(**resolved)

    @staticmethod
    @require_environment(ENV.ElastiCache.SECRET)
    def resolve_credentials(secrets_client: SecretsManagerClient | None = None) -> tuple[str | None, str | None]:
        """Return (username, password); the password is mandatory outside local runs"""
        sm = secrets_client or ElastiCacheClientMixin._aws_client('secretsmanager')
        raw = sm.get_secret_value(SecretId=os.environ[ENV.ElastiCache.SECRET]).get('SecretString')

        try:
            payload = json.loads(raw or '{}')
        except json.JSONDecodeError as e:
            raise MalformedResponseError('Invalid JSON in ElastiCache secret payload') from e

        password = payload.get('password')
        if not password and not running_locally():
            raise BadConfigurationError('ElastiCache secret must contain a non-empty "password" field')
        return payload.get('username'), password
