import string
from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Edge cache entry TTL (record snapshots and preview pages), unrelated to a link's expiresAt
    CACHE_ENTRY = 3_600  # 60 * 60


class Lifetime:
    """Link lifetimes in milliseconds."""

    # Applied on create when the caller leaves expiresAt unspecified (1 hour)
    DEFAULT_LINK_MS = 3_600_000  # 60 * 60 * 1000


class Defaults:
    """Default tunables for code generation, batching and sweeping."""

    CODE_LENGTH = 8
    MAX_GENERATION_ATTEMPTS = 15
    # Candidate length grows by one past each of these attempt numbers
    LENGTH_GROWTH_ATTEMPTS = (5, 10)
    # Random backoff (seconds) inserted before attempts past BACKOFF_AFTER_ATTEMPT
    BACKOFF_AFTER_ATTEMPT = 5
    BACKOFF_MIN = 0.01
    BACKOFF_MAX = 0.05

    MAX_BATCH_SIZE = 100
    SWEEP_BATCH_SIZE = 50
    SWEEP_BATCH_DELAY = 0.1
    MAX_WORKERS = 10

    # Edge cache connect / read timeout in seconds
    CACHE_SOCKET_TIMEOUT = 0.5


class Limits:
    """Input limits enforced before requests reach the core."""

    CUSTOM_CODE_MAX_LENGTH = 50
    HASH_MAX_LENGTH = 64
    USER_ID_MAX_LENGTH = 100


# Base62 alphabet for random short codes: 10 digits + 26 uppercase + 26 lowercase
SHORTCODE_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase

# User agents of link-unfurling crawlers which get a preview page instead of a redirect
CRAWLER_SIGNATURES = (
    'facebookexternalhit',
    'twitterbot',
    'linkedinbot',
    'slackbot',
    'discordbot',
    'telegrambot',
    'whatsapp',
)


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class Database(StrEnum):
        URL = 'DATABASE_URL'

    class Cache(StrEnum):
        # Plain Redis connection (local development)
        HOST = 'REDIS_HOST'
        PORT = 'REDIS_PORT'
        DB = 'REDIS_DB'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'

    class ElastiCache(StrEnum):
        # SSM parameter paths for ElastiCache connection details
        HOST_PARAM = 'ELASTICACHE_HOST_PARAM'
        PORT_PARAM = 'ELASTICACHE_PORT_PARAM'
        DB_PARAM = 'ELASTICACHE_DB_PARAM'
        USER_PARAM = 'ELASTICACHE_USER_PARAM'
        # Secrets Manager name holding credentials JSON: {"username": "...", "password": "..."}
        SECRET = 'ELASTICACHE_SECRET'  # noqa: S105

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
