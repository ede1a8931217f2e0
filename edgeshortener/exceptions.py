class EdgeShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:edgeshortener_error'


class MalformedResponseError(EdgeShortenerError):
    """Raised when a response from an AWS service is malformed."""

    error_code = 'app:malformed_response_error'


class ConfigurationError(EdgeShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class ValidationError(EdgeShortenerError):
    """Raised when a request is malformed and rejected before reaching the core."""

    error_code = 'input:validation_error'


class CollisionError(EdgeShortenerError):
    """Raised when a short code (or its hash) is already taken."""

    error_code = 'shortener:collision_error'


class GenerationExhaustedError(EdgeShortenerError):
    """Raised when random code generation can't find a free code within its allowed attempts."""

    error_code = 'shortener:generation_exhausted_error'
