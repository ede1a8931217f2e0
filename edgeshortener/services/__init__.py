from edgeshortener.services.telemetry import TelemetrySink, LoggingTelemetrySink
from edgeshortener.services.cache_aside import LinkCache
from edgeshortener.services.code_generator import CodeGenerator
from edgeshortener.services.resolution import ResolutionService
from edgeshortener.services.mutation import MutationService
from edgeshortener.services.sweeper import ExpirationSweeper


__all__ = [
    'TelemetrySink',
    'LoggingTelemetrySink',
    'LinkCache',
    'CodeGenerator',
    'ResolutionService',
    'MutationService',
    'ExpirationSweeper',
]
