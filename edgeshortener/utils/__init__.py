from edgeshortener.utils.config import app_env, app_name, app_prefix, load_config, ShortenerSettings
from edgeshortener.utils.helpers import now_ms, get_short_url, chunked, require_environment, guarantee_500_response
from edgeshortener.utils.shortener import generate_shortcode, link_hash
from edgeshortener.utils.preview import is_crawler, render_preview
from edgeshortener.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'link_hash',
    'is_crawler',
    'render_preview',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'ShortenerSettings',
    'now_ms',
    'get_short_url',
    'chunked',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
