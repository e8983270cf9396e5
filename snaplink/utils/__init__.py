from snaplink.utils.config import app_env, app_name, app_prefix, load_config
from snaplink.utils.helpers import now_timestamp, format_timestamp, get_short_url, require_environment
from snaplink.utils.shortener import encode_base62, decode_base62, validate_code, CodeAllocator
from snaplink.utils.logging import initialize_logging


__all__ = [
    'encode_base62',
    'decode_base62',
    'validate_code',
    'CodeAllocator',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'now_timestamp',
    'format_timestamp',
    'get_short_url',
    'require_environment',
    'initialize_logging',
]
