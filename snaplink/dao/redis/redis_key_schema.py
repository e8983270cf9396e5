import re
import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports

# Characters with special meaning in a SCAN MATCH pattern
_GLOB_SPECIALS = re.compile(r'[*?\[\]\\]')


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing link records.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "snaplink:prod" or "snaplink:dev".

    Layout:
        <prefix>:links:<code>      JSON-serialized LinkRecordModel
        <prefix>:counters:links    monotonic code counter
    """

    LINKS_NAMESPACE = 'links'

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, code: str) -> str:
        return f'{self.LINKS_NAMESPACE}:{code}'

    @prefix_key
    def counter_key(self) -> str:
        return 'counters:links'

    def link_pattern(self) -> str:
        """Return a SCAN MATCH pattern covering every link key.

        Glob characters in the prefix are escaped so they match literally.
        """
        pattern = f'{self.LINKS_NAMESPACE}:*'
        if self.prefix is None:
            return pattern
        escaped_prefix = _GLOB_SPECIALS.sub(r'\\\g<0>', self.prefix)
        return f'{escaped_prefix}:{pattern}'

    def code_from_key(self, key: str) -> str:
        """Extract the short code from a key built by link_key()."""
        head = self.link_key('')
        if not key.startswith(head):
            raise ValueError(f"Key '{key}' is not a link key.")
        return key[len(head):]
