from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class LinkRecordModel:
    """Represent a stored short link.

    Records are immutable: the store hands out values, never shared mutable
    state, so a click update is a new record written back with `put()`.

    Attributes:
        target (str):
            The original long URL that the short code redirects to.
        created_at (int):
            Unix timestamp (seconds, UTC) of the shorten request.
        ttl_seconds (int):
            Time-To-Live in seconds, counted from `created_at`.
            0 means the record never expires.
        clicks (int):
            Number of successful redirects served for this code.

    Example:
        >>> record = LinkRecordModel(
        ...     target="https://example.com/article/123",
        ...     created_at=1760486400,
        ...     ttl_seconds=604800,
        ... )
        >>> record.expires_at
        1761091200
        >>> record.with_click().clicks
        1
    """

    target: str
    created_at: int
    ttl_seconds: int
    clicks: int = 0

    def __post_init__(self):
        if self.clicks < 0:
            raise ValueError(f'Clicks must be a non-negative integer (given value: {self.clicks}).')
        if self.ttl_seconds < 0:
            raise ValueError(f'TTL must be a non-negative integer (given value: {self.ttl_seconds}).')

    @property
    def expires_at(self) -> Optional[int]:
        if self.ttl_seconds == 0:
            return None
        return self.created_at + self.ttl_seconds

    def with_click(self) -> 'LinkRecordModel':
        return replace(self, clicks=self.clicks + 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            'long_url': self.target,
            'clicks': self.clicks,
            'created_at': self.created_at,
            'expiry': self.ttl_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'LinkRecordModel':
        """Build a record from its serialized form.

        Raises:
            ValueError:
                If a field is missing, has the wrong type or holds a negative number.
        """
        if not isinstance(data, dict):
            raise ValueError(f'Link record must be a JSON object (given type: {type(data)}).')

        try:
            target = data['long_url']
            clicks = data.get('clicks', 0)
            created_at = data['created_at']
            ttl_seconds = data['expiry']
        except KeyError as e:
            raise ValueError(f'Link record is missing field {e}.') from e

        if not isinstance(target, str):
            raise ValueError(f"Field 'long_url' must be a string (given type: {type(target)}).")
        for name, value in (('clicks', clicks), ('created_at', created_at), ('expiry', ttl_seconds)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Field '{name}' must be an integer (given type: {type(value)}).")

        return cls(target=target, clicks=clicks, created_at=created_at, ttl_seconds=ttl_seconds)
