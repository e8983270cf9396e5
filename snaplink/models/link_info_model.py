from dataclasses import dataclass
from typing import Any, Optional

from snaplink.models.link_record_model import LinkRecordModel
from snaplink.utils.helpers import format_timestamp


# fmt: off
@dataclass(frozen=True)
class LinkInfoModel:
    code: str                   # Short code
    target: str                 # Original long URL
    clicks: int                 # Redirects served so far
    created_at: int             # Unix timestamp of creation
    expires_at: Optional[int]   # Unix timestamp of expiry, None if the link never expires
    is_expired: bool            # Evaluated at projection time
# fmt: on

    @classmethod
    def from_record(cls, code: str, record: LinkRecordModel, is_expired: bool) -> 'LinkInfoModel':
        return cls(
            code=code,
            target=record.target,
            clicks=record.clicks,
            created_at=record.created_at,
            expires_at=record.expires_at,
            is_expired=is_expired,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'code': self.code,
            'long_url': self.target,
            'clicks': self.clicks,
            'created_at': format_timestamp(self.created_at),
            'expires_at': None if self.expires_at is None else format_timestamp(self.expires_at),
            'is_expired': self.is_expired,
        }
