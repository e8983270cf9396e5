from dataclasses import dataclass
from typing import Any, Optional

from snaplink.exceptions import InvalidInputError


@dataclass(frozen=True)
class ShortenRequestModel:
    """Decoded shorten request handed over by the transport layer.

    Attributes:
        url (str):
            The long URL to shorten.
        custom_code (Optional[str]):
            Caller-chosen short code, if any.
        expiry_seconds (Optional[int]):
            Requested TTL in seconds. None or 0 selects the default TTL.
        client_id (Optional[str]):
            Resolved client identity (usually the source IP) for admission limiting.

    Example:
        >>> request = ShortenRequestModel.from_payload(
        ...     {'url': 'https://example.com', 'custom_code': 'promo'},
        ...     client_id='203.0.113.7',
        ... )
        >>> request.custom_code
        'promo'
    """

    url: str
    custom_code: Optional[str] = None
    expiry_seconds: Optional[int] = None
    client_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any, client_id: Optional[str] = None) -> 'ShortenRequestModel':
        """Validate the shape of a decoded JSON body.

        Raises:
            InvalidInputError:
                If the payload isn't an object, `url` is missing or a field has the wrong type.
        """
        if not isinstance(payload, dict):
            raise InvalidInputError('Invalid request body')

        url = payload.get('url')
        if not isinstance(url, str) or not url:
            raise InvalidInputError('Invalid request body')

        custom_code = payload.get('custom_code') or None
        if custom_code is not None and not isinstance(custom_code, str):
            raise InvalidInputError('Invalid custom code. Use only letters and numbers.')

        expiry_seconds = payload.get('expiry_seconds')
        if expiry_seconds is not None and (not isinstance(expiry_seconds, int) or isinstance(expiry_seconds, bool)):
            raise InvalidInputError('Invalid expiry. Must be a whole number of seconds.')

        return cls(url=url, custom_code=custom_code, expiry_seconds=expiry_seconds, client_id=client_id)
