"""Unit tests for helper functions in helpers.py.

Test coverage includes:

1. now_timestamp() and format_timestamp()
   - Current time is returned as whole UTC seconds.
   - Timestamps are rendered as RFC 3339 UTC strings.

2. get_short_url() retrieves short URL string representation

3. require_environment() decorator behavior
   - Decorated functions execute when all env vars are present.
   - Missing or empty env vars raise MissingEnvironmentVariableError.
"""

import pytest
from freezegun import freeze_time

from snaplink.exceptions import MissingEnvironmentVariableError
from snaplink.utils.helpers import now_timestamp, format_timestamp, get_short_url, require_environment


# -------------------------------
# 1. Timestamps
# -------------------------------


@freeze_time('2025-10-15 00:00:00')
def test_now_timestamp():
    assert now_timestamp() == 1760486400


@pytest.mark.parametrize(
    'timestamp, expected',
    [
        (0, '1970-01-01T00:00:00Z'),
        (1760486400, '2025-10-15T00:00:00Z'),
        (1761091200, '2025-10-22T00:00:00Z'),
    ],
)
def test_format_timestamp(timestamp, expected):
    assert format_timestamp(timestamp) == expected


# -------------------------------
# 2. get_short_url()
# -------------------------------


@pytest.mark.parametrize(
    'base_url, expected',
    [
        ('http://localhost:8080', 'http://localhost:8080/abc123'),
        ('http://localhost:8080/', 'http://localhost:8080/abc123'),
        ('https://snap.example.com/s', 'https://snap.example.com/s/abc123'),
    ],
)
def test_get_short_url(base_url, expected):
    assert get_short_url('abc123', base_url) == expected


# -------------------------------
# 3. require_environment()
# -------------------------------


def test_require_environment_passes(monkeypatch):
    monkeypatch.setenv('SNAPLINK_TEST_A', 'a')
    monkeypatch.setenv('SNAPLINK_TEST_B', 'b')

    @require_environment('SNAPLINK_TEST_A', 'SNAPLINK_TEST_B')
    def func():
        return 'OK'

    assert func() == 'OK'


def test_require_environment_missing(monkeypatch):
    monkeypatch.setenv('SNAPLINK_TEST_A', '')
    monkeypatch.delenv('SNAPLINK_TEST_B', raising=False)

    @require_environment('SNAPLINK_TEST_A', 'SNAPLINK_TEST_B')
    def func():
        return 'OK'

    with pytest.raises(MissingEnvironmentVariableError, match="'SNAPLINK_TEST_A', 'SNAPLINK_TEST_B'"):
        func()
