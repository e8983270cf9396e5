"""Durable snapshot file for the in-process link store.

The snapshot is a single JSON document:

    {
        "idCounter": 3,
        "urlStore": {
            "3": {"long_url": "https://example.com", "clicks": 0, "created_at": 1760486400, "expiry": 604800}
        }
    }

Writes go to a temporary file in the same directory which is flushed, fsynced
and then atomically renamed over the target, so readers see either the old or
the new document and never a partial one. A crash between write and rename
leaves the previous snapshot intact.

Functions:
    read_snapshot(path) -> tuple[int, dict[str, LinkRecordModel]] | None
    write_snapshot(path, counter, records) -> None
"""

import os
import json
import logging
import tempfile
from pathlib import Path

from snaplink.models import LinkRecordModel
from snaplink.dao.exceptions import SnapshotError


logger = logging.getLogger(__name__)

COUNTER_FIELD = 'idCounter'
RECORDS_FIELD = 'urlStore'


def encode_snapshot(counter: int, records: dict[str, LinkRecordModel]) -> str:
    document = {
        COUNTER_FIELD: counter,
        RECORDS_FIELD: {code: record.to_dict() for code, record in records.items()},
    }
    return json.dumps(document, indent=2)


def decode_snapshot(content: str) -> tuple[int, dict[str, LinkRecordModel]]:
    """Parse a snapshot document

    Raises:
        SnapshotError: If the document is not valid JSON or has the wrong shape.
    """
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise SnapshotError('Snapshot is not valid JSON.') from e

    if not isinstance(document, dict):
        raise SnapshotError('Snapshot must be a JSON object.')

    counter = document.get(COUNTER_FIELD, 0)
    if not isinstance(counter, int) or isinstance(counter, bool) or counter < 0:
        raise SnapshotError(f"Snapshot field '{COUNTER_FIELD}' must be a non-negative integer.")

    raw_records = document.get(RECORDS_FIELD) or {}
    if not isinstance(raw_records, dict):
        raise SnapshotError(f"Snapshot field '{RECORDS_FIELD}' must be a JSON object.")

    records = {}
    for code, raw_record in raw_records.items():
        try:
            records[code] = LinkRecordModel.from_dict(raw_record)
        except ValueError as e:
            raise SnapshotError(f"Snapshot entry '{code}' is invalid: {e}") from e

    return counter, records


def read_snapshot(path: str | os.PathLike) -> tuple[int, dict[str, LinkRecordModel]] | None:
    """Load a snapshot from disk

    Returns:
        tuple[int, dict[str, LinkRecordModel]] | None:
            (counter, records), or None if the file doesn't exist.

    Raises:
        SnapshotError: If the file exists but can't be read or parsed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        return None
    except OSError as e:
        raise SnapshotError(f"Can't read snapshot file {path}.") from e

    return decode_snapshot(content)


def write_snapshot(path: str | os.PathLike, counter: int, records: dict[str, LinkRecordModel]) -> None:
    """Atomically replace the snapshot file with the given state

    Raises:
        SnapshotError: If the temporary file can't be written or renamed.
    """
    path = Path(path)
    content = encode_snapshot(counter, records)

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            dir=path.parent,
            prefix=f'.{path.name}.',
            suffix='.tmp',
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise SnapshotError(f"Can't write snapshot file {path}.") from e

    logger.debug('Wrote snapshot.', extra={'path': str(path), 'records': len(records), 'counter': counter})
