from snaplink.dao.json.snapshot import read_snapshot, write_snapshot
from snaplink.dao.json.link_json_dao import LinkJsonDAO


__all__ = [
    'read_snapshot',
    'write_snapshot',
    'LinkJsonDAO',
]
