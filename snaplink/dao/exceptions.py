"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    LinkNotFoundError:
        Raised when a link record is not found in the data store.

    LinkAlreadyExistsError:
        Raised when a create-only put targets a code that already exists.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, I/O, etc.).

    SnapshotError:
        Raised when the JSON snapshot file can't be read, parsed or written.

Example:
    >>> from snaplink.dao.exceptions import LinkNotFoundError
    >>> raise LinkNotFoundError("Link with code 'abc123' not found.")
    Traceback (most recent call last):
        ...
    snaplink.dao.exceptions.LinkNotFoundError: Link with code 'abc123' not found.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class LinkNotFoundError(DAOError):
    """Exception raised when a link record is not found in the data store."""

    pass


class LinkAlreadyExistsError(DAOError):
    """Exception raised when attempting to create a link whose code already exists in the data store."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, disk I/O failures, etc.
    """

    pass


class SnapshotError(DataStoreError):
    """Exception raised when the snapshot file is unreadable, malformed or can't be replaced."""

    pass
