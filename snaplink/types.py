from typing import Any


# Type aliases for Python dictionaries
type AppConfig = dict[str, Any]
type BackendConfig = dict[str, Any]
type RequestPayload = dict[str, Any]
