from docker_meta.resolve.processors import PROCESSORS, process_rule, set_value
from docker_meta.resolve.resolver import is_enabled, resolve_version
from docker_meta.resolve.version import Version

__all__ = [
    "PROCESSORS",
    "Version",
    "is_enabled",
    "process_rule",
    "resolve_version",
    "set_value",
]
