"""Exceptions raised by compact device path parsing and chain auto-creation."""

from __future__ import annotations


class DevicePathError(Exception):
    pass


class MalformedPath(DevicePathError, ValueError):
    def __init__(self, path: object, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"malformed device path {path!r}: {reason}")


class ChainAutoCreateError(DevicePathError, RuntimeError):
    pass


class AutoCreateLimitExceeded(ChainAutoCreateError):
    def __init__(self, required: int, maximum: int, *, what: str = "chains"):
        self.required = int(required)
        self.maximum = int(maximum)
        super().__init__(f"cannot auto-create {self.required} {what} (max: {self.maximum})")


class ChainCreationFailed(ChainAutoCreateError):
    def __init__(self, attempt: int, total: int):
        self.attempt = int(attempt)
        self.total = int(total)
        super().__init__(f"failed to create chain {self.attempt}/{self.total}")


class ChainCreationUnsupported(ChainAutoCreateError):
    pass
