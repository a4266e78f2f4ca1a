from __future__ import annotations


class QuickReportsError(Exception):
    """Base class for every failure raised by the incident store."""


class ValidationError(QuickReportsError):
    pass


class ConflictError(QuickReportsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"incident already exists: {name!r}")
        self.name = name


class NotFoundError(QuickReportsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"incident not found: {name!r}")
        self.name = name


class DecodeError(QuickReportsError):
    pass


class StorageError(QuickReportsError):
    pass
