"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """Token roles."""

    ADMIN = "admin"


class SlotSourceEnum(StrEnum):
    """Where an offered slot comes from."""

    ONE_OFF = "one_off"
    WEEKLY = "weekly"


class BusyLookupStatusEnum(StrEnum):
    """Outcome of an external calendar busy lookup."""

    OK = "ok"
    UNCONFIGURED = "unconfigured"
    FAILED = "failed"
    TIMEOUT = "timeout"
