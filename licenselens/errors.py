"""Error codes and the exception raised by the licensing client."""

from __future__ import annotations

from enum import IntEnum


class Subsystem(IntEnum):
    """The part of the library in which an error arose."""

    OK = 0
    MAIN = 1
    JSON = 2
    BASE64 = 3
    REQUEST_HANDLER = 4
    SIGNATURE_VERIFIER = 5


class Call(IntEnum):
    """The public operation during which an error arose."""

    ACTIVATE_RAW = 1
    HANDLE_ACTIVATE_RAW = 2
    SIGNATURE_VERIFIER_SET_EXPONENT_BASE64 = 3
    SIGNATURE_VERIFIER_SET_MODULUS_BASE64 = 4
    HANDLE_ACTIVATE = 5
    ACTIVATE = 5
    ACTIVATE_FLOATING = 6
    MAKE_LICENSE_KEY = 7
    LAST_MESSAGE = 8
    CREATE_TRIAL_KEY = 9
    DEACTIVATE = 10


class MainReason(IntEnum):
    """Reasons for errors in the main subsystem, mostly reported by the server."""

    UNKNOWN_SERVER_REPLY = 1
    INVALID_ACCESS_TOKEN = 2
    ACCESS_DENIED = 3
    INCORRECT_INPUT_PARAMETER = 4
    PRODUCT_NOT_FOUND = 5
    KEY_NOT_FOUND = 6
    KEY_BLOCKED = 7
    DEVICE_LIMIT_REACHED = 8
    KEY_EXPIRED = 9


class CryptolensError(Exception):
    """Raised by every operation in this package that can fail."""

    def __init__(
        self,
        subsystem: int,
        reason: int = 0,
        extra: int = 0,
        call: int | None = None,
    ) -> None:
        if subsystem == Subsystem.OK:
            raise ValueError("an error needs a subsystem other than OK")
        self.subsystem = _as_enum(Subsystem, subsystem)
        self.reason = reason
        self.extra = extra
        self.call = None if call is None else _as_enum(Call, call)
        super().__init__(self._describe())

    def with_call(self, call: int) -> "CryptolensError":
        """Record the operation that failed and return this error."""
        self.call = _as_enum(Call, call)
        self.args = (self._describe(),)
        return self

    def _describe(self) -> str:
        subsystem = getattr(self.subsystem, "name", self.subsystem)
        reason = self.reason
        if self.subsystem == Subsystem.MAIN:
            reason = getattr(_as_enum(MainReason, reason), "name", reason)
        text = f"{subsystem} error, reason {reason}"
        if self.extra:
            text += f", extra {self.extra}"
        if self.call is not None:
            text += f", in {getattr(self.call, 'name', self.call)}"
        return text


def _as_enum(enum_type, value):
    try:
        return enum_type(value)
    except ValueError:
        return value


_SERVER_MESSAGES = {
    "Unable to authenticate.": MainReason.INVALID_ACCESS_TOKEN,
    "Access denied.": MainReason.ACCESS_DENIED,
    "The input parameters were incorrect.": MainReason.INCORRECT_INPUT_PARAMETER,
    "Could not find the product.": MainReason.PRODUCT_NOT_FOUND,
    "Could not find the key.": MainReason.KEY_NOT_FOUND,
    "The key is blocked and cannot be accessed.": MainReason.KEY_BLOCKED,
    "Cannot activate the new device as the limit has been reached.": MainReason.DEVICE_LIMIT_REACHED,
}


def parse_server_error_message(message: str | None) -> MainReason:
    """Map an error message sent by the server to a reason code."""
    if message is None:
        return MainReason.UNKNOWN_SERVER_REPLY
    return _SERVER_MESSAGES.get(message, MainReason.UNKNOWN_SERVER_REPLY)