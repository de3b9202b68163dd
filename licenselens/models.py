"""Immutable values describing license keys and their owners."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Protocol

from .errors import CryptolensError, Subsystem


class _Verifier(Protocol):
    def verify_message(self, message: bytes, signature_base64: str) -> bool: ...


@dataclass(frozen=True)
class Customer:
    """A customer a license key is assigned to."""

    id: int
    name: str
    email: str
    company_name: str
    created: int


@dataclass(frozen=True)
class ActivationData:
    """A machine on which a license key has been activated."""

    mid: str
    ip: str
    time: int


@dataclass(frozen=True)
class DataObject:
    """A named value attached to a license key."""

    id: int
    name: str
    string_value: str
    int_value: int


@dataclass(frozen=True)
class LicenseKeyInformation:
    """The contents of a license key."""

    product_id: int
    created: int
    expires: int
    period: int
    block: bool
    trial_activation: bool
    sign_date: int
    f1: bool
    f2: bool
    f3: bool
    f4: bool
    f5: bool
    f6: bool
    f7: bool
    f8: bool
    id: int | None = None
    key: str | None = None
    notes: str | None = None
    global_id: int | None = None
    customer: Customer | None = None
    activated_machines: tuple[ActivationData, ...] | None = None
    maxnoofmachines: int | None = None
    allowed_machines: str | None = None
    data_objects: tuple[DataObject, ...] | None = None

    @property
    def features(self) -> tuple[bool, ...]:
        """The eight feature flags, feature 1 first."""
        return (self.f1, self.f2, self.f3, self.f4, self.f5, self.f6, self.f7, self.f8)

    def has_feature(self, feature: int) -> bool:
        """Whether feature number 1 to 8 is set."""
        if not 1 <= feature <= 8:
            raise ValueError(f"feature must be between 1 and 8, not {feature}")
        return self.features[feature - 1]


@dataclass(frozen=True)
class RawLicenseKey:
    """A license key as sent by the server, with a checked signature."""

    base64_license: str
    signature: str
    license: str

    @classmethod
    def make(
        cls, signature_verifier: _Verifier, base64_license: str, signature: str
    ) -> "RawLicenseKey":
        """Decode the license and check its signature; raise on failure."""
        try:
            decoded = base64.b64decode(base64_license, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CryptolensError(Subsystem.BASE64) from exc

        if not signature_verifier.verify_message(decoded, signature):
            raise CryptolensError(Subsystem.SIGNATURE_VERIFIER)

        try:
            license_text = decoded.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CryptolensError(Subsystem.JSON) from exc

        return cls(base64_license, signature, license_text)