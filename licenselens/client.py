"""Activating license keys against the licensing Web API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from .errors import Call, CryptolensError, MainReason, Subsystem
from .models import LicenseKeyInformation, RawLicenseKey
from .parser import parse_activate_response, parse_license_key_information
from .request import RequestHandler
from .signature import SignatureVerifier


class _Verifier(Protocol):
    def verify_message(self, message: bytes, signature_base64: str) -> bool: ...


class _Requester(Protocol):
    def make_request(self, method: str, arguments: Mapping[str, str]) -> str: ...


@dataclass(frozen=True)
class LicenseKey:
    """A verified license key together with its decoded contents."""

    information: LicenseKeyInformation
    raw: RawLicenseKey


def _raw_key_from_response(signature_verifier: _Verifier, response: str) -> RawLicenseKey:
    license_base64, signature = parse_activate_response(response)
    return RawLicenseKey.make(signature_verifier, license_base64, signature)


def _license_key(raw: RawLicenseKey) -> LicenseKey:
    return LicenseKey(parse_license_key_information(raw.license), raw)


def handle_activate(signature_verifier: _Verifier, response: str) -> LicenseKey:
    """Turn the reply of an Activate request into a verified license key."""
    try:
        return _license_key(_raw_key_from_response(signature_verifier, response))
    except CryptolensError as exc:
        raise exc.with_call(Call.HANDLE_ACTIVATE)


class Client:
    """Talks to the licensing Web API and checks the signatures it returns."""

    def __init__(
        self,
        request_handler: _Requester | None = None,
        signature_verifier: _Verifier | None = None,
    ) -> None:
        self.request_handler = request_handler if request_handler is not None else RequestHandler()
        self.signature_verifier = (
            signature_verifier if signature_verifier is not None else SignatureVerifier()
        )

    def _activate_raw(
        self,
        token: str,
        product_id: str,
        key: str,
        machine_code: str,
        fields_to_return: int,
        floating_time_interval: int | None = None,
    ) -> RawLicenseKey:
        arguments = {
            "token": token,
            "ProductId": str(product_id),
            "Key": key,
            "Sign": "true",
            "MachineCode": machine_code,
            "FieldsToReturn": str(fields_to_return),
            "SignMethod": "1",
            "v": "1",
        }
        if floating_time_interval is not None:
            arguments["FloatingTimeInterval"] = str(floating_time_interval)
        response = self.request_handler.make_request("Activate", arguments)
        return _raw_key_from_response(self.signature_verifier, response)

    def activate(
        self,
        token: str,
        product_id: str,
        key: str,
        machine_code: str,
        fields_to_return: int = 0,
    ) -> LicenseKey:
        """Activate ``key`` on the machine identified by ``machine_code``."""
        try:
            raw = self._activate_raw(token, product_id, key, machine_code, fields_to_return)
            return _license_key(raw)
        except CryptolensError as exc:
            raise exc.with_call(Call.ACTIVATE)

    def activate_raw(
        self,
        token: str,
        product_id: str,
        key: str,
        machine_code: str,
        fields_to_return: int = 0,
    ) -> RawLicenseKey:
        """Activate ``key`` and return the verified key without decoding it."""
        try:
            return self._activate_raw(token, product_id, key, machine_code, fields_to_return)
        except CryptolensError as exc:
            raise exc.with_call(Call.ACTIVATE_RAW)

    def activate_floating(
        self,
        token: str,
        product_id: str,
        key: str,
        machine_code: str,
        floating_time_interval: int,
        fields_to_return: int = 0,
    ) -> LicenseKey:
        """Activate counting only machines seen in the last interval of seconds."""
        try:
            raw = self._activate_raw(
                token,
                product_id,
                key,
                machine_code,
                fields_to_return,
                floating_time_interval,
            )
            return _license_key(raw)
        except CryptolensError as exc:
            raise exc.with_call(Call.ACTIVATE_FLOATING)

    def make_license_key(self, text: str) -> LicenseKey:
        """Restore a license key from an Activate reply or "version-license-signature"."""
        try:
            raw = _raw_key_from_response(self.signature_verifier, text)
        except CryptolensError:
            _version, separator, rest = text.partition("-")
            if not separator:
                raise CryptolensError(Subsystem.MAIN, MainReason.UNKNOWN_SERVER_REPLY) from None
            license_base64, separator, signature = rest.partition("-")
            if not separator:
                raise CryptolensError(Subsystem.MAIN, MainReason.UNKNOWN_SERVER_REPLY) from None
            try:
                raw = RawLicenseKey.make(self.signature_verifier, license_base64, signature)
            except CryptolensError as exc:
                raise exc.with_call(Call.MAKE_LICENSE_KEY)
        try:
            return _license_key(raw)
        except CryptolensError as exc:
            raise exc.with_call(Call.MAKE_LICENSE_KEY)