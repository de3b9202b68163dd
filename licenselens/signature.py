"""Checking the RSA signatures that the licensing server puts on its replies."""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPublicKey,
    RSAPublicNumbers,
)

from .errors import Call, CryptolensError, Subsystem

# Reasons reported with Subsystem.SIGNATURE_VERIFIER.
_KEY_NOT_SET = 1
_INVALID_KEY = 4
_SIGNATURE_MISMATCH = 7


def _decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CryptolensError(Subsystem.BASE64) from exc


class SignatureVerifier:
    """Verifies RSA PKCS#1 v1.5 signatures over SHA-256.

    The public key is given as the base64 modulus and exponent listed in the
    account's key, which has the form
    ``<RSAKeyValue><Modulus>AbC=</Modulus><Exponent>deFG</Exponent></RSAKeyValue>``.
    """

    def __init__(self) -> None:
        self._modulus: int | None = None
        self._exponent: int | None = None
        self._public_key: RSAPublicKey | None = None

    def set_modulus_base64(self, modulus_base64: str) -> None:
        """Set the key's modulus from its base64 text, e.g. ``AbC=``."""
        try:
            modulus = _decode_base64(modulus_base64)
        except CryptolensError as exc:
            raise exc.with_call(Call.SIGNATURE_VERIFIER_SET_MODULUS_BASE64)
        self._modulus = int.from_bytes(modulus, "big")
        self._public_key = None

    def set_exponent_base64(self, exponent_base64: str) -> None:
        """Set the key's public exponent from its base64 text, e.g. ``deFG``."""
        try:
            exponent = _decode_base64(exponent_base64)
        except CryptolensError as exc:
            raise exc.with_call(Call.SIGNATURE_VERIFIER_SET_EXPONENT_BASE64)
        self._exponent = int.from_bytes(exponent, "big")
        self._public_key = None

    def _key(self) -> RSAPublicKey:
        if self._public_key is None:
            if self._modulus is None or self._exponent is None:
                raise CryptolensError(Subsystem.SIGNATURE_VERIFIER, _KEY_NOT_SET)
            try:
                self._public_key = RSAPublicNumbers(
                    self._exponent, self._modulus
                ).public_key()
            except ValueError as exc:
                raise CryptolensError(Subsystem.SIGNATURE_VERIFIER, _INVALID_KEY) from exc
        return self._public_key

    def verify_message(self, message: bytes | str, signature_base64: str) -> bool:
        """Return True if the signature matches the message; raise otherwise."""
        key = self._key()
        signature = _decode_base64(signature_base64)
        data = message.encode("utf-8") if isinstance(message, str) else bytes(message)
        try:
            key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
        except InvalidSignature as exc:
            raise CryptolensError(
                Subsystem.SIGNATURE_VERIFIER, _SIGNATURE_MISMATCH
            ) from exc
        return True