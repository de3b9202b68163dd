import base64
import json

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from licenselens.errors import Call, CryptolensError, Subsystem
from licenselens.models import RawLicenseKey
from licenselens.signature import SignatureVerifier


def _b64_int(value: int) -> str:
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return base64.b64encode(raw).decode("ascii")


def _sign(private_key, data: bytes) -> str:
    signature = private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(signature).decode("ascii")


@pytest.fixture(scope="module")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def other_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def verifier(private_key):
    numbers = private_key.public_key().public_numbers()
    result = SignatureVerifier()
    result.set_modulus_base64(_b64_int(numbers.n))
    result.set_exponent_base64("AQAB")
    return result


def test_valid_signature_is_accepted(private_key, verifier):
    message = b"license contents"
    assert verifier.verify_message(message, _sign(private_key, message)) is True


def test_text_message_is_checked_as_utf8(private_key, verifier):
    message = "licens\u00e9"
    signature = _sign(private_key, message.encode("utf-8"))
    assert verifier.verify_message(message, signature) is True


def test_tampered_message_is_rejected(private_key, verifier):
    signature = _sign(private_key, b"original")
    with pytest.raises(CryptolensError) as info:
        verifier.verify_message(b"changed", signature)
    assert info.value.subsystem == Subsystem.SIGNATURE_VERIFIER


def test_signature_from_other_key_is_rejected(other_private_key, verifier):
    message = b"payload"
    with pytest.raises(CryptolensError) as info:
        verifier.verify_message(message, _sign(other_private_key, message))
    assert info.value.subsystem == Subsystem.SIGNATURE_VERIFIER


def test_exponent_may_be_set_before_modulus(private_key):
    numbers = private_key.public_key().public_numbers()
    verifier = SignatureVerifier()
    verifier.set_exponent_base64(_b64_int(numbers.e))
    verifier.set_modulus_base64(_b64_int(numbers.n))
    message = b"order"
    assert verifier.verify_message(message, _sign(private_key, message)) is True


def test_unconfigured_verifier_raises():
    verifier = SignatureVerifier()
    with pytest.raises(CryptolensError) as info:
        verifier.verify_message(b"x", "AAAA")
    assert info.value.subsystem == Subsystem.SIGNATURE_VERIFIER


def test_missing_exponent_raises(private_key):
    verifier = SignatureVerifier()
    verifier.set_modulus_base64(_b64_int(private_key.public_key().public_numbers().n))
    with pytest.raises(CryptolensError) as info:
        verifier.verify_message(b"x", "AAAA")
    assert info.value.subsystem == Subsystem.SIGNATURE_VERIFIER


def test_bad_modulus_base64_records_call():
    verifier = SignatureVerifier()
    with pytest.raises(CryptolensError) as info:
        verifier.set_modulus_base64("not base64!")
    assert info.value.subsystem == Subsystem.BASE64
    assert info.value.call == Call.SIGNATURE_VERIFIER_SET_MODULUS_BASE64


def test_bad_exponent_base64_records_call():
    verifier = SignatureVerifier()
    with pytest.raises(CryptolensError) as info:
        verifier.set_exponent_base64("@@@")
    assert info.value.subsystem == Subsystem.BASE64
    assert info.value.call == Call.SIGNATURE_VERIFIER_SET_EXPONENT_BASE64


def test_bad_signature_base64_raises(verifier):
    with pytest.raises(CryptolensError) as info:
        verifier.verify_message(b"x", "%%%")
    assert info.value.subsystem == Subsystem.BASE64


def test_invalid_key_numbers_raise():
    verifier = SignatureVerifier()
    verifier.set_modulus_base64("AQ==")
    verifier.set_exponent_base64("AQAB")
    with pytest.raises(CryptolensError) as info:
        verifier.verify_message(b"x", "AAAA")
    assert info.value.subsystem == Subsystem.SIGNATURE_VERIFIER


def test_raw_license_key_round_trip(private_key, verifier):
    license_text = json.dumps({"ProductId": 3, "Block": False})
    license_bytes = license_text.encode("utf-8")
    base64_license = base64.b64encode(license_bytes).decode("ascii")
    signature = _sign(private_key, license_bytes)

    raw = RawLicenseKey.make(verifier, base64_license, signature)

    assert raw.license == license_text
    assert raw.base64_license == base64_license
    assert raw.signature == signature


def test_raw_license_key_with_wrong_signature(other_private_key, verifier):
    license_bytes = b'{"ProductId": 3}'
    base64_license = base64.b64encode(license_bytes).decode("ascii")
    with pytest.raises(CryptolensError) as info:
        RawLicenseKey.make(verifier, base64_license, _sign(other_private_key, license_bytes))
    assert info.value.subsystem == Subsystem.SIGNATURE_VERIFIER