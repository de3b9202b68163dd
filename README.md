# licenselens

A small library for working with signed license keys issued by a licensing
web API. It can:

- send an Activate request (optionally a floating one) and get back a license
  key with its signature,
- verify the RSA signature (SHA-256, PKCS#1 v1.5) on the license,
- parse the license into typed, immutable objects: product, dates, feature
  flags, customer, activated machines and data objects,
- restore a license key from a saved Activate reply or from a
  `version-license-signature` string,
- report every failure as one exception type that carries a subsystem and a
  reason code.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Setting up signature verification

Take the public key from the account settings of your licensing service. It
appears in XML form:

```
<RSAKeyValue><Modulus>AbC=</Modulus><Exponent>deFG</Exponent></RSAKeyValue>
```

Hand both base64 values to a `SignatureVerifier` (the values below are
placeholders):

```python
from licenselens.signature import SignatureVerifier

verifier = SignatureVerifier()
verifier.set_modulus_base64("AbC=")
verifier.set_exponent_base64("deFG")
```

`verify_message(message, signature_base64)` returns `True` when the signature
matches and raises `CryptolensError` otherwise, including when the modulus or
exponent has not been set.

## Activating a key

```python
from licenselens.client import Client
from licenselens.errors import CryptolensError
from licenselens.machine_code import StaticMachineCode

machine = StaticMachineCode()
machine.set_machine_code("example-machine-0001")

client = Client()
client.signature_verifier.set_modulus_base64("AbC=")
client.signature_verifier.set_exponent_base64("deFG")

try:
    license_key = client.activate(
        "token",
        "3646",
        "placeholder",
        machine.get_machine_code(),
        0,
    )
except CryptolensError as error:
    print("activation failed:", error.subsystem, error.reason)
else:
    info = license_key.information
    print(info.product_id, info.expires, info.has_feature(1))
```

- `Client.activate_floating` takes a floating time interval, in seconds,
  before `fields_to_return`; only machines activated within that interval
  count towards the limit.
- `Client.activate_raw` returns the verified `RawLicenseKey` without parsing
  the license.
- `Client.make_license_key(text)` restores a `LicenseKey` either from the JSON
  of an Activate reply or from a string of the form
  `version-license-signature`, checking the signature in both cases.

A `LicenseKey` holds `information` (a `LicenseKeyInformation`) and `raw`
(a `RawLicenseKey` with `base64_license`, `signature` and the decoded
`license` text).

`Client()` uses a `RequestHandler` and a `SignatureVerifier` by default; any
object with a `make_request(method, arguments)` method, or with a
`verify_message(message, signature_base64)` method, can be passed in instead.

## Errors

Every failure raises `licenselens.errors.CryptolensError`. It carries:

- `subsystem`: a `Subsystem` value (`MAIN`, `JSON`, `BASE64`,
  `REQUEST_HANDLER` or `SIGNATURE_VERIFIER`),
- `reason`: a subsystem-specific code; for the main subsystem a
  `MainReason` such as `KEY_BLOCKED` or `DEVICE_LIMIT_REACHED`,
- `extra`: an additional number, `0` when unused,
- `call`: the `Call` that was in progress, where known.

Error messages from the server are mapped to reasons by
`licenselens.errors.parse_server_error_message`; unrecognised messages map to
`MainReason.UNKNOWN_SERVER_REPLY`.

## Lower-level pieces

- `licenselens.request`: `percent_encode` and `build_url`, a `PostBuilder`
  that collects form arguments and sends one POST, and a `RequestHandler`
  whose `make_request(method, arguments)` posts to `/api/key/<method>` on
  `app.cryptolens.io` by default. Both accept a `transport` callable
  `(url, body, headers) -> bytes` in place of the built-in `urllib` one.
- `licenselens.parser`: `parse_activate_response`,
  `parse_license_key_information`, `license_key_information_from_raw`,
  `parse_create_trial_key_response`, `parse_deactivate_response` and
  `parse_last_message_response` turn server replies and license JSON into
  values or the objects in `licenselens.models`.
- `licenselens.client.handle_activate(signature_verifier, response)` verifies
  and parses an Activate reply that you obtained yourself.
- `licenselens.machine_code.StaticMachineCode` holds a machine code set by
  the application.

## What it does not do

- It does not compute a machine code from the hardware; the application
  supplies one, for example through `StaticMachineCode`.
- `Client` sends only Activate requests. Replies of CreateTrialKey,
  Deactivate and message requests can be parsed with `licenselens.parser`,
  but sending those requests is left to the caller (for example through
  `RequestHandler.make_request`).
- There is no command-line tool and no local storage of keys.