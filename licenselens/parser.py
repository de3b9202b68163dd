"""Reading the JSON replies of the licensing Web API."""

from __future__ import annotations

import json
from typing import Any

from .errors import CryptolensError, MainReason, Subsystem, parse_server_error_message
from .models import (
    ActivationData,
    Customer,
    DataObject,
    LicenseKeyInformation,
    RawLicenseKey,
)

_MANDATORY_INTEGERS = ("ProductId", "Created", "Expires", "Period", "SignDate")
_MANDATORY_BOOLEANS = (
    "Block",
    "TrialActivation",
    "F1",
    "F2",
    "F3",
    "F4",
    "F5",
    "F6",
    "F7",
    "F8",
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _load_object(text: str) -> dict[str, Any]:
    """Parse text that must hold a JSON object; raise a JSON error otherwise."""
    try:
        document = json.loads(text)
    except (ValueError, TypeError) as exc:
        raise CryptolensError(Subsystem.JSON) from exc
    if not isinstance(document, dict):
        raise CryptolensError(Subsystem.JSON)
    return document


def _load_reply(server_response: str) -> dict[str, Any]:
    """Parse a server reply and raise the server's error if it reports one."""
    reply = _load_object(server_response)
    result = reply.get("result")
    if not _is_int(result) or result != 0:
        message = reply.get("message")
        if not _is_str(message):
            raise CryptolensError(Subsystem.MAIN, MainReason.UNKNOWN_SERVER_REPLY)
        raise CryptolensError(Subsystem.MAIN, parse_server_error_message(message))
    return reply


def _optional_int(document: dict[str, Any], name: str) -> int | None:
    value = document.get(name)
    return value if _is_int(value) else None


def _optional_str(document: dict[str, Any], name: str) -> str | None:
    value = document.get(name)
    return value if _is_str(value) else None


def _parse_customer(value: Any) -> Customer | None:
    if not isinstance(value, dict):
        return None
    if not (_is_int(value.get("Id")) and _is_int(value.get("Created"))):
        return None
    return Customer(
        id=value["Id"],
        name=_optional_str(value, "Name") or "",
        email=_optional_str(value, "Email") or "",
        company_name=_optional_str(value, "CompanyName") or "",
        created=value["Created"],
    )


def _parse_activation(value: Any) -> ActivationData | None:
    if not isinstance(value, dict):
        return None
    mid, ip, time = value.get("Mid"), value.get("IP"), value.get("Time")
    if _is_str(mid) and _is_str(ip) and _is_int(time):
        return ActivationData(mid=mid, ip=ip, time=time)
    return None


def _parse_data_object(value: Any) -> DataObject | None:
    if not isinstance(value, dict):
        return None
    id_, name = value.get("Id"), value.get("Name")
    string_value, int_value = value.get("StringValue"), value.get("IntValue")
    if _is_int(id_) and _is_str(name) and _is_str(string_value) and _is_int(int_value):
        return DataObject(id=id_, name=name, string_value=string_value, int_value=int_value)
    return None


def _parse_all(value: Any, parse_item) -> tuple | None:
    """Parse every element of a JSON array; None if any element is invalid."""
    if not isinstance(value, list):
        return None
    items = []
    for element in value:
        item = parse_item(element)
        if item is None:
            return None
        items.append(item)
    return tuple(items)


def parse_license_key_information(license_json: str) -> LicenseKeyInformation:
    """Build license key information from the decoded license JSON."""
    document = _load_object(license_json)

    mandatory_present = all(
        _is_int(document.get(name)) for name in _MANDATORY_INTEGERS
    ) and all(_is_bool(document.get(name)) for name in _MANDATORY_BOOLEANS)
    if not mandatory_present:
        raise CryptolensError(Subsystem.JSON)

    return LicenseKeyInformation(
        product_id=document["ProductId"],
        created=document["Created"],
        expires=document["Expires"],
        period=document["Period"],
        block=document["Block"],
        trial_activation=document["TrialActivation"],
        sign_date=document["SignDate"],
        f1=document["F1"],
        f2=document["F2"],
        f3=document["F3"],
        f4=document["F4"],
        f5=document["F5"],
        f6=document["F6"],
        f7=document["F7"],
        f8=document["F8"],
        id=_optional_int(document, "ID"),
        key=_optional_str(document, "Key"),
        notes=_optional_str(document, "Notes"),
        global_id=_optional_int(document, "GlobalId"),
        customer=_parse_customer(document.get("Customer")),
        activated_machines=_parse_all(document.get("ActivatedMachines"), _parse_activation),
        maxnoofmachines=_optional_int(document, "MaxNoOfMachines"),
        allowed_machines=_optional_str(document, "AllowedMachines"),
        data_objects=_parse_all(document.get("DataObjects"), _parse_data_object),
    )


def license_key_information_from_raw(
    raw_license_key: RawLicenseKey | None,
) -> LicenseKeyInformation | None:
    """Build license key information from a checked raw key; None stays None."""
    if raw_license_key is None:
        return None
    return parse_license_key_information(raw_license_key.license)


def parse_activate_response(server_response: str) -> tuple[str, str]:
    """Return the base64 license key and its signature from an Activate reply."""
    reply = _load_reply(server_response)
    license_key = reply.get("licenseKey")
    signature = reply.get("signature")
    if not _is_str(license_key) or not _is_str(signature):
        raise CryptolensError(Subsystem.MAIN, MainReason.UNKNOWN_SERVER_REPLY)
    return license_key, signature


def parse_create_trial_key_response(server_response: str) -> str:
    """Return the key created by a CreateTrialKey reply."""
    reply = _load_reply(server_response)
    key = reply.get("key")
    if not _is_str(key):
        raise CryptolensError(Subsystem.MAIN, MainReason.UNKNOWN_SERVER_REPLY)
    return key


def parse_deactivate_response(server_response: str) -> None:
    """Raise if a Deactivate reply reports a failure."""
    _load_reply(server_response)


def parse_last_message_response(server_response: str) -> str:
    """Return the content of the most recently created message, or ""."""
    reply = _load_reply(server_response)
    messages = reply.get("messages")
    if not isinstance(messages, list):
        return ""

    latest_content = ""
    latest_created = -1
    for message in messages:
        if not isinstance(message, dict):
            continue
        created, content = message.get("created"), message.get("content")
        if _is_int(created) and _is_str(content) and created > latest_created:
            latest_created = created
            latest_content = content
    return latest_content