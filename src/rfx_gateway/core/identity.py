"""
Device id codec.

Wire format: ``<protocolFamily>/<protocolSubType>-<hardwareAddress>[/<unitCode>]``

    Lighting2/AC-0x01        -> family Lighting2, subtype AC, address 0x01
    Lighting2/AC-0x02/3      -> same, unit code 3
"""
from pydantic import ValidationError

from ..models.device import DeviceIdentifier
from ..utils.exceptions import MalformedIdentifierError


def encode_device_id(identifier: DeviceIdentifier) -> str:
    return (
        f"{identifier.protocol_family}/{identifier.protocol_subtype}"
        f"-{identifier.address}"
    )


def decode_device_id(device_id: str) -> DeviceIdentifier:
    """
    Decode a device id string.

    The string is split on its last '-' so the protocol descriptor may itself
    contain dashes. No partial decode is attempted.

    Raises:
        MalformedIdentifierError: a delimiter is missing or a part is empty
    """
    if not isinstance(device_id, str) or '-' not in device_id:
        raise MalformedIdentifierError(f"Malformed device id: {device_id!r}")

    descriptor, address = device_id.rsplit('-', 1)
    if '/' not in descriptor:
        raise MalformedIdentifierError(
            f"Device id {device_id!r} has no protocol subtype"
        )
    family, subtype = descriptor.split('/', 1)

    unit_code = None
    if '/' in address:
        address, unit_code = address.split('/', 1)

    try:
        return DeviceIdentifier(
            protocol_family=family,
            protocol_subtype=subtype,
            hardware_address=address,
            unit_code=unit_code
        )
    except ValidationError as e:
        raise MalformedIdentifierError(f"Malformed device id {device_id!r}: {e}") from e
