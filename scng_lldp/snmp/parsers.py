"""
SCNG LLDP - SNMP Value Parsers.

Functions for decoding binary SNMP values into usable formats.

Handles:
- MAC address decoding (various pysnmp types)
- IP address decoding (with/without address family byte)
- LLDP chassis/port ID decoding by subtype
- BITS decoding for LLDP capabilities
- Text value extraction from OctetString

All decoders accept pysnmp values as well as plain Python bytes, str and
int, and map a missing value (None) to None. They return safe fallback
values on decode errors rather than raising exceptions.
"""

import binascii
from typing import Optional, Any, List

from ..oids import LLDP


_HEX_DIGITS = '0123456789abcdef'


def _as_octets(value: Any) -> Optional[bytes]:
    """Return the raw octets of an OctetString-like value, or None."""
    if hasattr(value, 'asOctets'):
        return value.asOctets()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return None


def _is_mac_text(text: str) -> bool:
    return len(text) == 17 and normalize_mac(text) == text.lower()


# =============================================================================
# MAC Address Decoding
# =============================================================================

def decode_mac(binary_data: Any) -> Optional[str]:
    """
    Decode binary data as MAC address.

    Handles various input types:
    - OctetString with asOctets()
    - Raw bytes
    - Strings already holding a MAC in text form ("0x001a2b3c4d5e",
      "00-1A-2B-3C-4D-5E", ...)
    - Other strings (latin-1 encoded octets)

    Returns:
        Colon-separated MAC (e.g., "aa:bb:cc:dd:ee:ff")
        or error string on failure

    Examples:
        >>> decode_mac(b'\\xaa\\xbb\\xcc\\xdd\\xee\\xff')
        'aa:bb:cc:dd:ee:ff'
    """
    if binary_data is None:
        return None

    try:
        octets = _as_octets(binary_data)
        if octets is None:
            if isinstance(binary_data, str):
                text = binary_data.strip()
                if text.lower().startswith('0x'):
                    text = text[2:]
                normalized = normalize_mac(text)
                if normalized != text or _is_mac_text(text):
                    return normalized
                octets = binary_data.encode('latin-1')
            else:
                octets = bytes(binary_data)

        hex_str = binascii.hexlify(octets).decode()
        return ':'.join(hex_str[i:i + 2] for i in range(0, len(hex_str), 2))

    except (TypeError, ValueError, UnicodeEncodeError):
        # Use repr() to safely show binary data without control chars
        return f"<mac_decode_error: {repr(binary_data)[:50]}>"


def normalize_mac(mac: str) -> str:
    """
    Normalize MAC address to lowercase colon-separated format.

    Handles various input formats:
    - aa:bb:cc:dd:ee:ff
    - AA:BB:CC:DD:EE:FF
    - aa-bb-cc-dd-ee-ff
    - aabb.ccdd.eeff

    - aabbccddeeff
    - 0:1a:2b:3c:4d:5e (unpadded groups)

    Returns:
        Lowercase colon-separated MAC or original string if invalid
    """
    original = mac

    # Pad single-digit groups ("0:1a:...") before stripping separators
    for sep in (':', '-'):
        if sep in mac:
            groups = mac.split(sep)
            if len(groups) == 6:
                mac = ''.join(g.zfill(2) for g in groups)
            break

    clean = mac.replace(':', '').replace('-', '').replace('.', '').lower()

    if len(clean) == 12 and all(c in _HEX_DIGITS for c in clean):
        return ':'.join(clean[i:i + 2] for i in range(0, 12, 2))

    return original


# =============================================================================
# IP Address Decoding
# =============================================================================

def decode_ip(binary_data: Any) -> Optional[str]:
    """
    Decode binary data as IP address.

    Handles two common formats:
    - 4 bytes: Direct IPv4 address
    - 5 bytes: Address family byte + IPv4 address (LldpChassisId
      networkAddress subtype)

    Returns:
        Dotted-decimal IP (e.g., "192.168.1.1")
        or the decoded string for anything else

    Examples:
        >>> decode_ip(b'\\xc0\\xa8\\x01\\x01')
        '192.168.1.1'
        >>> decode_ip(b'\\x01\\xc0\\xa8\\x01\\x01')  # with family byte
        '192.168.1.1'
    """
    if binary_data is None:
        return None

    octets = _as_octets(binary_data)
    if octets is not None:
        if len(octets) == 5:  # IPv4 with family byte
            return '.'.join(str(b) for b in octets[1:])
        elif len(octets) == 4:  # IPv4 without family
            return '.'.join(str(b) for b in octets)

    return decode_string(binary_data)


# =============================================================================
# LLDP Subtype Decoding
# =============================================================================

def decode_chassis_id(subtype: Optional[int], value: Any) -> Optional[str]:
    """
    Decode LLDP chassis ID based on subtype.

    Subtypes (LldpChassisIdSubtype):
        1 = chassis component (entPhysicalAlias)
        2 = interface alias (ifAlias)
        3 = port component
        4 = MAC address (most common)
        5 = network address
        6 = interface name (ifName)
        7 = locally assigned

    A missing subtype decodes the value as text.
    """
    if value is None:
        return None

    if subtype == LLDP.CHASSIS_SUBTYPE_MAC:
        return decode_mac(value)

    if subtype == LLDP.CHASSIS_SUBTYPE_NETWORK:
        return decode_ip(value)

    return decode_string(value)


def decode_port_id(subtype: Optional[int], value: Any) -> Optional[str]:
    """
    Decode LLDP port ID based on subtype.

    Subtypes (LldpPortIdSubtype):
        1 = interface alias (ifAlias)
        2 = port component
        3 = MAC address
        4 = network address
        5 = interface name (ifName) - most common
        6 = agent circuit ID
        7 = locally assigned
    """
    if value is None:
        return None

    if subtype == LLDP.PORT_SUBTYPE_MAC:
        return decode_mac(value)

    if subtype == LLDP.PORT_SUBTYPE_NETWORK:
        return decode_ip(value)

    return decode_string(value)


# =============================================================================
# String / Integer / BITS Decoding
# =============================================================================

def decode_string(value: Any) -> Optional[str]:
    """
    Safely convert SNMP value to string.

    Handles pysnmp OctetString, DisplayString, and other types.
    Strips null bytes and surrounding whitespace.
    """
    if value is None:
        return None

    try:
        octets = _as_octets(value)
        if octets is not None:
            # Try UTF-8 first, fall back to latin-1
            try:
                result = octets.decode('utf-8')
            except UnicodeDecodeError:
                result = octets.decode('latin-1')
        elif hasattr(value, 'prettyPrint'):
            result = value.prettyPrint()
        else:
            result = str(value)

        return result.replace('\x00', '').strip()

    except (TypeError, ValueError):
        return str(value)


def decode_int(value: Any) -> Optional[int]:
    """
    Safely convert SNMP value to integer.

    Returns:
        Integer value or None on failure
    """
    if value is None:
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        pass
    try:
        return int(value.prettyPrint())
    except (AttributeError, ValueError, TypeError):
        return None


def decode_bits(value: Any) -> Optional[int]:
    """
    Decode an SNMP BITS value into an integer bitmask.

    BITS numbering starts at the most significant bit of the first octet,
    named bit n is returned as 1 << n:

        >>> decode_bits(b'\\x28')   # bridge(2), router(4)
        20

    Integers are taken as an already decoded bitmask. Hex strings
    ("0x28", "28 00") are decoded as octets.
    """
    if value is None:
        return None

    octets = _as_octets(value)
    if octets is None:
        if isinstance(value, int):
            return value
        text = str(value).strip().replace(' ', '')
        if text.lower().startswith('0x'):
            text = text[2:]
        try:
            octets = bytes.fromhex(text)
        except ValueError:
            return None

    mask = 0
    for byte_pos, octet in enumerate(octets):
        for bit in range(8):
            if octet & (0x80 >> bit):
                mask |= 1 << (byte_pos * 8 + bit)
    return mask


# =============================================================================
# Capability Parsing
# =============================================================================

_LLDP_CAPABILITY_NAMES = (
    (LLDP.CAP_OTHER, 'other'),
    (LLDP.CAP_REPEATER, 'repeater'),
    (LLDP.CAP_BRIDGE, 'bridge'),
    (LLDP.CAP_WLAN_AP, 'wlan-ap'),
    (LLDP.CAP_ROUTER, 'router'),
    (LLDP.CAP_TELEPHONE, 'telephone'),
    (LLDP.CAP_DOCSIS, 'docsis'),
    (LLDP.CAP_STATION, 'station'),
)


def parse_lldp_capabilities(cap_value: Optional[int]) -> List[str]:
    """
    Parse LLDP capabilities bitmask (as returned by decode_bits).

    Returns list of capability strings.
    """
    if not cap_value:
        return []
    return [name for flag, name in _LLDP_CAPABILITY_NAMES if cap_value & flag]
