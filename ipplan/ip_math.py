# ip_math.py
"""
IPv4 helpers working on plain dotted-quad strings and 32-bit integers.
"""
from ipaddress import AddressValueError, IPv4Address

from ipplan.errors import InvalidAddressFormat


def ip_to_number(ip: str) -> int:
    if not isinstance(ip, str):
        raise InvalidAddressFormat(f"Not an IPv4 address: {ip!r}")
    try:
        return int(IPv4Address(ip.strip()))
    except AddressValueError as exc:
        raise InvalidAddressFormat(f"Not an IPv4 address: {ip!r}") from exc


def number_to_ip(num: int) -> str:
    try:
        return str(IPv4Address(num))
    except AddressValueError as exc:
        raise InvalidAddressFormat(f"Not a 32-bit address value: {num!r}") from exc


def cidr_to_decimal(cidr: int) -> str:
    """Dotted mask for a prefix length; out-of-range prefixes are clamped per octet."""
    octets = []
    for i in range(4):
        bits = max(0, min(8, cidr - i * 8))
        octets.append((0xFF << (8 - bits)) & 0xFF)
    return ".".join(str(o) for o in octets)


def block_size(mask: int) -> int:
    return 2 ** (32 - mask)


def hosts_for_mask(mask: int) -> int:
    # network and broadcast are not usable; negative above /31
    return block_size(mask) - 2


def smallest_mask(hosts: int) -> int:
    # smallest block of 2**bits with 2**bits - 2 >= hosts
    bits = (max(hosts, 0) + 1).bit_length()
    return 32 - bits
