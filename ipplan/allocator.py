# allocator.py
import logging
from typing import Iterable, List, Tuple

from ipplan import config
from ipplan.errors import PoolExhausted, RegistryConflict
from ipplan.ip_math import block_size, hosts_for_mask, ip_to_number, number_to_ip, smallest_mask
from ipplan.models import SubnetReservation
from ipplan.store import RangeStore

logger = logging.getLogger(__name__)

MAX_ADDRESS = 0xFFFFFFFF


def is_range_available(network_num: int, mask: int, reservations: Iterable[SubnetReservation]) -> bool:
    start = network_num
    end = network_num + block_size(mask) - 1
    return not any(used.overlaps(start, end) for used in reservations)


def find_available_range(base_network: str, min_hosts: int, reservations: List[SubnetReservation],
                         max_probes: int = None, escalate: bool = None,
                         required_hosts: int = 0) -> Tuple[str, int]:
    """
    Return (network, mask) of the first free block, smallest mask first.

    Every mask is searched from base_network upwards, at most max_probes blocks.
    When a mask has no free block, the next mask is tried only if escalate is
    set and that smaller block still holds required_hosts.

    Raises PoolExhausted when the search limit runs out, when the next smaller block
    would drop below required_hosts, or when min_hosts needs a mask outside
    0..MAX_MASK (a request for zero hosts included).
    """
    max_probes = config.PROBE_LIMIT if max_probes is None else max_probes
    escalate = config.ESCALATE_MASK if escalate is None else escalate
    base = ip_to_number(base_network)

    mask = smallest_mask(min_hosts)
    if mask < 0:
        raise PoolExhausted(f"No IPv4 subnet can hold {min_hosts} hosts")

    while mask <= config.MAX_MASK:
        step = block_size(mask)
        candidate = base
        for _ in range(max_probes):
            if candidate + step - 1 > MAX_ADDRESS:
                break
            if is_range_available(candidate, mask, reservations):
                return number_to_ip(candidate), mask
            candidate += step
        logger.debug("No free /%d block within %d tries from %s", mask, max_probes, base_network)
        if not escalate or hosts_for_mask(mask + 1) < required_hosts:
            break
        mask += 1
    raise PoolExhausted(f"No free address pool for {min_hosts} hosts from {base_network}")


def build_reservation(network: str, mask: int, assigned_to: str) -> SubnetReservation:
    start = ip_to_number(network)
    return SubnetReservation(
        network=network,
        mask=mask,
        range_start=number_to_ip(start + 1),
        range_end=number_to_ip(start + hosts_for_mask(mask)),
        assigned_to=assigned_to,
    )


def reserve_range(store: RangeStore, base_network: str, min_hosts: int, assigned_to: str,
                  max_probes: int = None, escalate: bool = None,
                  required_hosts: int = 0) -> SubnetReservation:
    """Find a free subnet and persist it in the registry before returning it."""
    attempts = max(1, config.COMMIT_RETRIES)
    for attempt in range(1, attempts + 1):
        snapshot = store.snapshot()
        network, mask = find_available_range(base_network, min_hosts, snapshot.reservations,
                                             max_probes=max_probes, escalate=escalate,
                                             required_hosts=required_hosts)
        reservation = build_reservation(network, mask, assigned_to)
        try:
            store.commit(snapshot, [*snapshot.reservations, reservation])
        except RegistryConflict:
            if attempt == attempts:
                raise
            logger.warning("Registry changed during allocation, retrying (%d/%d)", attempt, attempts)
            continue
        logger.info("Reserved %s for %s (%d hosts requested)", reservation.prefix, assigned_to, min_hosts)
        return reservation
