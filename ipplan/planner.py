# planner.py
"""
Entry points used by the web layer: preview, allocation and equipment.
"""
import logging
from typing import Iterable, List, Optional

from ipplan import config
from ipplan.allocator import reserve_range
from ipplan.classifier import classify_rows, sort_rows
from ipplan.equipment import derive_equipment
from ipplan.ip_math import cidr_to_decimal, ip_to_number, number_to_ip
from ipplan.models import AllocationResult, AssignedRow, ClassifiedRow, DeviceRow, StationConfig
from ipplan.store import RangeStore

logger = logging.getLogger(__name__)

__all__ = ["allocate_and_assign", "classify_only", "derive_equipment", "hosts_needed"]


def hosts_needed(rows: Iterable[DeviceRow]) -> int:
    """Total units plus the configured growth buffer, rounded up."""
    total = sum(r.quantity for r in rows)
    return -(-total * (100 + config.HOST_BUFFER_PERCENT) // 100)


def classify_only(rows: Iterable[DeviceRow]) -> List[ClassifiedRow]:
    return classify_rows(rows)


def assign_addresses(rows: Iterable[DeviceRow], range_start: str, mask: int) -> List[AssignedRow]:
    dhcp = config.DYNAMIC_ADDRESS
    dotted_mask = cidr_to_decimal(mask)
    current = ip_to_number(range_start)
    assigned = []
    for row in rows:
        for _ in range(row.quantity):
            if row.is_dynamic:
                address, row_mask, gateway = dhcp, dhcp, dhcp
            else:
                address, row_mask, gateway = number_to_ip(current), dotted_mask, range_start
                current += 1
            assigned.append(AssignedRow(
                object_name=row.object_name,
                category=row.category,
                device_name=row.device_name,
                address=address,
                mask=row_mask,
                gateway=gateway,
                ntp_server=gateway,
            ))
    return assigned


def allocate_and_assign(rows: Iterable[DeviceRow], store: RangeStore, assigned_to: str,
                        station: Optional[StationConfig] = None,
                        base_network: str = None) -> AllocationResult:
    """
    Reserve a subnet for the batch and hand out addresses in sorted order.

    The reservation is committed to the registry before any address is
    assigned. Raises PoolExhausted when no subnet fits.
    """
    rows = list(rows)
    ordered = sort_rows(rows)
    needed = hosts_needed(ordered)
    static_units = sum(r.quantity for r in ordered if not r.is_dynamic)
    reservation = reserve_range(store, base_network or config.BASE_NETWORK, needed, assigned_to,
                                required_hosts=static_units)

    assigned = assign_addresses(ordered, reservation.range_start, reservation.mask)
    equipment = derive_equipment(rows, station or StationConfig())
    logger.info("Assigned %d units in %s for %s", len(assigned), reservation.prefix, assigned_to)
    return AllocationResult(reservation=reservation, rows=assigned, equipment=equipment)
