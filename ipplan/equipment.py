# equipment.py
"""
Station (nastawnia) equipment for the LPR camera sets of one batch.
"""
import logging
from typing import Iterable, List

from ipplan import config
from ipplan.classifier import classify_device
from ipplan.models import DeviceRow, EquipmentItem, StationConfig

logger = logging.getLogger(__name__)


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def _static_rows(rows: Iterable[DeviceRow]) -> List[DeviceRow]:
    return [r for r in rows if not r.is_dynamic]


def count_camera_sets(rows: Iterable[DeviceRow]) -> int:
    return sum(r.quantity for r in _static_rows(rows) if classify_device(r.device_name).lpr_set)


def count_ssv_cameras(rows: Iterable[DeviceRow]) -> int:
    """All cameras on SKP and KAT A objects."""
    return sum(r.quantity for r in _static_rows(rows) if r.category in config.SSV_CATEGORIES)


def count_vca_cameras(rows: Iterable[DeviceRow]) -> int:
    """U1532 cameras on KAT A and KAT B objects."""
    return sum(
        r.quantity for r in _static_rows(rows)
        if classify_device(r.device_name).u1532 and r.category in config.VCA_CATEGORIES
    )


def derive_equipment(rows: Iterable[DeviceRow], station: StationConfig) -> List[EquipmentItem]:
    if not station.lpr_enabled:
        return []

    rows = list(rows)
    camera_sets = count_camera_sets(rows)
    all_cameras = count_ssv_cameras(rows)
    u1532_cameras = count_vca_cameras(rows)
    logger.info("Camera sets: %d, all cameras: %d, U1532 cameras: %d", camera_sets, all_cameras, u1532_cameras)

    ssv_licenses = max(config.SSV_MIN_LICENSES, all_cameras)
    if station.red_light_enabled:
        max_sets_per_server = config.SETS_PER_SERVER_RED_LIGHT
        vca_licenses = u1532_cameras
    else:
        max_sets_per_server = config.SETS_PER_SERVER
        vca_licenses = 0

    equipment = []
    for i in range(1, _ceil_div(camera_sets, max_sets_per_server) + 1):
        equipment.append(EquipmentItem(
            name=f"Serwer LPR {i}",
            kind="serwer",
            quantity=1,
            description=f"Serwer dla zestawu kamer U1532/S1536LTN (max {max_sets_per_server} zestawów)",
        ))

    if ssv_licenses > 0:
        equipment.append(EquipmentItem(
            name="Licencja SSV",
            kind="licencja",
            quantity=ssv_licenses,
            description=f"Licencja SSV dla {ssv_licenses} kamer (minimum {config.SSV_MIN_LICENSES})",
        ))

    if vca_licenses > 0:
        equipment.append(EquipmentItem(
            name="Licencja VCA",
            kind="licencja",
            quantity=vca_licenses,
            description=f"Licencja VCA dla {vca_licenses} kamer U1532 w obiektach KAT A/B",
        ))

    if camera_sets > 0:
        capacity = config.DISK_CAPACITIES[config.RECORDER_DISK_TIER]
        for i in range(1, _ceil_div(camera_sets, config.CAMERAS_PER_RECORDER) + 1):
            equipment.append(EquipmentItem(
                name=f"Rejestrator NVR {i}",
                kind="rejestrator",
                quantity=1,
                description=f"Rejestrator dla kamer (pojemność: {capacity}GB)",
            ))

    return equipment
