# classifier.py
"""
Device tagging and address ordering rules.

A device name is tagged once: its ordering slot comes from the full WV-
model names, and the camera families from the bare U1532/S1536LTN markers.
A name may belong to both families.
"""
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple

from ipplan.models import ClassifiedRow, DeviceRow


class ModelSlot(Enum):
    WV_U1532LA = 0
    WV_S1536LTN = 1
    OTHER = 2


SLOT_MARKERS = [
    ("WV-U1532LA", ModelSlot.WV_U1532LA),
    ("WV-S1536LTN", ModelSlot.WV_S1536LTN),
]

U1532_MARKER = "U1532"
S1536LTN_MARKER = "S1536LTN"


class DeviceModel(NamedTuple):
    slot: ModelSlot
    u1532: bool
    s1536ltn: bool

    @property
    def lpr_set(self) -> bool:
        return self.u1532 or self.s1536ltn

    @property
    def sort_priority(self) -> int:
        return self.slot.value


def classify_device(device_name: str) -> DeviceModel:
    slot = next((s for marker, s in SLOT_MARKERS if marker in device_name), ModelSlot.OTHER)
    return DeviceModel(slot, U1532_MARKER in device_name, S1536LTN_MARKER in device_name)


def sort_rows(rows: Iterable[DeviceRow]) -> List[DeviceRow]:
    """
    Order rows for address assignment: brak/unset, lan, lanz, lanz1.

    lanz rows are grouped per object (first appearance order) and inside each
    group WV-U1532LA cameras come first, then WV-S1536LTN, then the rest.
    Rows with any other class are left out.
    """
    rows = list(rows)
    plain = [r for r in rows if r.device_class in ("", "brak")]
    lan = [r for r in rows if r.device_class == "lan"]
    dynamic = [r for r in rows if r.device_class == "lanz1"]

    groups: Dict[str, List[DeviceRow]] = {}
    for row in rows:
        if row.device_class == "lanz":
            groups.setdefault(row.object_name, []).append(row)

    lanz: List[DeviceRow] = []
    for group in groups.values():
        # sorted() is stable, so each priority keeps the input order
        lanz.extend(sorted(group, key=lambda r: classify_device(r.device_name).sort_priority))

    return plain + lan + lanz + dynamic


def is_included(row: DeviceRow) -> bool:
    return not row.is_dynamic and row.object_name != ""


def classify_rows(rows: Iterable[DeviceRow]) -> List[ClassifiedRow]:
    return [ClassifiedRow(**row.model_dump(), included=is_included(row)) for row in rows]
