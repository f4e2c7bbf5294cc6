# csv_rows.py
"""
Semicolon separated device lists (wykaz_*.csv) in and addressing tables out.
"""
import csv
import io
import re
from pathlib import PurePath
from typing import Iterable, List

from ipplan.classifier import classify_rows
from ipplan.errors import InvalidCsv
from ipplan.models import AssignedRow, ClassifiedRow, DeviceRow

BOM = "\ufeff"
DELIMITER = ";"

OBJECT_KEYS = ("Nazwa Obiektu", "nazwa obiektu", "Nazwa Obiekty", "nazwa obiekty")
CATEGORY_KEYS = ("Kategoria", "kategoria")
NAME_KEYS = ("Nazwa", "nazwa")
QUANTITY_KEYS = ("Ilość", "Ilosc", "ilość", "ilosc")
CLASS_KEYS = ("Klasa", "klasa")

EXPECTED_HEADERS = [
    ["Nazwa Obiektu", "Kategoria", "Nazwa", "Ilość", "Klasa"],
    ["Nazwa Obiektu", "Kategoria", "Nazwa", "Ilosc", "Klasa"],
]

OUTPUT_HEADERS = ["Nazwa Obiektu", "Kategoria", "Nazwa", "Adres ip V4", "Maska", "Brama domyślna", "Serwer NTP"]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_WYKAZ = re.compile(r"^wykaz_([^_]+)_", re.IGNORECASE)


def validate_csv(text: str, original_name: str) -> None:
    if not original_name.lower().endswith(".csv"):
        raise InvalidCsv("Plik musi mieć rozszerzenie .csv")
    lines = text.splitlines()
    first = lines[0].lstrip(BOM).strip() if lines else ""
    actual = [h.strip().lower() for h in first.split(DELIMITER)]
    for expected in EXPECTED_HEADERS:
        if [h.lower() for h in expected] == actual[:len(expected)]:
            return
    raise InvalidCsv("Nieprawidłowy nagłówek pliku CSV!")


def _pick(record: dict, keys) -> str:
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return ""


def parse_quantity(raw: str) -> int:
    m = _LEADING_INT.match(raw or "")
    if not m:
        return 1
    value = int(m.group(1))
    return value if value >= 1 else 1


def parse_rows(text: str) -> List[DeviceRow]:
    reader = csv.DictReader(io.StringIO(text.lstrip(BOM)), delimiter=DELIMITER)
    rows = []
    for record in reader:
        record = {(k or "").strip(): (v or "") for k, v in record.items()}
        if not any(v.strip() for v in record.values()):
            continue
        rows.append(DeviceRow(
            object_name=_pick(record, OBJECT_KEYS).lstrip(BOM).strip(),
            category=_pick(record, CATEGORY_KEYS),
            device_name=_pick(record, NAME_KEYS),
            quantity=parse_quantity(_pick(record, QUANTITY_KEYS)),
            device_class=_pick(record, CLASS_KEYS),
        ))
    return rows


def summary_rows(text: str) -> List[ClassifiedRow]:
    return classify_rows(parse_rows(text))


def render_assigned_rows(rows: Iterable[AssignedRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=DELIMITER, lineterminator="\n")
    writer.writerow(OUTPUT_HEADERS)
    for r in rows:
        writer.writerow([r.object_name, r.category, r.device_name, r.address, r.mask, r.gateway, r.ntp_server])
    return buf.getvalue()


def file_base(file_name: str) -> str:
    return PurePath(file_name).stem


def network_name(file_name: str) -> str:
    base = file_base(file_name)
    m = _WYKAZ.match(base)
    return m.group(1) if m else base


def output_file_name(file_name: str) -> str:
    return f"Adresacja_{file_base(file_name)}.csv"
