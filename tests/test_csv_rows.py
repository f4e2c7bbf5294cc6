import pytest

from ipplan.csv_rows import (network_name, output_file_name, parse_quantity, parse_rows,
                             render_assigned_rows, summary_rows, validate_csv)
from ipplan.errors import InvalidCsv
from ipplan.models import AssignedRow

WYKAZ = (
    "\ufeffNazwa Obiektu;Kategoria;Nazwa;Ilość;Klasa\n"
    "Przejazd 1;KAT A;Kamera WV-U1532LA;2;LANZ\n"
    "Przejazd 1;;Router;;brak\n"
    "\n"
    "Przejazd 1;;Laptop;abc; lanz1 \n"
    ";;Zapas;3 szt;lan\n"
)


def test_validate_accepts_known_headers():
    validate_csv(WYKAZ, "wykaz_P1_2024.csv")
    validate_csv("nazwa obiektu;kategoria;nazwa;ilosc;klasa\n", "x.CSV")


def test_validate_rejects_extension():
    with pytest.raises(InvalidCsv, match="rozszerzenie"):
        validate_csv(WYKAZ, "wykaz.xlsx")


def test_validate_rejects_header():
    with pytest.raises(InvalidCsv, match="nagłówek"):
        validate_csv("Obiekt;Kategoria;Nazwa;Ilość;Klasa\n", "wykaz.csv")
    with pytest.raises(InvalidCsv):
        validate_csv("", "wykaz.csv")


def test_parse_rows_normalizes_fields():
    rows = parse_rows(WYKAZ)
    assert [(r.object_name, r.device_name, r.quantity, r.device_class) for r in rows] == [
        ("Przejazd 1", "Kamera WV-U1532LA", 2, "lanz"),
        ("Przejazd 1", "Router", 1, "brak"),
        ("Przejazd 1", "Laptop", 1, "lanz1"),
        ("", "Zapas", 3, "lan"),
    ]
    assert rows[0].category == "KAT A"


def test_parse_quantity_defaults_to_one():
    assert parse_quantity("4") == 4
    assert parse_quantity(" 12 szt") == 12
    assert parse_quantity("") == 1
    assert parse_quantity("0") == 1
    assert parse_quantity("-3") == 1
    assert parse_quantity(None) == 1


def test_summary_marks_included_rows():
    assert [r.included for r in summary_rows(WYKAZ)] == [True, True, False, False]


def test_render_assigned_rows():
    rows = [
        AssignedRow(object_name="P1", category="KAT A", device_name="Router", address="172.16.0.1",
                    mask="255.255.255.240", gateway="172.16.0.1", ntp_server="172.16.0.1"),
        AssignedRow(object_name="P1", category="", device_name="Laptop", address="DHCP",
                    mask="DHCP", gateway="DHCP", ntp_server="DHCP"),
    ]
    assert render_assigned_rows(rows).splitlines() == [
        "Nazwa Obiektu;Kategoria;Nazwa;Adres ip V4;Maska;Brama domyślna;Serwer NTP",
        "P1;KAT A;Router;172.16.0.1;255.255.255.240;172.16.0.1;172.16.0.1",
        "P1;;Laptop;DHCP;DHCP;DHCP;DHCP",
    ]


def test_file_names():
    assert network_name("wykaz_GDY_2024.csv") == "GDY"
    assert network_name("WYKAZ_abc_x.csv") == "abc"
    assert network_name("lista.csv") == "lista"
    assert output_file_name("wykaz_GDY_2024.csv") == "Adresacja_wykaz_GDY_2024.csv"
