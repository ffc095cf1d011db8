from datetime import date
from types import SimpleNamespace

from export import HEADERS, content_disposition, export_filename, format_entries


def entry(**overrides):
    values = dict(
        date=date(2024, 3, 6),
        user_name="Rohit Singh",
        client="client-16",
        task="task-7",
        docket_number=None,
        description="Prepared response",
        time_spent="05:00",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_csv_header_and_row():
    lines = format_entries([entry()], "csv").splitlines()
    assert lines[0] == ",".join(HEADERS)
    assert lines[1] == "03/06/2024,Time,Rohit Singh,Intel - IPO,IPO - Preparation of responses,,Prepared response,05:00"


def test_csv_escapes_quotes_and_delimiters():
    text = format_entries([entry(description='Call with "client", follow-up')], "csv")
    assert '"Call with ""client"", follow-up"' in text


def test_tsv_uses_tabs():
    lines = format_entries([entry(docket_number="INTC-IN-207")], "tsv").splitlines()
    assert lines[0] == "\t".join(HEADERS)
    assert lines[1].split("\t") == [
        "03/06/2024",
        "Time",
        "Rohit Singh",
        "Intel - IPO",
        "IPO - Preparation of responses",
        "INTC-IN-207",
        "Prepared response",
        "05:00",
    ]


def test_unknown_lookup_ids_are_exported_as_is():
    line = format_entries([entry(client="client-999", task="custom")], "csv").splitlines()[1]
    assert ",client-999,custom," in line


def test_export_filename():
    assert export_filename("Rohit Singh", "csv", today=date(2024, 3, 8)) == "2024-03-08 Rohit Singh.csv"
    assert export_filename("Rohit Singh", "tsv", today=date(2024, 3, 8)) == "2024-03-08 Rohit Singh.txt"


def test_content_disposition_keeps_header_well_formed():
    header = content_disposition('2024-03-08 Ann "AJ" O\'Neil.csv')
    fallback = header.split("; ")[1]
    assert fallback == "filename=\"2024-03-08 Ann AJ O'Neil.csv\""
    assert header.endswith("filename*=UTF-8''2024-03-08%20Ann%20%22AJ%22%20O%27Neil.csv")


def test_content_disposition_non_ascii_name_has_ascii_fallback():
    header = content_disposition("2024-03-08 Zoë Łukasz.txt")
    header.encode("latin-1")
    assert 'filename="2024-03-08 Zoe ukasz.txt"' in header
    assert header.endswith("filename*=UTF-8''2024-03-08%20Zo%C3%AB%20%C5%81ukasz.txt")
