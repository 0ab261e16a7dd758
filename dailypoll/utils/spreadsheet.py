import csv
from io import BytesIO, StringIO
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _clean_row(row: dict) -> dict:
    return {
        (k or "").strip().lower(): (v.strip() if isinstance(v, str) else v)
        for k, v in row.items()
        if k is not None
    }


def _cell_text(value):
    if value is None:
        return None
    # Phone numbers typed into Excel come back as numbers
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def read_csv_rows(file_storage) -> list[dict]:
    """Parse an uploaded CSV into dicts keyed by lower-cased, stripped header names."""
    raw = file_storage.stream.read()
    text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
    reader = csv.DictReader(StringIO(text))
    rows = []
    for row in reader:
        cleaned = _clean_row(row)
        if any(cleaned.values()):
            rows.append(cleaned)
    return rows


def read_xlsx_rows(file_storage) -> list[dict]:
    """First worksheet of an uploaded workbook, its first row used as the header."""
    try:
        workbook = load_workbook(BytesIO(file_storage.stream.read()), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError) as e:
        raise ValueError(f"not a valid .xlsx workbook ({e})") from e

    try:
        values = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            return []
        keys = [_cell_text(h) for h in header]

        rows = []
        for record in values:
            cleaned = _clean_row({k: _cell_text(v) for k, v in zip(keys, record)})
            if any(cleaned.values()):
                rows.append(cleaned)
        return rows
    finally:
        workbook.close()


def read_rows(file_storage) -> list[dict]:
    """Dispatch on the upload's extension: .xlsx workbooks, anything else as CSV."""
    name = (file_storage.filename or "").lower()
    if name.endswith(".xlsx"):
        return read_xlsx_rows(file_storage)
    if name.endswith(".xls"):
        raise ValueError("legacy .xls workbooks are not supported, save the file as .xlsx or .csv")
    return read_csv_rows(file_storage)


def write_csv(header, rows) -> BytesIO:
    text_buffer = StringIO()
    writer = csv.writer(text_buffer)
    writer.writerow(header)
    for r in rows:
        writer.writerow(r)

    binary_buffer = BytesIO(text_buffer.getvalue().encode("utf-8"))
    binary_buffer.seek(0)
    return binary_buffer


def write_xlsx(header, rows) -> BytesIO:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Sheet1"
    sheet.append(list(header))
    for r in rows:
        sheet.append(list(r))

    buffer = BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer
