from typing import Iterable

from extratorzap.lookup.business_lookup import BusinessRecord, SearchCriteria
from extratorzap.utils.helpers import safe_filename_part

CSV_HEADERS = ["Nome da Empresa", "WhatsApp", "Status do Site", "Cidade", "Setor", "País"]
UTF8_BOM = "\ufeff"


def _quote(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def export_rows(records: Iterable[BusinessRecord], criteria: SearchCriteria):
    """One list of cell values per record, in header order"""
    for record in records:
        yield [
            record.name,
            record.contact_number,
            record.website_status,
            criteria.city,
            criteria.sector,
            criteria.country,
        ]


def build_csv(records: Iterable[BusinessRecord], criteria: SearchCriteria) -> str:
    """CSV text with a leading BOM so spreadsheet apps detect UTF-8"""
    csv_rows = [",".join(CSV_HEADERS)]
    for values in export_rows(records, criteria):
        csv_rows.append(",".join(_quote(value) for value in values))
    return UTF8_BOM + "\n".join(csv_rows)


def export_filename(criteria: SearchCriteria, extension: str = "csv") -> str:
    city = safe_filename_part(criteria.city)
    sector = safe_filename_part(criteria.sector)
    return f"extratorzap_{city}_{sector}.{extension}"
