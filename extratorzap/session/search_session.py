"""
Search session state for one browser: the four form fields, the result
list, the busy flag and the single message slot shown above the table.
"""

from typing import Optional, Tuple

from extratorzap.errors import BusinessLookupError, NothingToExport, ValidationError
from extratorzap.export.csv_exporter import build_csv, export_filename
from extratorzap.export.excel_exporter import build_workbook
from extratorzap.lookup.business_lookup import BusinessLookup, BusinessRecord, SearchCriteria
from extratorzap.utils.helpers import setup_logger

FIELDS = ("country", "region", "city", "sector")

EMPTY_FIELDS_MESSAGE = "Please fill in all fields."
NO_RESULTS_MESSAGE = "No businesses found for the given criteria."
NOTHING_TO_EXPORT_MESSAGE = "There is no data to export."
BUSY_MESSAGE = "A search is already in progress."

MESSAGE_ERROR = "error"
MESSAGE_INFO = "info"


class SearchSession:
    """
    Query form controller.

    ``submit`` never raises for user-facing failures: validation and lookup
    errors land in ``message`` and are returned to the caller.
    """

    def __init__(self, country: str = "", region: str = "", city: str = "", sector: str = ""):
        self.logger = setup_logger(__name__)
        self.country = country
        self.region = region
        self.city = city
        self.sector = sector

        self.results: Tuple[BusinessRecord, ...] = ()
        self.is_loading = False
        self.message: Optional[str] = None
        self.message_kind: Optional[str] = None
        self.last_criteria: Optional[SearchCriteria] = None

    def update_fields(self, **values: str):
        for name, value in values.items():
            if name not in FIELDS:
                raise ValueError(f"Unknown field: {name}")
            setattr(self, name, value if value is not None else "")

    def criteria(self) -> SearchCriteria:
        return SearchCriteria(country=self.country, region=self.region, city=self.city, sector=self.sector)

    def validate(self):
        if not all(getattr(self, name) for name in FIELDS):
            raise ValidationError(EMPTY_FIELDS_MESSAGE)

    def _set_message(self, message: Optional[str], kind: Optional[str] = None):
        self.message = message
        self.message_kind = kind if message else None

    def submit(self, lookup: BusinessLookup) -> Optional[Exception]:
        """
        Run one search. Returns the ValidationError or BusinessLookupError
        that was displayed, or None when the lookup succeeded (including
        the zero results case).
        """
        try:
            self.validate()
        except ValidationError as e:
            self._set_message(e.message, MESSAGE_ERROR)
            return e

        criteria = self.criteria()
        self._set_message(None)
        self.results = ()
        self.is_loading = True
        self.last_criteria = criteria

        try:
            records = lookup.lookup(criteria)
            self.results = tuple(records)
            if not self.results:
                self._set_message(NO_RESULTS_MESSAGE, MESSAGE_INFO)
            return None
        except BusinessLookupError as e:
            self.logger.warning(f"Lookup failed: {e.message}")
            self._set_message(e.message, MESSAGE_ERROR)
            return e
        finally:
            self.is_loading = False

    def _export_criteria(self) -> SearchCriteria:
        if not self.results:
            raise NothingToExport(NOTHING_TO_EXPORT_MESSAGE)
        return self.last_criteria or self.criteria()

    def export_csv(self) -> Tuple[str, bytes]:
        """(filename, UTF-8 bytes with BOM); raises NothingToExport"""
        criteria = self._export_criteria()
        return export_filename(criteria, "csv"), build_csv(self.results, criteria).encode("utf-8")

    def export_excel(self) -> Tuple[str, bytes]:
        criteria = self._export_criteria()
        return export_filename(criteria, "xlsx"), build_workbook(self.results, criteria)

    def to_dict(self) -> dict:
        return {
            "results": [record.to_dict() for record in self.results],
            "is_loading": self.is_loading,
            "message": self.message,
            "message_kind": self.message_kind,
        }
