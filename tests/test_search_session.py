import pytest

from conftest import StubLookup
from extratorzap.errors import BusinessLookupError, NothingToExport, ValidationError
from extratorzap.session.search_session import (
    EMPTY_FIELDS_MESSAGE,
    FIELDS,
    MESSAGE_ERROR,
    MESSAGE_INFO,
    NO_RESULTS_MESSAGE,
    NOTHING_TO_EXPORT_MESSAGE,
    SearchSession,
)


def filled_session(**overrides):
    values = {"country": "Brasil", "region": "São Paulo", "city": "Campinas", "sector": "padaria"}
    values.update(overrides)
    return SearchSession(**values)


@pytest.mark.parametrize("field", FIELDS)
def test_submit_with_empty_field_is_a_validation_error(field, stub_lookup):
    session = filled_session(**{field: ""})

    error = session.submit(stub_lookup)

    assert isinstance(error, ValidationError)
    assert session.message == EMPTY_FIELDS_MESSAGE
    assert session.message_kind == MESSAGE_ERROR
    assert stub_lookup.calls == []
    assert session.is_loading is False


def test_whitespace_only_field_is_not_rejected(stub_lookup):
    session = filled_session(sector=" ")

    assert session.submit(stub_lookup) is None
    assert len(stub_lookup.calls) == 1


def test_submit_stores_results_and_clears_busy(stub_lookup, sample_records):
    session = filled_session()

    assert session.submit(stub_lookup) is None

    assert list(session.results) == sample_records
    assert session.message is None
    assert session.is_loading is False
    assert stub_lookup.calls[0].city == "Campinas"


def test_zero_results_sets_informational_message():
    session = filled_session()

    error = session.submit(StubLookup([]))

    assert error is None
    assert session.results == ()
    assert session.message == NO_RESULTS_MESSAGE
    assert session.message_kind == MESSAGE_INFO
    assert session.is_loading is False


def test_lookup_failure_message_is_shown_verbatim(failing_lookup):
    session = filled_session()

    error = session.submit(failing_lookup)

    assert isinstance(error, BusinessLookupError)
    assert session.message == "Failed to fetch businesses. Check your API key and connection."
    assert session.message_kind == MESSAGE_ERROR
    assert session.is_loading is False


def test_new_search_replaces_previous_results(stub_lookup, failing_lookup):
    session = filled_session()
    session.submit(stub_lookup)
    assert session.results

    session.submit(failing_lookup)

    assert session.results == ()


def test_busy_flag_is_set_while_lookup_runs():
    session = filled_session()
    seen = {}

    class WatchingLookup(StubLookup):
        def lookup(self, criteria):
            seen["busy"] = session.is_loading
            return []

    session.submit(WatchingLookup())

    assert seen["busy"] is True
    assert session.is_loading is False


def test_update_fields_rejects_unknown_names():
    session = SearchSession()

    with pytest.raises(ValueError):
        session.update_fields(zipcode="12345")


def test_export_with_no_results_raises_notice():
    session = filled_session()

    with pytest.raises(NothingToExport) as excinfo:
        session.export_csv()

    assert excinfo.value.message == NOTHING_TO_EXPORT_MESSAGE
    with pytest.raises(NothingToExport):
        session.export_excel()


def test_export_csv_uses_last_searched_criteria(stub_lookup):
    session = filled_session()
    session.submit(stub_lookup)
    session.update_fields(city="Santos", sector="bar")

    filename, payload = session.export_csv()

    assert filename == "extratorzap_Campinas_padaria.csv"
    assert payload.startswith(b"\xef\xbb\xbf")
    text = payload.decode("utf-8-sig")
    assert text.splitlines()[0] == "Nome da Empresa,WhatsApp,Status do Site,Cidade,Setor,País"
    assert '"Padaria Pão Quente","+55 11 91111-2222","Não Tem Site","Campinas","padaria","Brasil"' in text


def test_export_excel_returns_xlsx(stub_lookup):
    session = filled_session()
    session.submit(stub_lookup)

    filename, payload = session.export_excel()

    assert filename == "extratorzap_Campinas_padaria.xlsx"
    assert payload[:2] == b"PK"
