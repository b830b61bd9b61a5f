"""
Tests for header resolution and loading (headers.py, rows.py, sources.py).

This module tests:
  - The four header modes and strict header validation.
  - Arity checking, casting and blank-line handling during load.
  - File and stream sources, including handle release on failure.
  - Primary-key lookups and DataFrame export.

All tests use temporary directories (via tmp_path fixture).
"""

import io

import pytest

from flatmodel.config.store import CsvDialect, StoreConfig, StorePolicy
from flatmodel.store.errors import (
    CastingError,
    ColumnNotFoundError,
    CsvFileNotFoundError,
    HeaderMismatchError,
    InvalidHandleError,
    InvalidRowFormatError,
    MissingHeaderError,
    PrimaryKeyMissingError,
    StreamOpenError,
)
from flatmodel.store.model import CsvModel
from flatmodel.store.rows import RowStore
from flatmodel.store.sources import FileSource, StreamSource


def load(path, **kwargs) -> CsvModel:
    return CsvModel(StoreConfig(path=path, **kwargs))


# ============================================================================
# Header modes
# ============================================================================

def test_headers_read_from_first_line(users_csv):
    model = load(users_csv)

    assert model.headers == ["id", "name", "email", "active"]
    assert model.count() == 5
    for row in model.all():
        assert list(row.keys()) == model.headers


def test_header_names_are_trimmed(write_csv):
    path = write_csv(" id , name \n1,John\n")

    model = load(path)

    assert model.headers == ["id", "name"]
    assert model.all() == [{"id": "1", "name": "John"}]


def test_predefined_headers_replace_header_line(users_csv):
    model = load(users_csv, headers=["user_id", "full_name", "mail", "enabled"])

    assert model.headers == ["user_id", "full_name", "mail", "enabled"]
    # Header line is consumed, not treated as data
    assert model.count() == 5
    assert model.all()[0]["full_name"] == "John Doe"


def test_predefined_headers_without_header_line(write_csv):
    path = write_csv("1,John\n2,Jane\n")

    model = load(path, headers=["id", "name"], has_headers=False)

    assert model.count() == 2
    assert model.all()[0] == {"id": "1", "name": "John"}


def test_headerless_file_gets_positional_headers(write_csv):
    path = write_csv("1,John,a@x.com\n2,Jane,b@x.com")

    model = load(path, has_headers=False)

    assert model.headers == ["0", "1", "2"]
    assert model.count() == 2
    assert model.all()[0]["1"] == "John"


def test_headerless_empty_file_raises_missing_header(write_csv):
    path = write_csv("")

    with pytest.raises(MissingHeaderError):
        load(path, has_headers=False)


def test_empty_file_with_header_expected_raises_missing_header(write_csv):
    path = write_csv("")

    with pytest.raises(MissingHeaderError):
        load(path)


def test_blank_header_line_raises_missing_header(write_csv):
    path = write_csv("   \n1\n")

    with pytest.raises(MissingHeaderError):
        load(path)


def test_duplicate_header_names_rejected(write_csv):
    path = write_csv("id,name,id\n1,a,2\n")

    with pytest.raises(HeaderMismatchError) as exc_info:
        load(path)

    assert "id" in str(exc_info.value)


def test_has_header(users_csv):
    model = load(users_csv)

    assert model.has_header("email")
    assert not model.has_header("phone")


# ============================================================================
# Strict headers
# ============================================================================

def test_strict_headers_mismatch_names_both_sets(write_csv):
    path = write_csv("id,name,email\n1,John,john@example.com\n")

    with pytest.raises(HeaderMismatchError) as exc_info:
        load(path, headers=["id", "name"], policy=StorePolicy(strict_headers=True))

    message = str(exc_info.value)
    assert "Expected: [id, name]" in message
    assert "Found: [id, name, email]" in message
    assert exc_info.value.expected == ["id", "name"]
    assert exc_info.value.found == ["id", "name", "email"]


def test_strict_headers_missing_column(write_csv):
    path = write_csv("id\n1\n")

    with pytest.raises(HeaderMismatchError):
        load(path, headers=["id", "name"], policy=StorePolicy(strict_headers=True))


def test_strict_headers_match_in_any_order(write_csv):
    path = write_csv("name,id\nJohn,1\n")

    model = load(path, headers=["id", "name"], policy=StorePolicy(strict_headers=True))

    assert model.headers == ["name", "id"]
    assert model.all()[0]["id"] == "1"
    assert model.all()[0]["name"] == "John"


def test_lenient_headers_ignore_mismatch(write_csv):
    path = write_csv("id,name,email\n1,John,john@example.com\n")

    with pytest.raises(InvalidRowFormatError):
        # Declared two columns, the data has three: lenient mode skips the
        # header comparison but arity is still enforced
        load(path, headers=["id", "name"])


# ============================================================================
# Row parsing
# ============================================================================

def test_row_with_too_few_fields_raises(write_csv):
    path = write_csv("id,name,email,active\n1,John,john@example.com\n")

    with pytest.raises(InvalidRowFormatError) as exc_info:
        load(path)

    message = str(exc_info.value)
    assert "Expected 4 columns, got 3" in message
    assert "john@example.com" in message


def test_row_with_too_many_fields_raises(write_csv):
    path = write_csv("id,name\n1,John,extra\n")

    with pytest.raises(InvalidRowFormatError) as exc_info:
        load(path)

    assert "Expected 2 columns, got 3" in str(exc_info.value)


def test_blank_lines_are_skipped(write_csv):
    path = write_csv("id,name\n1,a\n\n2,b\n\n")

    model = load(path)

    assert model.pluck("name") == ["a", "b"]


def test_quoted_fields_keep_delimiters(write_csv):
    path = write_csv('id,name\n1,"Doe, John"\n2,"Say ""hi"""\n')

    model = load(path)

    assert model.pluck("name") == ["Doe, John", 'Say "hi"']


def test_custom_delimiter(write_csv):
    path = write_csv("id;name\n1;John\n")

    model = load(path, dialect=CsvDialect(delimiter=";"))

    assert model.all() == [{"id": "1", "name": "John"}]


def test_casts_applied_on_load(users_csv):
    model = load(users_csv, casts={"id": "int", "active": "bool"})

    first = model.all()[0]
    assert first["id"] == 1
    assert first["active"] is True
    assert model.all()[1]["active"] is False


def test_cast_failure_aborts_load(write_csv):
    path = write_csv("id,name\nabc,John\n")

    with pytest.raises(CastingError):
        load(path, casts={"id": "int"})


# ============================================================================
# Sources
# ============================================================================

def test_missing_file_raises_file_not_found(tmp_path):
    with pytest.raises(CsvFileNotFoundError) as exc_info:
        load(tmp_path / "nope.csv")

    assert isinstance(exc_info.value, FileNotFoundError)


def test_unreadable_path_raises_invalid_handle(tmp_path):
    directory = tmp_path / "folder.csv"
    directory.mkdir()

    with pytest.raises(InvalidHandleError):
        load(directory)


def test_undecodable_bytes_raise_invalid_row_format(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes(b"id,name\n1,\xff\xfe\n")

    with pytest.raises(InvalidRowFormatError) as exc_info:
        load(path)

    assert "latin.csv" in str(exc_info.value)
    assert "not valid utf-8" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


def test_stream_source_without_opener_fails():
    with pytest.raises(StreamOpenError):
        CsvModel(StoreConfig(), source=StreamSource())


def test_stream_source_loads_rows():
    text = "id,name\n1,John\n2,Jane\n"
    model = CsvModel(StoreConfig(), source=StreamSource(lambda: io.StringIO(text), name="inline"))

    assert model.is_stream
    assert model.pluck("name") == ["John", "Jane"]


def test_handle_closed_when_load_fails():
    handle = io.StringIO("id,name\n1\n")

    with pytest.raises(InvalidRowFormatError):
        CsvModel(StoreConfig(), source=StreamSource(lambda: handle))

    assert handle.closed


def test_handle_closed_after_successful_load(users_csv):
    handles = []

    def opener():
        handles.append(open(users_csv, newline="", encoding="utf-8"))
        return handles[-1]

    CsvModel(StoreConfig(), source=StreamSource(opener))

    assert handles[0].closed


def test_relative_path_resolves_against_base_dir(users_csv):
    model = CsvModel(StoreConfig(path="users.csv"), base_dir=users_csv.parent)

    assert model.count() == 5
    assert model.path == users_csv


# ============================================================================
# Primary key and export
# ============================================================================

def test_find_by_primary_key(users_csv):
    model = load(users_csv, primary_key="id")

    assert model.find("2")["name"] == "Jane Smith"
    assert model.find(3)["name"] == "Bob Jones"
    assert model.find("99") is None


def test_find_without_primary_key_raises(users_csv):
    model = load(users_csv)

    with pytest.raises(PrimaryKeyMissingError):
        model.find("1")


def test_primary_key_must_be_a_header(users_csv):
    with pytest.raises(ColumnNotFoundError):
        load(users_csv, primary_key="uuid")


def test_row_store_load_directly(users_csv):
    store = RowStore.load(FileSource(users_csv), StoreConfig(casts={"id": "int"}))

    assert store.count() == 5
    assert store.all()[4]["id"] == 5


def test_to_frame_follows_header_order(users_csv):
    model = load(users_csv, casts={"id": "int"})

    frame = model.to_frame()

    assert list(frame.columns) == ["id", "name", "email", "active"]
    assert frame.shape == (5, 4)
    assert frame["id"].tolist() == [1, 2, 3, 4, 5]
