from pathlib import Path

import pytest

from pubfolio import DuplicateIndexError, ParseError, load_all
from pubfolio.collections import PublicationCollection
from pubfolio.fields import CompositeFieldExtractor, REQUIRED_FIELDS
from pubfolio.records import (
    PublicationLoader,
    PublicationRecord,
    RecordBuilder,
    RecordFileLoader,
    parse_record_text,
)

FIXTURES = Path(__file__).parent / "fixtures"

BASE_FIELDS = {
    "index": "1",
    "title": "A Paper",
    "authors": "\n  - Ada Lovelace\n  - Charles Babbage",
    "conference": "VLDB",
    "year": "2021",
    "abstract": ">\n  Short abstract.",
    "doi": "10.1000/xyz123",
}


def record_text(omit=(), **overrides) -> str:
    fields = {**BASE_FIELDS, **{k: str(v) for k, v in overrides.items()}}
    lines = []
    for key, value in fields.items():
        if key in omit:
            continue
        separator = "" if value.startswith("\n") else " "
        lines.append(f"{key}:{separator}{value}")
    return "\n".join(lines) + "\n"


def write_record(directory: Path, name: str, omit=(), **overrides) -> Path:
    path = directory / name
    path.write_text(record_text(omit=omit, **overrides), encoding="utf-8")
    return path


def test_load_all_fixtures_in_index_order():
    records = load_all(FIXTURES)
    assert isinstance(records, PublicationCollection)
    assert [r.index for r in records] == [3, 4, 5]
    first = records[0]
    assert first.title == "Analysis of Data Structures involved in RPQ Evaluation"
    assert first.authors[0] == "Frank Tetzel"
    assert len(first.authors) == 5
    assert first.conference == "DATA"
    assert first.year == 2018
    assert first.abstract.startswith("A fundamental ingredient")
    assert first.abstract.endswith("evaluation time.\n")
    assert "\n" not in first.abstract[:-1]
    assert first.doi == "10.5220/0006860303340343"
    assert first.source_path == FIXTURES / "2018-DATA-data-structures.yml"


def test_load_all_accepts_string_path():
    assert len(load_all(str(FIXTURES))) == 3


def test_records_are_returned_sorted_by_index(tmp_path):
    write_record(tmp_path, "a.yml", index=5)
    write_record(tmp_path, "b.yml", index=3)
    write_record(tmp_path, "c.yaml", index=4)
    records = load_all(tmp_path)
    assert [r.index for r in records] == [3, 4, 5]
    assert [r.source_path.name for r in records] == ["b.yml", "c.yaml", "a.yml"]


def test_empty_directory_loads_nothing(tmp_path):
    assert len(load_all(tmp_path)) == 0


def test_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_all(tmp_path / "nope")


def test_non_record_files_are_ignored(tmp_path):
    write_record(tmp_path, "paper.yml", index=1)
    (tmp_path / "notes.md").write_text("# not a record\n", encoding="utf-8")
    (tmp_path / ".backup.yml").write_text("garbage: [", encoding="utf-8")
    sub = tmp_path / "nested"
    sub.mkdir()
    write_record(sub, "other.yml", index=1)
    records = load_all(tmp_path)
    assert [r.source_path.name for r in records] == ["paper.yml"]


@pytest.mark.parametrize("missing", REQUIRED_FIELDS)
def test_missing_required_field_names_file(tmp_path, missing):
    write_record(tmp_path, "good.yml", index=1)
    bad = write_record(tmp_path, "bad.yml", omit=(missing,), index=2)
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert info.value.source_path == bad
    assert str(bad) in str(info.value)
    assert missing in info.value.message


def test_null_required_field_counts_as_missing(tmp_path):
    bad = write_record(tmp_path, "bad.yml", title="")
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert info.value.source_path == bad
    assert "missing required field 'title'" in info.value.message


def test_missing_doi_is_allowed(tmp_path):
    write_record(tmp_path, "preprint.yml", omit=("doi",))
    (record,) = load_all(tmp_path)
    assert record.doi is None
    assert record.doi_url is None


def test_null_or_blank_doi_is_absent(tmp_path):
    write_record(tmp_path, "a.yml", index=1, doi="")
    write_record(tmp_path, "b.yml", index=2, doi="'  '")
    assert [r.doi for r in load_all(tmp_path)] == [None, None]


def test_doi_must_be_string(tmp_path):
    write_record(tmp_path, "a.yml", doi="10.1234")
    with pytest.raises(ParseError, match="'doi' must be a string"):
        load_all(tmp_path)


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"index": "one"}, "'index' must be an integer"),
        ({"index": "true"}, "'index' must be an integer"),
        ({"index": "1.5"}, "'index' must be an integer"),
        ({"year": "'2021'"}, "'year' must be an integer"),
        ({"year": "21"}, "4-digit year"),
        ({"year": "20210"}, "4-digit year"),
        ({"title": "'   '"}, "'title' must not be empty"),
        ({"title": "[a, b]"}, "'title' must be a string"),
        ({"authors": "Ada Lovelace"}, "'authors' must be a list"),
        ({"authors": "[]"}, "at least one author"),
        ({"authors": "\n  - Ada\n  - 42"}, "author #2"),
        ({"authors": "\n  - ''"}, "author #1"),
        ({"conference": "2020"}, "'conference' must be a string"),
        ({"abstract": "12"}, "'abstract' must be a string"),
    ],
)
def test_wrong_types_raise_parse_error(tmp_path, overrides, expected):
    bad = write_record(tmp_path, "bad.yml", **overrides)
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert expected in info.value.message
    assert info.value.source_path == bad


def test_malformed_yaml_raises_parse_error(tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_text("index: 1\ntitle: [unclosed\n", encoding="utf-8")
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert info.value.source_path == bad
    assert "invalid YAML" in info.value.message
    assert info.value.original_error is not None


@pytest.mark.parametrize(
    "content, expected",
    [
        ("", "empty"),
        ("- index: 1\n", "expected a mapping"),
        ("just a string\n", "expected a mapping"),
        ("1: one\n", "field names must be strings"),
    ],
)
def test_non_mapping_documents_raise(tmp_path, content, expected):
    (tmp_path / "bad.yml").write_text(content, encoding="utf-8")
    with pytest.raises(ParseError, match=expected):
        load_all(tmp_path)


def test_undecodable_file_raises_parse_error(tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_bytes(b"title: \xff\xfe\n")
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert info.value.source_path == bad
    assert "UTF-8" in info.value.message


def test_duplicate_index_raises(tmp_path):
    first = write_record(tmp_path, "a.yml", index=7)
    write_record(tmp_path, "b.yml", index=1)
    second = write_record(tmp_path, "c.yml", index=7)
    with pytest.raises(DuplicateIndexError) as info:
        load_all(tmp_path)
    assert info.value.index == 7
    assert info.value.source_path == second
    assert info.value.other_path == first
    assert "index 7" in str(info.value)


def test_parse_error_wins_over_duplicate_check(tmp_path):
    write_record(tmp_path, "a.yml", index=1)
    write_record(tmp_path, "b.yml", index=1)
    write_record(tmp_path, "c.yml", omit=("title",), index=2)
    with pytest.raises(ParseError):
        load_all(tmp_path)


def test_first_bad_file_in_name_order_is_reported(tmp_path):
    write_record(tmp_path, "b.yml", omit=("year",), index=1)
    first_bad = write_record(tmp_path, "a.yml", omit=("title",), index=2)
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert info.value.source_path == first_bad


def test_extra_fields_are_preserved(tmp_path):
    path = tmp_path / "a.yml"
    path.write_text(
        record_text() + "pdf: /papers/a.pdf\naward: Best Paper\n", encoding="utf-8"
    )
    (record,) = load_all(tmp_path)
    assert record.extra == {"pdf": "/papers/a.pdf", "award": "Best Paper"}
    assert list(record.extra) == ["pdf", "award"]


def test_record_is_frozen_and_derived_properties(tmp_path):
    path = write_record(tmp_path, "2021-VLDB-a-paper.yml")
    (record,) = load_all(tmp_path)
    with pytest.raises(AttributeError):
        record.index = 2
    assert record.authors == ("Ada Lovelace", "Charles Babbage")
    assert record.slug == "2021-VLDB-a-paper"
    assert record.doi_url == "https://doi.org/10.1000/xyz123"
    assert record.author_line == "Ada Lovelace and Charles Babbage"
    assert record.source_path == path


def test_equality_ignores_source_path():
    text = record_text()
    one = parse_record_text(text, Path("one.yml"))
    two = parse_record_text(text, Path("two.yml"))
    assert one == two
    assert PublicationRecord(
        index=1,
        title="T",
        authors=("A",),
        conference="C",
        year=2020,
        abstract="x",
    ).slug == ""


def test_loader_uses_injected_components(tmp_path):
    built = []

    class FakeSource:
        def iter_files(self):
            return [Path("x.yml"), Path("y.yml")]

    class FakeBuilder:
        def build(self, path):
            built.append(path)
            index = 2 if path.name == "x.yml" else 1
            return PublicationRecord(
                index=index,
                title=path.stem,
                authors=("A",),
                conference="C",
                year=2020,
                abstract="",
                source_path=path,
            )

    loader = PublicationLoader(tmp_path, FakeSource(), FakeBuilder())
    records = loader.load()
    assert built == [Path("x.yml"), Path("y.yml")]
    assert [r.title for r in records] == ["y", "x"]


def test_record_builder_with_custom_extractor(tmp_path):
    class VenueUpper:
        def extract(self, raw, path):
            return {"conference": raw["conference"].upper()}

    extractor = CompositeFieldExtractor()
    extractor.add_extractor(VenueUpper())
    path = write_record(tmp_path, "a.yml", conference="vldb")
    record = RecordBuilder(extractor).build(path)
    assert record.conference == "VLDB"


def test_record_file_loader_sorts_by_name(tmp_path):
    for name in ("c.yml", "a.YAML", "b.yaml", "d.txt"):
        (tmp_path / name).write_text("x: 1\n", encoding="utf-8")
    names = [p.name for p in RecordFileLoader(tmp_path).iter_files()]
    assert names == ["a.YAML", "b.yaml", "c.yml"]


@pytest.mark.parametrize(
    "appended, field",
    [
        ("doi: 10.9999/wrong\n", "doi"),
        ("index: 99\n", "index"),
        ("pdf: a.pdf\npdf: b.pdf\n", "pdf"),
    ],
)
def test_repeated_field_raises_parse_error(tmp_path, appended, field):
    bad = tmp_path / "bad.yml"
    bad.write_text(record_text() + appended, encoding="utf-8")
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert info.value.source_path == bad
    assert info.value.message == f"duplicate field '{field}'"


def test_repeated_key_in_nested_extra_value_raises(tmp_path):
    (tmp_path / "bad.yml").write_text(
        record_text() + "links:\n  code: a\n  code: b\n", encoding="utf-8"
    )
    with pytest.raises(ParseError, match="duplicate field 'code'"):
        load_all(tmp_path)


@pytest.mark.parametrize("name", ["slug", "doi_url", "author_line"])
def test_extra_key_shadowing_derived_value_is_rejected(tmp_path, name):
    (tmp_path / "bad.yml").write_text(
        record_text() + f"{name}: custom\n", encoding="utf-8"
    )
    with pytest.raises(ParseError, match=f"field '{name}' is reserved"):
        load_all(tmp_path)


def test_extra_fields_are_read_only(tmp_path):
    (tmp_path / "a.yml").write_text(record_text() + "pdf: a.pdf\n", encoding="utf-8")
    (record,) = load_all(tmp_path)
    with pytest.raises(TypeError):
        record.extra["pdf"] = "other.pdf"
    with pytest.raises(TypeError):
        record.extra["new"] = 1
    assert record.extra == {"pdf": "a.pdf"}


def test_extra_passed_to_constructor_is_copied():
    extra = {"pdf": "a.pdf"}
    record = PublicationRecord(
        index=1,
        title="T",
        authors=("A",),
        conference="C",
        year=2020,
        abstract="x",
        extra=extra,
    )
    extra["pdf"] = "changed.pdf"
    assert record.extra["pdf"] == "a.pdf"


def test_unreadable_file_raises_parse_error(monkeypatch, tmp_path):
    bad = write_record(tmp_path, "locked.yml")

    def fake_read_text(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_text", fake_read_text)
    with pytest.raises(ParseError) as info:
        load_all(tmp_path)
    assert info.value.source_path == bad
    assert "cannot read file" in info.value.message
    assert isinstance(info.value.original_error, PermissionError)
