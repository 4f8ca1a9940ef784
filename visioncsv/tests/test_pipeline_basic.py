from pathlib import Path

import pandas as pd
import pytest

from visioncsv import (
    EmptyInput,
    IngestionConfiguration,
    InvalidExtension,
    UnreadableFile,
    run_ingestion_pipeline,
    run_processing_pipeline,
)
from visioncsv.pipeline import ANALYSIS_PROMPT_TEMPLATE


def test_header_row_and_auto_delimiter():
    result = run_ingestion_pipeline(
        "a,b,c\n1,2,3\n4,5,6", IngestionConfiguration(delimiter="auto")
    )
    assert result.delimiter == ","
    assert list(result.headers) == ["a", "b", "c"]
    assert result.dataset.as_dicts() == [
        {"a": "1", "b": "2", "c": "3"},
        {"a": "4", "b": "5", "c": "6"},
    ]


def test_synthetic_headers_keep_first_line_as_data():
    result = run_ingestion_pipeline(
        "a,b,c\n1,2,3\n4,5,6", IngestionConfiguration(has_header=False)
    )
    assert list(result.headers) == ["Column_1", "Column_2", "Column_3"]
    assert result.dataset.as_dicts()[0] == {
        "Column_1": "a",
        "Column_2": "b",
        "Column_3": "c",
    }
    assert len(result.rows) == 3


def test_preview_capped_at_fifty_rows():
    lines = ["id,value"] + [f"{i},v{i}" for i in range(60)]
    result = run_ingestion_pipeline("\n".join(lines), IngestionConfiguration())
    assert len(result.rows) == 50
    assert result.rows[-1] == ("49", "v49")
    assert result.lines_total == 61


def test_quoted_field_with_embedded_comma_is_split():
    # No RFC 4180 quoting: the comma inside quotes still separates fields.
    result = run_ingestion_pipeline(
        '"Smith, John",30', IngestionConfiguration(delimiter=",", has_header=False)
    )
    assert len(result.headers) == 3
    assert result.rows == (('"Smith', 'John"', "30"),)


def test_empty_text_raises_empty_input():
    with pytest.raises(EmptyInput):
        run_ingestion_pipeline("", IngestionConfiguration())
    with pytest.raises(EmptyInput):
        run_ingestion_pipeline("\n  \r\n\n", IngestionConfiguration())


def test_short_and_long_rows_are_aligned_to_headers():
    text = "a;b;c\n1\n1;2;3;4;5\n"
    result = run_ingestion_pipeline(text, IngestionConfiguration())
    assert result.delimiter == ";"
    assert result.rows == (("1", "", ""), ("1", "2", "3"))
    assert all(len(r) == len(result.headers) for r in result.rows)


def test_headers_trimmed_and_unquoted_duplicates_kept():
    text = ' "name" | age |name\nAda|36|Lovelace\n'
    result = run_ingestion_pipeline(text, IngestionConfiguration())
    assert result.delimiter == "|"
    assert list(result.headers) == ["name", "age", "name"]
    assert result.dataset.records() == [
        [("name", "Ada"), ("age", "36"), ("name", "Lovelace")]
    ]
    # Plain dicts collapse duplicates; the last value wins.
    assert result.dataset.as_dicts() == [{"name": "Lovelace", "age": "36"}]


def test_keep_empty_lines_projects_blank_rows():
    text = "a,b\r\n\r\n1,2\n"
    result = run_ingestion_pipeline(
        text, IngestionConfiguration(skip_empty_lines=False)
    )
    # blank middle line and trailing empty line both become rows
    assert result.rows == (("", ""), ("1", "2"), ("", ""))


def test_sample_text_and_prompt_use_first_25_lines():
    lines = ["x\ty"] + [f"{i}\t{i * 2}" for i in range(40)]
    result = run_ingestion_pipeline("\n".join(lines), IngestionConfiguration())
    assert result.delimiter == "\t"
    assert result.sample_text.split("\n") == lines[:25]
    assert result.prompt == ANALYSIS_PROMPT_TEMPLATE.format(sample=result.sample_text)
    assert result.prompt.startswith("Analyze this raw CSV data:\n\nx\ty\n")


def test_to_frame_keeps_column_order():
    result = run_ingestion_pipeline("b,a\n1,2", IngestionConfiguration())
    frame = result.dataset.to_frame()
    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == ["b", "a"]
    assert frame.iloc[0].tolist() == ["1", "2"]


def test_same_input_and_config_give_equal_results():
    text = "k;v\n1;2\n3;4"
    cfg = IngestionConfiguration()
    assert run_ingestion_pipeline(text, cfg) == run_ingestion_pipeline(text, cfg)


def test_run_processing_pipeline_from_file(tmp_path: Path):
    csv_path = tmp_path / "people.csv"
    csv_path.write_text("Name,Age\nAlice,30\nBob,25\n", encoding="utf-8")

    result = run_processing_pipeline(csv_path, config=IngestionConfiguration())
    payload = result.to_payload()
    assert payload["dataset"]["column_names"] == ["Name", "Age"]
    assert payload["dataset"]["rows"] == 2
    assert payload["rows"][1] == {"Name": "Bob", "Age": "25"}


def test_utf8_bom_is_dropped(tmp_path: Path):
    csv_path = tmp_path / "bom.csv"
    csv_path.write_bytes("\ufeffcol,other\n1,2\n".encode("utf-8"))
    result = run_processing_pipeline(csv_path, config=IngestionConfiguration())
    assert result.headers[0] == "col"


def test_latin1_file(tmp_path: Path):
    csv_path = tmp_path / "latin.csv"
    csv_path.write_bytes("città;prezzo\nRoma;10\n".encode("latin-1"))

    with pytest.raises(UnreadableFile):
        run_processing_pipeline(csv_path, config=IngestionConfiguration())

    result = run_processing_pipeline(
        csv_path, config=IngestionConfiguration(encoding="ISO-8859-1")
    )
    assert list(result.headers) == ["città", "prezzo"]


def test_non_csv_and_missing_files(tmp_path: Path):
    txt = tmp_path / "notes.txt"
    txt.write_text("a,b\n", encoding="utf-8")
    with pytest.raises(InvalidExtension):
        run_processing_pipeline(txt, config=IngestionConfiguration())

    with pytest.raises(UnreadableFile):
        run_processing_pipeline(
            tmp_path / "missing.csv", config=IngestionConfiguration()
        )
