import pytest

import chart_parser

HEADER = "user_played,instrument_name,velocity,pitch,start,end\n"


def test_parses_rows_after_header():
    rows = chart_parser.parse_chart_text(HEADER + "True,piano,100,60,0.0,0.2\nFalse,violin,90,64,0.5,2.0\n")
    assert len(rows) == 2
    assert rows[0].user_played is True
    assert rows[0].velocity_raw == 100
    assert rows[1].user_played is False
    assert rows[1].instrument_name == "violin"
    assert rows[1].start == 0.5
    assert rows[1].end == 2.0


def test_only_exact_true_marks_user_played():
    rows = chart_parser.parse_chart_text(HEADER + "true,piano,100,60,0.0,0.2\n1,piano,100,60,0.0,0.2\n")
    assert [row.user_played for row in rows] == [False, False]


def test_blank_lines_are_skipped_and_header_only_gives_no_rows():
    assert chart_parser.parse_chart_text(HEADER) == []
    rows = chart_parser.parse_chart_text("\n" + HEADER + "\nTrue,piano,100,60,0.0,0.2\n\n")
    assert len(rows) == 1


def test_integral_float_velocity_is_accepted():
    rows = chart_parser.parse_chart_text(HEADER + "True,piano,100.0,60,0.0,0.2\n")
    assert rows[0].velocity_raw == 100


def test_quoted_instrument_name_with_comma():
    rows = chart_parser.parse_chart_text(HEADER + 'True,"grand, piano",100,60,0.0,0.2\n')
    assert rows[0].instrument_name == "grand, piano"


@pytest.mark.parametrize(
    "line",
    [
        "True,piano,loud,60,0.0,0.2",
        "True,piano,100,60,0.0",
        "True,piano,100,60,0.0,0.2,extra",
        "True,piano,200,60,0.0,0.2",
        "True,piano,100,60,1.0,0.5",
        "True,piano,100,60,nan,0.5",
        "True,piano,100,sixty,0.0,0.5",
    ],
)
def test_malformed_rows_raise_with_line_number(line):
    with pytest.raises(chart_parser.ChartParseError) as excinfo:
        chart_parser.parse_chart_text(HEADER + "True,piano,100,60,0.0,0.2\n" + line + "\n")
    assert excinfo.value.line_number == 3
    assert excinfo.value.line_text == line
    assert isinstance(excinfo.value, ValueError)


def test_load_chart_file_reads_utf8(tmp_path):
    chart_path = tmp_path / "song.csv"
    chart_path.write_text(HEADER + "True,piano,100,60,0.0,0.2\n", encoding="utf-8")
    rows = chart_parser.load_chart_file(chart_path)
    assert rows[0].pitch == 60


def test_load_chart_file_missing_raises_parse_error(tmp_path):
    with pytest.raises(chart_parser.ChartParseError):
        chart_parser.load_chart_file(tmp_path / "missing.csv")
