from datetime import datetime

from jyly_app.ui.formatting import format_played_at, format_points, format_progress


def test_format_played_at_naive_value():
    assert format_played_at(datetime(2024, 5, 3, 9, 7)) == "3.5.2024 09:07"
    assert format_played_at(datetime(2024, 12, 31, 23, 59)) == "31.12.2024 23:59"


def test_format_points():
    assert format_points(0) == "0 pistettä"
    assert format_points(1000) == "1000 pistettä"


def test_format_progress_is_bounded():
    assert format_progress(0, 40) == 0.0
    assert format_progress(10, 40) == 0.25
    assert format_progress(50, 40) == 1.0
    assert format_progress(3, 0) == 0.0
