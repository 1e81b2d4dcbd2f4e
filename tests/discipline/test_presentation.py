from care_ops.discipline.presentation import points_bar, points_color, progress_percent


def test_progress_is_capped_and_floored():
    assert progress_percent(9) == 50.0
    assert progress_percent(18) == 100.0
    assert progress_percent(30) == 100.0
    assert progress_percent(-2) == 0.0


def test_color_bands():
    assert points_color(0) == "green"
    assert points_color(5) == "green"
    assert points_color(6) == "yellow"
    assert points_color(10) == "orange"
    assert points_color(13) == "orange"
    assert points_color(14) == "red"


def test_points_bar_rounds_percent():
    bar = points_bar(5)

    assert bar.percent == 27.8
    assert bar.color == "green"
