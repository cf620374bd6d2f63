from outline_toolkit.core.text_layout import TextLayout


def test_lines_split_on_newline_only():
    layout = TextLayout()
    assert layout.lines("") == [(0, 0)]
    assert layout.lines("ab\ncde\n") == [(0, 2), (3, 6), (7, 7)]


def test_column_and_line_predicates():
    layout = TextLayout()
    text = "hello\nworld"
    assert layout.column(text, 8) == 2
    assert layout.is_first_line(text, 5)
    assert not layout.is_first_line(text, 6)
    assert layout.is_last_line(text, 11)


def test_offset_at_goal_clamps_to_line_end():
    layout = TextLayout()
    assert layout.offset_at_goal("ab\nlonger line", 5, "first") == 2
    assert layout.offset_at_goal("ab\nlonger line", 5, "last") == 8
    assert layout.offset_at_goal("abc", None, "first") == 0


def test_offset_on_adjacent_line():
    layout = TextLayout()
    text = "long first\nab\nthird line"
    assert layout.offset_on_adjacent_line(text, 7, 7, 1) == 13
    assert layout.offset_on_adjacent_line(text, 13, 7, 1) == 21
    assert layout.offset_on_adjacent_line(text, 2, 2, -1) is None
