import pytest

from promptpack.compression.statements import bracket_balance, code_text, collect_statement


@pytest.mark.parametrize(
    "line, expected",
    [
        ("x = foo(", 1),
        ("    1, 2)", -1),
        ('PATTERN = re.compile(r"\\((\\d+)")', 0),
        ("sep = '('", 0),
        ('s = "a\\"(" + f(x)', 0),
        ("x = [1,  # closes later )", 1),
        ('doc = """(unclosed', 0),
        ("y = {'a': [1, 2]}", 0),
    ],
)
def test_bracket_balance(line, expected):
    assert bracket_balance(line) == expected


def test_code_text():
    assert code_text('x = "#" + y  # note') == "x = _ + y  "
    assert code_text("it = 'a' + \"it's\"") == "it = _ + _"


def test_collect_statement_ignores_string_brackets():
    lines = ['A = re.compile("(")', "def f():", "    pass"]
    assert collect_statement(lines, 0) == (['A = re.compile("(")'], 0)


def test_collect_statement_stops_at_end_of_cell():
    lines = ["x = foo(", "    1,"]
    assert collect_statement(lines, 0) == (["x = foo(", "    1,"], 1)
