"""Golden tests: every tests/programs/*.lox file states its expected results.

    // expect: <line of stdout>
    // expect runtime error: <message>     (exit 70, error line is the comment's)
    // [line N] Error...  or  // Error...  (exit 65, one stderr line each)
"""

import re
from pathlib import Path

import pytest

from treelox.__main__ import main

PROGRAMS_DIR = Path(__file__).parent / 'programs'
PROGRAMS = sorted(PROGRAMS_DIR.glob('*.lox'))

EXPECT_OUTPUT = re.compile(r'// expect: ?(.*)$')
EXPECT_RUNTIME_ERROR = re.compile(r'// expect runtime error: (.+)$')
EXPECT_SYNTAX_ERROR = re.compile(r'// (\[line (\d+)\] )?(Error.*)$')


def load_expectations(path):
    output, errors, exit_code = [], [], 0
    for line_num, line in enumerate(path.read_text(encoding='utf-8').splitlines(), start=1):
        m = EXPECT_OUTPUT.search(line)
        if m:
            output.append(m.group(1))
            continue
        m = EXPECT_RUNTIME_ERROR.search(line)
        if m:
            errors.append(m.group(1))
            errors.append(f"[line {line_num}]")
            exit_code = 70
            continue
        m = EXPECT_SYNTAX_ERROR.search(line)
        if m:
            error_line = m.group(2) or line_num
            errors.append(f"[line {error_line}] {m.group(3)}")
            exit_code = 65
    return output, errors, exit_code


@pytest.mark.parametrize('path', PROGRAMS, ids=[p.stem for p in PROGRAMS])
def test_program(path, capsys):
    output, errors, exit_code = load_expectations(path)
    try:
        main([str(path)])
        code = 0
    except SystemExit as e:
        code = e.code
    captured = capsys.readouterr()
    assert captured.out.splitlines() == output
    assert captured.err.splitlines() == errors
    assert code == exit_code
