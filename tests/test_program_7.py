from pathlib import Path

from plox.lox import Lox

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_7_lexer_error_exits_65(capsys):
    lox = Lox()
    code = lox.run_file(str(EXAMPLES / 'program_7.lox'))
    captured = capsys.readouterr()
    assert code == 65
    assert captured.out == ''
    assert captured.err.strip() == "[line 1] Error: Unexpected character '@'."
