from pathlib import Path

from plox import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_2_shadowing(capsys):
    with open(EXAMPLES / 'program_2.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['2', '1']
