from pathlib import Path

from plox import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_9_static_scope(capsys):
    with open(EXAMPLES / 'program_9.lox', 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip().splitlines()
    # showA keeps seeing the global it was resolved against
    assert out == ['global', 'global', 'block']
