import builtins

import pytest

from plox.__main__ import main


def run_cli(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def write(tmp_path, name, source):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return str(path)


def test_well_formed_script_exits_0(tmp_path, capsys):
    script = write(tmp_path, 'ok.lox', 'print "fine";')
    assert run_cli([script]) == 0
    assert capsys.readouterr().out.strip() == 'fine'


def test_lexer_error_exits_65(tmp_path, capsys):
    script = write(tmp_path, 'lex.lox', 'print 1; $')
    assert run_cli([script]) == 65
    captured = capsys.readouterr()
    assert captured.out == ''
    assert "Unexpected character '$'." in captured.err


def test_resolver_error_exits_65(tmp_path, capsys):
    script = write(tmp_path, 'static.lox', 'return 1;')
    assert run_cli([script]) == 65


def test_runtime_error_exits_70(tmp_path, capsys):
    script = write(tmp_path, 'boom.lox', 'print "start";\nprint nothing;')
    assert run_cli([script]) == 70
    captured = capsys.readouterr()
    assert captured.out.strip() == 'start'
    assert captured.err.strip() == "Undefined variable 'nothing'.\n[line 2]"


def test_too_many_arguments_exits_64(tmp_path, capsys):
    assert run_cli(['a.lox', 'b.lox']) == 64
    assert capsys.readouterr().out.strip() == 'Usage: plox [script]'


def test_missing_script(tmp_path, capsys):
    assert run_cli([str(tmp_path / 'absent.lox')]) == 66
    assert 'not found' in capsys.readouterr().err


def test_emit_and_run_ast(tmp_path, capsys):
    script = write(tmp_path, 'prog.lox', 'fun sq(x) { return x * x; }\nprint sq(7);\n')
    main(['--emit-ast', script])
    out_path = capsys.readouterr().out.strip()
    assert out_path.endswith('prog.lox.ast')
    with open(out_path, 'r', encoding='utf-8') as f:
        assert f.read().splitlines() == [
            '(fun sq (x) (return (* x x)))',
            '(print (call sq 7))',
        ]
    assert run_cli(['--ast', out_path]) == 0
    assert capsys.readouterr().out.strip() == '49'


def test_emit_ast_with_syntax_error_exits_65(tmp_path, capsys):
    script = write(tmp_path, 'bad.lox', 'print (1;')
    assert run_cli(['--emit-ast', script]) == 65
    assert not (tmp_path / 'bad.lox.ast').exists()


def test_malformed_ast_dump_exits_65(tmp_path, capsys):
    dump = write(tmp_path, 'bad.ast', '(print 1')
    assert run_cli(['--ast', dump]) == 65
    assert capsys.readouterr().err.startswith('[line')


def test_repl_keeps_state_and_survives_errors(monkeypatch, capsys):
    lines = iter([
        'var x = 40;',
        'x + ;',
        'print undefinedThing;',
        'x + 2;',
    ])

    def fake_input(prompt=''):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr(builtins, 'input', fake_input)
    assert run_cli([]) == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == '42'
    assert "Expect expression." in captured.err
    assert "Undefined variable 'undefinedThing'." in captured.err


def test_debug_trace_written(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    script = write(tmp_path, 'trace.lox', 'var a = 1; { print a; }')
    assert run_cli(['-vvv', script]) == 0
    trace = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'execute VarDecl' in trace
    assert 'declare a: number = 1' in trace
    assert capsys.readouterr().out.strip() == '1'


def test_script_that_is_not_utf8_exits_66(tmp_path, capsys):
    script = tmp_path / 'latin.lox'
    script.write_bytes(b'print "\xff";')
    assert run_cli([str(script)]) == 66
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.startswith('Error: cannot read')
    assert 'not valid UTF-8' in captured.err


def test_ast_dump_that_is_not_utf8_exits_66(tmp_path, capsys):
    dump = tmp_path / 'latin.ast'
    dump.write_bytes(b'(print "\xff")')
    assert run_cli(['--ast', str(dump)]) == 66


def test_deep_recursion_from_the_command_line(tmp_path, capsys):
    script = write(tmp_path, 'deep.lox', 'fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); }\nprint count(500);')
    assert run_cli([script]) == 0
    assert capsys.readouterr().out.strip() == '500'


def test_stack_overflow_exits_70(tmp_path, capsys):
    script = write(tmp_path, 'loop.lox', 'fun f() { f(); }\nf();')
    assert run_cli([script]) == 70
    assert capsys.readouterr().err.strip() == 'Stack overflow.'
