import pytest

from plox import run_program
from plox.ast import ExprStmt, Variable
from plox.environment import Environment
from plox.errors import ErrorReporter, LoxRuntimeError
from plox.interpreter import Interpreter
from plox.lox import Lox
from plox.tokens import Token, TokenType
from plox.types import is_equal, is_truthy, stringify


def output_of(source, capsys):
    run_program(source)
    return capsys.readouterr().out.strip().splitlines()


def runtime_error_of(source, capsys):
    lox = run_program(source)
    assert lox.reporter.had_runtime_error
    assert not lox.reporter.had_error
    return capsys.readouterr().err.strip()


def test_arithmetic_and_display(capsys):
    assert output_of('print 1 + 1; print 10 / 4; print -3 * 2; print "a" + "b";', capsys) == [
        '2', '2.5', '-6', 'ab',
    ]


def test_truthiness(capsys):
    source = '''
    if (0) print "zero"; else print "no";
    if ("") print "empty"; else print "no";
    if (nil) print "nil"; else print "falsey";
    print !false;
    '''
    assert output_of(source, capsys) == ['zero', 'empty', 'falsey', 'true']


def test_equality_never_crosses_types(capsys):
    source = 'print nil == nil; print 1 == "1"; print true == 1; print "a" != "a"; print 2 == 2;'
    assert output_of(source, capsys) == ['true', 'false', 'false', 'false', 'true']


def test_logical_operators_return_operands(capsys):
    source = 'print nil or "default"; print 1 and 2; print false and undefined;'
    assert output_of(source, capsys) == ['default', '2', 'false']


@pytest.mark.parametrize('source, message', [
    ('print "a" - 1;', "Left operand of '-' must be a number."),
    ('print 1 + true;', "Right operand of '+' must be a number."),
    ('print "a" + 1;', "Right operand of '+' must be a string."),
    ('print nil + 1;', "Left operand of '+' must be a number or a string."),
    ('print -"x";', "Operand of '-' must be a number."),
    ('print 1 < "2";', "Right operand of '<' must be a number."),
])
def test_type_errors_name_operator_and_side(source, message, capsys):
    assert runtime_error_of(source, capsys) == f"{message}\n[line 1]"


def test_runtime_error_reports_its_line(capsys):
    err = runtime_error_of('var a = 1;\n\nprint a * nil;', capsys)
    assert err.endswith('[line 3]')


def test_undefined_global_read_and_assignment(capsys):
    assert runtime_error_of('print missing;', capsys) == "Undefined variable 'missing'.\n[line 1]"
    assert runtime_error_of('missing = 1;', capsys) == "Undefined variable 'missing'.\n[line 1]"


def test_uninitialized_variable_is_nil(capsys):
    assert output_of('var a; print a;', capsys) == ['nil']


def test_runtime_error_aborts_remaining_statements(capsys):
    lox = run_program('print 1; print -nil; print 2;')
    captured = capsys.readouterr()
    assert captured.out.strip() == '1'
    assert lox.reporter.had_runtime_error


def test_closures_share_frames(capsys):
    source = '''
    fun pair() {
      var n = 0;
      fun inc() { n = n + 1; }
      fun get() { return n; }
      inc();
      inc();
      return get;
    }
    print pair()();
    '''
    assert output_of(source, capsys) == ['2']


def test_closure_sees_later_assignment(capsys):
    source = '''
    var f;
    {
      var x = "before";
      fun show() { print x; }
      f = show;
      x = "after";
    }
    f();
    '''
    assert output_of(source, capsys) == ['after']


def test_function_without_return_yields_nil(capsys):
    assert output_of('fun f() { 1; } print f(); fun g() { return; } print g();', capsys) == ['nil', 'nil']


def test_return_unwinds_loops_and_blocks(capsys):
    source = '''
    fun find() {
      for (var i = 0; i < 10; i = i + 1) {
        { if (i == 4) return i; }
      }
      return -1;
    }
    print find();
    print find();
    '''
    assert output_of(source, capsys) == ['4', '4']


@pytest.mark.parametrize('call', ['add(1)', 'add(1, 2, 3)'])
def test_arity_mismatch(call, capsys):
    err = runtime_error_of(f'fun add(a, b) {{ return a + b; }}\nprint {call};', capsys)
    expected = 'Expected 2 arguments but got 1.' if call == 'add(1)' else 'Expected 2 arguments but got 3.'
    assert err == f"{expected}\n[line 2]"


def test_calling_non_callable(capsys):
    assert runtime_error_of('"text"();', capsys) == 'Can only call functions and classes.\n[line 1]'


def test_clock_is_native(capsys):
    assert output_of('print clock; print clock() > 0;', capsys) == ['<native fn>', 'true']


def test_function_display(capsys):
    assert output_of('fun f() {} print f;', capsys) == ['<fn f>']


def test_fields_and_unset_field(capsys):
    lox = run_program('class C { } var c = C(); c.x = 5; print c.x; print c.y;')
    captured = capsys.readouterr()
    assert captured.out.strip() == '5'
    assert captured.err.strip() == "Undefined property 'y'.\n[line 1]"
    assert lox.reporter.had_runtime_error


def test_properties_only_on_instances(capsys):
    assert runtime_error_of('var a = 1; print a.b;', capsys) == 'Only instances have properties.\n[line 1]'
    assert runtime_error_of('var a = 1; a.b = 2;', capsys) == 'Only instances have fields.\n[line 1]'


def test_fields_shadow_methods(capsys):
    source = '''
    class A { m() { return "method"; } }
    var a = A();
    print a.m();
    a.m = "field";
    print a.m;
    '''
    assert output_of(source, capsys) == ['method', 'field']


def test_binding_same_method_to_two_instances(capsys):
    source = '''
    class Box {
      read() { return this.value; }
    }
    var one = Box();
    one.value = 1;
    var two = Box();
    two.value = 2;
    var readOne = one.read;
    var readTwo = two.read;
    one.value = 10;
    print readOne();
    print readTwo();
    '''
    assert output_of(source, capsys) == ['10', '2']


def test_method_can_name_its_own_class(capsys):
    source = '''
    class Factory {
      make() { return Factory(); }
    }
    print Factory().make();
    '''
    assert output_of(source, capsys) == ['Factory instance']


def test_class_arity_is_zero(capsys):
    assert runtime_error_of('class C {} C(1);', capsys) == 'Expected 0 arguments but got 1.\n[line 1]'


def test_division_by_zero_follows_ieee(capsys):
    assert output_of('print 1 / 0; print -1 / 0; print 0 / 0;', capsys) == ['Infinity', '-Infinity', 'NaN']


def test_globals_persist_within_one_session(capsys):
    lox = Lox()
    lox.run('var greeting = "hi";')
    lox.run('fun shout() { return greeting + "!"; }')
    lox.run('print shout();')
    assert capsys.readouterr().out.strip() == 'hi!'


def test_repl_mode_echoes_expression_values(capsys):
    lox = Lox()
    lox.run('var a = 3;', repl=True)
    lox.run('a * 2;', repl=True)
    lox.run('print a;', repl=True)
    assert capsys.readouterr().out.strip().splitlines() == ['6', '3']


def test_static_errors_prevent_execution(capsys):
    lox = run_program('print "first"; { var a = a; }')
    captured = capsys.readouterr()
    assert captured.out == ''
    assert lox.reporter.had_error


def test_interpreter_restores_environment_after_error():
    interpreter = Interpreter(ErrorReporter())
    name = Token(TokenType.IDENTIFIER, 'nothing', None, 1)
    with pytest.raises(LoxRuntimeError):
        interpreter.execute_block([ExprStmt(Variable(name))], Environment(interpreter.globals))
    assert interpreter.environment is interpreter.globals


def test_value_helpers():
    assert not is_truthy(None)
    assert not is_truthy(False)
    assert is_truthy(0.0)
    assert is_equal(None, None)
    assert not is_equal(None, False)
    assert not is_equal(1.0, True)
    assert stringify(3.0) == '3'
    assert stringify(-0.5) == '-0.5'
    assert stringify(None) == 'nil'
    assert stringify(True) == 'true'


def test_deep_recursion_completes(capsys):
    source = 'fun count(n) { if (n == 0) return 0; return 1 + count(n - 1); } print count(500);'
    assert output_of(source, capsys) == ['500']


def test_unbounded_recursion_is_a_runtime_error(capsys):
    source = 'fun forever(n) { return forever(n + 1); } print "before"; forever(0); print "after";'
    lox = run_program(source)
    captured = capsys.readouterr()
    assert captured.out.strip() == 'before'
    assert captured.err.strip() == 'Stack overflow.'
    assert lox.reporter.had_runtime_error
    assert lox.interpreter.environment is lox.interpreter.globals


def test_negative_zero_keeps_its_sign(capsys):
    assert output_of('print -0; print 0 * -1; print -0 == 0;', capsys) == ['-0', '-0', 'true']
