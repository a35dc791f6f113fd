from plox.errors import ErrorReporter
from plox.scanner import scan
from plox.tokens import TokenType


def kinds(tokens):
    return [t.type for t in tokens]


def test_operators_prefer_longest_match():
    tokens = scan('! != = == < <= > >=', ErrorReporter())
    assert kinds(tokens) == [
        TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EQUAL_EQUAL,
        TokenType.LESS, TokenType.LESS_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL,
        TokenType.EOF,
    ]


def test_numbers_are_floats_without_exponents():
    tokens = scan('12 3.25 4. 5e2', ErrorReporter())
    assert [t.literal for t in tokens if t.type == TokenType.NUMBER] == [12.0, 3.25, 4.0, 5.0]
    # '4.' leaves the dot behind, '5e2' splits into a number and an identifier
    assert kinds(tokens)[3:6] == [TokenType.DOT, TokenType.NUMBER, TokenType.IDENTIFIER]


def test_keywords_and_identifiers():
    tokens = scan('var orchid = nil; or', ErrorReporter())
    assert kinds(tokens) == [
        TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NIL,
        TokenType.SEMICOLON, TokenType.OR, TokenType.EOF,
    ]
    assert tokens[1].lexeme == 'orchid'


def test_multiline_string_counts_lines():
    tokens = scan('"one\ntwo"\nx', ErrorReporter())
    assert tokens[0].literal == 'one\ntwo'
    assert tokens[1].lexeme == 'x'
    assert tokens[1].line == 3


def test_comments_produce_no_tokens(capsys):
    reporter = ErrorReporter()
    tokens = scan('// line\n/* block\n comment */ a', reporter)
    assert kinds(tokens) == [TokenType.IDENTIFIER, TokenType.EOF]
    assert tokens[0].line == 3
    assert not reporter.had_error


def test_unterminated_string_is_reported_and_scanning_finishes(capsys):
    reporter = ErrorReporter()
    tokens = scan('print "oops', reporter)
    assert reporter.had_error
    assert kinds(tokens) == [TokenType.PRINT, TokenType.EOF]
    assert capsys.readouterr().err.strip() == '[line 1] Error: Unterminated string.'


def test_unterminated_block_comment_is_reported(capsys):
    reporter = ErrorReporter()
    tokens = scan('a /* never\nclosed', reporter)
    assert kinds(tokens) == [TokenType.IDENTIFIER, TokenType.EOF]
    assert reporter.messages == ['[line 1] Error: Unterminated block comment.']


def test_unexpected_characters_are_skipped(capsys):
    reporter = ErrorReporter()
    tokens = scan('a # b', reporter)
    assert [t.lexeme for t in tokens if t.type == TokenType.IDENTIFIER] == ['a', 'b']
    assert reporter.messages == ["[line 1] Error: Unexpected character '#'."]


def test_identifiers_are_ascii_only():
    reporter = ErrorReporter()
    tokens = scan('café', reporter)
    assert [t.lexeme for t in tokens if t.type == TokenType.IDENTIFIER] == ['caf']
    assert reporter.messages == ["[line 1] Error: Unexpected character 'é'."]
