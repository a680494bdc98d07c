from sepia import token
from sepia.lexer import Lexer, tokenize


def kinds_and_literals(source):
    return [(t.type, t.literal) for t in tokenize(source)]


def test_next_token_covers_every_kind():
    source = '''value five = 5;
value add = fn(x, y) -> x + y; end;
!-/*5 < 10 > 5 <= >= == != && || and or
if (true) -> return false; else -> end
[1, "two"] {"k": 3}
x += 1; x -= 1; x *= 2; x /= 2; ++x; --x;
update five = 6;
'''
    expected = [
        (token.VALUE, 'value'), (token.IDENT, 'five'), (token.ASSIGN, '='), (token.INT, '5'), (token.SEMICOLON, ';'),
        (token.VALUE, 'value'), (token.IDENT, 'add'), (token.ASSIGN, '='), (token.FUNCTION, 'fn'),
        (token.LPAREN, '('), (token.IDENT, 'x'), (token.COMMA, ','), (token.IDENT, 'y'), (token.RPAREN, ')'),
        (token.OPENBLOCK, '->'), (token.IDENT, 'x'), (token.PLUS, '+'), (token.IDENT, 'y'), (token.SEMICOLON, ';'),
        (token.CLOSEBLOCK, 'end'), (token.SEMICOLON, ';'),
        (token.BANG, '!'), (token.MINUS, '-'), (token.SLASH, '/'), (token.ASTERISK, '*'), (token.INT, '5'),
        (token.LT, '<'), (token.INT, '10'), (token.GT, '>'), (token.INT, '5'),
        (token.LTEQ, '<='), (token.GTEQ, '>='), (token.EQ, '=='), (token.NOT_EQ, '!='),
        (token.AND, '&&'), (token.OR, '||'), (token.AND, 'and'), (token.OR, 'or'),
        (token.IF, 'if'), (token.LPAREN, '('), (token.TRUE, 'true'), (token.RPAREN, ')'), (token.OPENBLOCK, '->'),
        (token.RETURN, 'return'), (token.FALSE, 'false'), (token.SEMICOLON, ';'),
        (token.ELSE, 'else'), (token.OPENBLOCK, '->'), (token.CLOSEBLOCK, 'end'),
        (token.LBRACKET, '['), (token.INT, '1'), (token.COMMA, ','), (token.STRING, 'two'), (token.RBRACKET, ']'),
        (token.LBRACE, '{'), (token.STRING, 'k'), (token.COLON, ':'), (token.INT, '3'), (token.RBRACE, '}'),
        (token.IDENT, 'x'), (token.PLUSEQ, '+='), (token.INT, '1'), (token.SEMICOLON, ';'),
        (token.IDENT, 'x'), (token.MINUSEQ, '-='), (token.INT, '1'), (token.SEMICOLON, ';'),
        (token.IDENT, 'x'), (token.MULEQ, '*='), (token.INT, '2'), (token.SEMICOLON, ';'),
        (token.IDENT, 'x'), (token.SLASHEQ, '/='), (token.INT, '2'), (token.SEMICOLON, ';'),
        (token.INCREMENT, '++'), (token.IDENT, 'x'), (token.SEMICOLON, ';'),
        (token.DECREMENT, '--'), (token.IDENT, 'x'), (token.SEMICOLON, ';'),
        (token.UPDATE, 'update'), (token.IDENT, 'five'), (token.ASSIGN, '='), (token.INT, '6'), (token.SEMICOLON, ';'),
        (token.EOF, ''),
    ]
    assert kinds_and_literals(source) == expected


def test_lone_plus_and_greater_than_get_their_own_kinds():
    assert kinds_and_literals('1 + 2 > 3') == [
        (token.INT, '1'), (token.PLUS, '+'), (token.INT, '2'),
        (token.GT, '>'), (token.INT, '3'), (token.EOF, ''),
    ]


def test_single_pipe_and_ampersand_are_illegal():
    assert kinds_and_literals('a | b & c') == [
        (token.IDENT, 'a'), (token.ILLEGAL, '|'), (token.IDENT, 'b'),
        (token.ILLEGAL, '&'), (token.IDENT, 'c'), (token.EOF, ''),
    ]


def test_unknown_character_is_illegal():
    assert kinds_and_literals('@')[0] == (token.ILLEGAL, '@')


def test_comments_are_skipped():
    source = '# leading comment\nvalue x = 1; # trailing\n# another\n  # indented\nx'
    assert kinds_and_literals(source) == [
        (token.VALUE, 'value'), (token.IDENT, 'x'), (token.ASSIGN, '='), (token.INT, '1'),
        (token.SEMICOLON, ';'), (token.IDENT, 'x'), (token.EOF, ''),
    ]


def test_comment_at_end_of_input():
    assert kinds_and_literals('1 # no newline') == [(token.INT, '1'), (token.EOF, '')]


def test_strings_are_taken_verbatim():
    assert kinds_and_literals('"hello world" "a\\nb" ""') == [
        (token.STRING, 'hello world'), (token.STRING, 'a\\nb'), (token.STRING, ''), (token.EOF, ''),
    ]


def test_unterminated_string_runs_to_end_of_input():
    assert kinds_and_literals('"abc') == [(token.STRING, 'abc'), (token.EOF, '')]


def test_identifiers_are_letters_and_underscores():
    assert kinds_and_literals('foo_bar x1') == [
        (token.IDENT, 'foo_bar'), (token.IDENT, 'x'), (token.INT, '1'), (token.EOF, ''),
    ]


def test_eof_is_returned_forever():
    lexer = Lexer('x')
    assert lexer.next_token().type == token.IDENT
    for _ in range(3):
        tok = lexer.next_token()
        assert tok.type == token.EOF
        assert tok.literal == ''


def test_token_positions():
    toks = tokenize('value x = 1;\n  x -> end')
    positions = [(t.literal, t.line, t.column) for t in toks]
    assert positions == [
        ('value', 1, 1), ('x', 1, 7), ('=', 1, 9), ('1', 1, 11), (';', 1, 12),
        ('x', 2, 3), ('->', 2, 5), ('end', 2, 8), ('', 2, 11),
    ]
