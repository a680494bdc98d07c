from pathlib import Path

from sepia.interpreter import Interpreter

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_2_fibonacci(capsys):
    with open(EXAMPLES / 'program_2.sepia', 'r', encoding='utf-8') as f:
        source = f.read()
    interp = Interpreter()
    ast = interp.parse(source)
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '610'
