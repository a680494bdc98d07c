from typing import List

from sepia.objects import ErrorVal, ReturnValue


class SepiaError(Exception):
    """Exception type used to propagate Sepia runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"SepiaError: {err.message}")
        self.err = err


class ParseFailure(Exception):
    """Raised when source with parse errors is handed to the interpreter."""
    def __init__(self, errors: List[str]):
        super().__init__('parse failed:\n' + '\n'.join(f"\t{e}" for e in errors))
        self.errors = errors


def runtime_error(message: str) -> SepiaError:
    return SepiaError(ErrorVal(message))


class ReturnSignal(Exception):
    """Carries a `return` out of an expression position to the enclosing call."""
    def __init__(self, value: ReturnValue):
        super().__init__('return')
        self.value = value
