from typing import Dict, Optional, Tuple

from sepia.objects import Value


class Environment:
    """Represents a scope environment mapping identifiers to values.

    Scopes form a chain through `parent`. Function values hold a
    reference to the scope they were created in, so a scope stays alive
    for as long as any closure over it does.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Value] = {}

    @classmethod
    def new_root(cls) -> 'Environment':
        return cls()

    def new_child(self) -> 'Environment':
        return Environment(parent=self)

    def get(self, name: str) -> Tuple[Optional[Value], bool]:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env.values[name], True
            env = env.parent
        return None, False

    def set(self, name: str, value: Value) -> Value:
        # Always binds locally, shadowing any outer binding
        self.values[name] = value
        return value

    def update(self, name: str, value: Value) -> bool:
        """Rebind `name` in the nearest scope that already holds it.

        Returns False, leaving every scope untouched, when no scope in the
        chain defines `name`.
        """
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return True
            env = env.parent
        return False

    def __contains__(self, name: str) -> bool:
        return self.get(name)[1]
