"""
Structured description of an external command
"""

from dataclasses import dataclass
import shlex


@dataclass(frozen=True)
class Command:
    """
    A program and its ordered arguments.

    Commands are spawned directly from ``argv``; ``render()`` exists only
    for display and dry-run output.
    """
    program: str
    args: tuple[str, ...] = ()

    @classmethod
    def of(cls, program: str, *args) -> "Command":
        return cls(program, tuple(str(a) for a in args))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def render(self) -> str:
        """Shell-quoted single line, suitable for copy and paste"""
        return shlex.join(self.argv)

    def __str__(self) -> str:
        return self.render()
