"""Parsing of the text command language used by scripts and the CLI."""

import re
from typing import List, Literal, Optional, Tuple
from pydantic import BaseModel


CommandName = Literal[
    "insert", "drag", "drop", "cancel", "tap", "harvest",
    "undo", "tick", "reset", "show", "detect",
]

# name -> (argument pattern, argument count)
COMMAND_SYNTAX = {
    "insert": (r"(\d+)\s+(\d+)", 2),
    "drag": (r"(\d+)", 1),
    "drop": (r"(\d+)", 1),
    "cancel": ("", 0),
    "tap": (r"(\d+)", 1),
    "harvest": (r"(\d+)", 1),
    "undo": ("", 0),
    "tick": (r"(\d+(?:\.\d+)?)", 1),
    "reset": ("", 0),
    "show": ("", 0),
    "detect": ("", 0),
}

USAGE = {
    "insert": "insert POOL_INDEX TARGET_INDEX",
    "drag": "drag POOL_INDEX",
    "drop": "drop TARGET_INDEX",
    "tap": "tap TARGET_INDEX",
    "harvest": "harvest WORD_NUMBER",
    "tick": "tick SECONDS",
}


class Command(BaseModel):
    """A parsed command."""
    name: CommandName
    args: Tuple[float, ...] = ()
    line: Optional[int] = None

    def int_arg(self, position: int = 0) -> int:
        return int(self.args[position])


class CommandError(BaseModel):
    """A single parse error."""
    code: str
    message: str
    line: Optional[int] = None


def parse_command(text: str, line: Optional[int] = None) -> Tuple[Optional[Command], List[CommandError]]:
    """
    Parse one command line.

    Blank lines and ``#`` comments parse to no command and no error.

    Returns a tuple of (command, errors).
    """
    text = text.split("#", 1)[0].strip()
    if not text:
        return None, []

    name, _, rest = text.partition(" ")
    name = name.lower()
    if name not in COMMAND_SYNTAX:
        return None, [CommandError(
            code="UNKNOWN_COMMAND",
            message=f"Unknown command: '{name}'",
            line=line,
        )]

    pattern, count = COMMAND_SYNTAX[name]
    match = re.fullmatch(pattern, rest.strip()) if pattern else None
    if (count and match is None) or (not count and rest.strip()):
        usage = USAGE.get(name, name)
        return None, [CommandError(
            code="INVALID_ARGUMENTS",
            message=f"Invalid arguments for '{name}': '{rest.strip()}' (usage: {usage})",
            line=line,
        )]

    args = tuple(float(group) for group in match.groups()) if match else ()
    return Command(name=name, args=args, line=line), []
