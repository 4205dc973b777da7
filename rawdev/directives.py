"""In-band special directives.

A command starting with '#' is not sent to the device. It is interpreted
locally instead:

    #pause <ms>     wait <ms> milliseconds before the next queued command
    #connect        open the transport
    #close          close the transport

Names are case-insensitive. Anything else is ignored.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

DIRECTIVE_PREFIX = "#"

PAUSE = "pause"
CONNECT = "connect"
CLOSE = "close"

_DIRECTIVE_RE = re.compile(r"#(\w+)(?: (\w+)(?:,(\w+)?)?)?")
_LEADING_INT_RE = re.compile(r"\d+")


@dataclass(frozen=True)
class Directive:
    """A parsed '#name arg1,arg2' command."""
    name: str
    args: Tuple[str, ...] = ()

    @property
    def arg(self) -> Optional[str]:
        return self.args[0] if self.args else None


def is_directive(command: str) -> bool:
    return command.startswith(DIRECTIVE_PREFIX)


def parse_directive(command: str) -> Optional[Directive]:
    """Split a directive into its lowercase name and arguments.

    Returns:
        Directive, or None if ``command`` is not a well-formed directive
    """
    match = _DIRECTIVE_RE.match(command)
    if not match:
        return None
    args = tuple(a for a in match.groups()[1:] if a is not None)
    return Directive(name=match.group(1).lower(), args=args)


def parse_pause_ms(arg: Optional[str]) -> int:
    """Leading integer of ``arg``; 0 when missing or not numeric.

    >>> parse_pause_ms("500")
    500
    >>> parse_pause_ms("250ms")
    250
    >>> parse_pause_ms(None)
    0
    """
    if not arg:
        return 0
    match = _LEADING_INT_RE.match(arg)
    return int(match.group(0)) if match else 0
