"""Framers that cut a raw byte stream into messages.

Exactly one policy is active per session, chosen from SplitterOptions in
priority order: delimiter, regex, inter-byte timeout.
"""

import re

from ..errors import ConfigurationError
from ..models import SplitterOptions
from ..scheduling import Scheduler, start_timer
from .base import Framer
from .delimiter import DelimiterFramer
from .interbyte import InterByteTimeoutFramer
from .regex import RegexFramer


def create_framer(splitter: SplitterOptions, scheduler: Scheduler = start_timer) -> Framer:
    """Build the framer selected by ``splitter``.

    Raises:
        ConfigurationError: if no policy is set or the policy is invalid
    """
    try:
        if splitter.delimiter is not None:
            return DelimiterFramer(splitter.delimiter,
                                   include_delimiter=splitter.include_delimiter)
        if splitter.regex is not None:
            return RegexFramer(splitter.regex)
        if splitter.timeout is not None:
            return InterByteTimeoutFramer(int(splitter.timeout), scheduler=scheduler)
    except (ValueError, TypeError, re.error) as e:
        raise ConfigurationError(f"Invalid splitter {splitter}: {e}") from e
    raise ConfigurationError(
        "No framing policy: set one of splitter.delimiter, splitter.regex "
        "or splitter.timeout")


__all__ = [
    "Framer",
    "DelimiterFramer",
    "RegexFramer",
    "InterByteTimeoutFramer",
    "create_framer",
]
