"""
Compiler logging on Loguru

LOG() writes progress messages gated by the verbosity of the connected
ProgramState; WARN() reports template problems that do not stop
compilation. Both tag each line with the template being compiled, set
through template_context().

Library use is quiet: until a state is connected LOG() prints nothing,
while warnings still reach stderr.

Usage:
    from jbst.lib.log import LOG, WARN, state_connectToLogger, template_context

    state_connectToLogger(state)
    with template_context("~/views/List.jbst"):
        LOG("Tokenized 1337 characters into 96 tokens", level=3)
        WARN("Unknown JBST command <jbst:foo> dropped")
"""

import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

from loguru import logger

# ProgramState of the running pipeline, if any
_program_state: ContextVar[Optional[Any]] = ContextVar("program_state", default=None)

NO_TEMPLATE = "-"

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<magenta>{extra[template]: <24}</magenta> │ "
    "<cyan>{function}:{line}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.configure(extra={"template": NO_TEMPLATE})
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Make a ProgramState's verbosity govern LOG() and WARN() in this context.

    Args:
        state: Object with a 'verbosity' attribute (normally ProgramState)
    """
    _program_state.set(state)


def verbosity_get() -> Optional[int]:
    """Verbosity of the connected state, None when running as a library"""
    state = _program_state.get()
    if state is None:
        return None
    return getattr(state, "verbosity", 1)


@contextmanager
def template_context(file_path: str) -> Iterator[None]:
    """Tag log lines emitted inside the block with a template path"""
    with logger.contextualize(template=file_path or NO_TEMPLATE):
        yield


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log a progress message.

    Args:
        message: Text to log
        level: Verbosity needed to show it (1=normal, 2=verbose, 3=debug)
        **kwargs: Passed through to loguru (e.g. exception=True)
    """
    verbosity = verbosity_get()
    if verbosity is not None and verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str, **kwargs: Any) -> None:
    """
    Report a template problem that compilation recovers from.

    Shown at any verbosity except 0, and when no state is connected.
    """
    verbosity = verbosity_get()
    if verbosity is None or verbosity > 0:
        logger.opt(depth=1).warning(message, **kwargs)
