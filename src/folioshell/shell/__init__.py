"""Terminal engine for folioshell.

Holds the command and link registries, the interpreter, line editing,
command history, the transcript, live polling sessions and the
privilege escalation flow, plus a prompt_toolkit console front end.
"""

from folioshell.shell.interpreter import Interpreter
from folioshell.shell.terminal import Terminal

__all__ = ["Interpreter", "Terminal"]
