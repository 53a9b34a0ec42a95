"""folioshell -- Portfolio website with a fake interactive terminal.

This package implements the server that persists login history and the
message-of-the-day, authorizes privileged ("sudo") commands, and a
terminal engine that interprets a small fixed vocabulary of commands on
top of that server.
"""

__version__ = "0.1.0"
