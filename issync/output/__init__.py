# issync Output Module
# Console output formatting

from issync.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
