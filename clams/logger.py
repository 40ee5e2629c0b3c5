"""Minimal console logger with printf-style formatting."""

import sys


class Logger:
    """Writes informational and warning lines to stdout and errors to stderr.

    When extra arguments are given, the message is treated as a printf-style
    format string and formatted with them; otherwise it is written verbatim.
    """

    @staticmethod
    def _render(message, args):
        return message % args if args else message

    def info(self, message, *args):
        print(self._render(message, args), file=sys.stdout)

    def warn(self, message, *args):
        print(self._render(message, args), file=sys.stdout)

    def err(self, message, *args):
        print(self._render(message, args), file=sys.stderr)


_LOGGER = Logger()


def logger():
    """Return the process-wide logger."""
    return _LOGGER