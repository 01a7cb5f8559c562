"""
Operator-facing progress output for Travel Router.

Runs are usually driven over SSH from a phone, so progress is printed as short
tagged lines (``[INFO]``, ``[OK]``, ``[WARN]``, ``[ERROR]``) with one dot per
polling tick. Every line is also written to the log file.
"""

import click

from .logging_config import get_logger

logger = get_logger("travelrouter.progress")


class ProgressReporter:
    """Writes tagged progress lines through click."""

    def __init__(self, echo=click.echo, color=None):
        self.echo = echo
        self.color = color
        self._in_progress = False

    def _line(self, tag, message, fg=None, err=False):
        self._finish_progress()
        text = f"{tag} {message}" if message else tag.rstrip()
        if fg:
            text = click.style(text, fg=fg)
        self.echo(text, err=err, color=self.color)
        logger.info(f"{tag.strip()} {message}")

    def _finish_progress(self):
        if self._in_progress:
            self.echo("", color=self.color)
            self._in_progress = False

    def info(self, message=""):
        self._line("[INFO] ", message)

    def ok(self, message=""):
        self._line("[OK]   ", message, fg="green")

    def warn(self, message):
        self._line("[WARN] ", message, fg="yellow")

    def error(self, message):
        self._line("[ERROR]", message, fg="red", err=True)

    def progress(self, message):
        """Start a line that polling ticks will extend with dots."""
        self._finish_progress()
        self.echo(f"[....] {message}", nl=False, color=self.color)
        self._in_progress = True
        logger.info(f"[....] {message}")

    def tick(self, elapsed=None):
        self.echo(".", nl=False, color=self.color)

    def done(self):
        if self._in_progress:
            self.echo(" done", color=self.color)
            self._in_progress = False
