"""Terminal output for release runs: a rich console and a capturing fake."""

from .console import ConsoleProtocol, MockConsole, OutputRecord, RichConsole, Style

__all__ = ["ConsoleProtocol", "MockConsole", "OutputRecord", "RichConsole", "Style"]
