"""Arrow-key picker for interactive terminals."""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class SelectorOption[T]:
    value: T
    label: str
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class SelectorResult[T]:
    action: Literal["select", "cancel"]
    value: T | None
    index: int


Key = Literal["up", "down", "enter", "cancel", "other"]


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _color_enabled() -> bool:
    if not is_interactive_terminal():
        return False
    if os.getenv("NO_COLOR") is not None:
        return False
    return os.getenv("TERM", "").lower() != "dumb"


def _paint(text: str, *codes: str) -> str:
    if not _color_enabled() or not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _clear() -> None:
    sys.stdout.write("\x1b[2J\x1b[H")


def _decode_key(ch: str) -> Key:
    if ch in ("\r", "\n"):
        return "enter"
    if ch in ("q", "Q", "\x03"):
        return "cancel"
    return "other"


def _read_key() -> Key:
    if os.name == "nt":
        import msvcrt

        ch = msvcrt.getwch()
        if ch in ("\x00", "\xe0"):
            ch2 = msvcrt.getwch()
            if ch2 == "H":
                return "up"
            if ch2 == "P":
                return "down"
            return "other"
        return _decode_key(ch)

    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = sys.stdin.read(1)
        if ch == "\x1b":
            if sys.stdin.read(1) == "[":
                c3 = sys.stdin.read(1)
                if c3 == "A":
                    return "up"
                if c3 == "B":
                    return "down"
            return "cancel"
        return _decode_key(ch)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width <= 3:
        return text[:width]
    return text[: width - 3] + "..."


def _pad(text: str, width: int) -> str:
    return _truncate(text, width).ljust(width)


def _cols() -> int:
    return max(60, min(120, shutil.get_terminal_size((100, 30)).columns))


def _line(widths: list[int]) -> str:
    return "+" + "+".join("-" * (w + 2) for w in widths) + "+"


def _row(cells: list[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def render_rows(labels: list[tuple[str, str]], index: int, *, cols: int) -> list[str]:
    """Plain (uncolored) table lines; the selected row is marked with ``>>``."""
    idx_w = 4
    option_w = max(16, min(36, int(cols * 0.35)))
    detail_w = max(16, cols - (idx_w + option_w + 10))
    widths = [idx_w, option_w, detail_w]

    header = [_pad("Sel", idx_w), _pad("Option", option_w), _pad("Details", detail_w)]
    lines = [_line(widths), _row(header), _line(widths)]
    for i, (label, detail) in enumerate(labels):
        marker = f">>{i + 1:02d}" if i == index else f"  {i + 1:02d}"
        cells = [_pad(marker, idx_w), _pad(label.strip(), option_w), _pad(detail.strip(), detail_w)]
        lines.append(_row(cells))
    lines.append(_line(widths))
    return lines


def _render(
    *, title: str, subtitle: str | None, labels: list[tuple[str, str]], index: int
) -> None:
    _clear()
    print(_paint(title, "1", "96"))
    if subtitle is not None:
        print(_paint(subtitle, "2", "37"))
    print()

    for n, line in enumerate(render_rows(labels, index, cols=_cols())):
        # header rows are 0..2; the selected option sits at index + 3
        if n == index + 3:
            print(_paint(line, "1", "30", "46"))
        elif n == 1:
            print(_paint(line, "1", "95"))
        else:
            print(line)

    print()
    print(_paint("Keys:", "1", "96") + " Up/Down + Enter, " + _paint("q", "1", "97") + ": cancel")
    sys.stdout.flush()


def select_one[T](
    *,
    title: str,
    options: list[SelectorOption[T]],
    subtitle: str | None = None,
    initial_index: int = 0,
) -> SelectorResult[T]:
    if not options:
        raise ValueError("selector requires at least one option")
    if not is_interactive_terminal():
        raise RuntimeError("interactive selector requires a TTY")

    labels = [(o.label, o.detail or "") for o in options]
    idx = max(0, min(initial_index, len(options) - 1))

    while True:
        _render(title=title, subtitle=subtitle, labels=labels, index=idx)
        key = _read_key()

        if key == "up":
            idx = (idx - 1) % len(options)
        elif key == "down":
            idx = (idx + 1) % len(options)
        elif key == "enter":
            return SelectorResult(action="select", value=options[idx].value, index=idx)
        elif key == "cancel":
            return SelectorResult(action="cancel", value=None, index=idx)
