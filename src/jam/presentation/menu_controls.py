import os
import sys
import time

from rich.console import Console
from rich.live import Live
from rich.panel import Panel

try:  # Windows-specific keyboard handling
    import msvcrt  # type: ignore
except ImportError:  # pragma: no cover - non-Windows terminals read whole lines
    msvcrt = None


_CONSOLE = Console()
_KEY_REPEAT_DEBOUNCE_SECONDS = 0.08
_INITIAL_ENTER_GUARD_SECONDS = 0.18

_NAV_KEYS = {"UP", "DOWN", "LEFT", "RIGHT", "ENTER", "ESC"}
_KEY_ALIASES = {
    "w": "UP",
    "s": "DOWN",
    "a": "LEFT",
    "d": "RIGHT",
    "": "ENTER",
    "enter": "ENTER",
    "q": "ESC",
    "esc": "ESC",
}
_WINDOWS_ARROWS = {b"H": "UP", b"P": "DOWN", b"K": "LEFT", b"M": "RIGHT"}


def clear_screen() -> None:
    os.system("cls" if os.name == "nt" else "clear")


def _read_key_windows():
    ch = msvcrt.getch()
    if ch in (b"\x00", b"\xe0"):
        return _WINDOWS_ARROWS.get(msvcrt.getch())
    if ch in (b"\r", b"\n"):
        return "ENTER"
    if ch == b"\x1b":
        return "ESC"
    try:
        return ch.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _flush_windows_input_buffer() -> None:
    if msvcrt is None:
        return
    while msvcrt.kbhit():
        msvcrt.getch()


def read_key():
    """Read one key on Windows, or one line of stdin elsewhere."""

    if msvcrt is not None:
        return _read_key_windows()
    line = sys.stdin.readline()
    if line == "":
        return None
    return line.strip()


def normalize_menu_key(key):
    if key is None or not isinstance(key, str):
        return key
    if key in _NAV_KEYS:
        return key
    lowered = key.lower().strip()
    if lowered.isdigit():
        return lowered
    return _KEY_ALIASES.get(lowered, key)


def _menu_panel(title: str, options: list[str], selected: int, footer_hint: str | None) -> Panel:
    lines: list[str] = []
    for idx, option in enumerate(options):
        if idx == selected:
            lines.append(f"[bold black on cyan] ▶ {option} [/bold black on cyan]")
        else:
            lines.append(f"[white]  {idx + 1}. {option}[/white]")
    lines.append("")
    if footer_hint:
        lines.append(f"[cyan]{footer_hint}[/cyan]")
    lines.append("[dim]Arrows or W/S to move, ENTER to pick, a number to jump, ESC/Q to go back.[/dim]")
    return Panel.fit(
        "\n".join(lines),
        title=f"[bold magenta]{title or 'Menu'}[/bold magenta]",
        border_style="magenta",
        padding=(0, 1),
    )


def _print_plain_menu(title: str, options: list[str], selected: int, footer_hint: str | None) -> None:
    print("=" * 40)
    print(f"{title:^40}")
    print("=" * 40)
    for idx, option in enumerate(options):
        prefix = ">" if idx == selected else " "
        print(f"{prefix} {idx + 1}. {option}")
    if footer_hint:
        print(footer_hint)
    print("-" * 40)


def arrow_menu(
    title: str,
    options: list[str],
    footer_hint: str | None = None,
    initial_enter_guard_seconds: float | None = None,
) -> int:
    """Show a vertical menu and return the chosen index, or -1 on ESC/end of input.

    Typing an option number picks it directly, which is what line-based
    terminals and scripted input rely on.
    """

    if not options:
        raise ValueError("arrow_menu requires at least one option")

    _flush_windows_input_buffer()
    guard = _INITIAL_ENTER_GUARD_SECONDS if initial_enter_guard_seconds is None else float(initial_enter_guard_seconds)
    opened_at = time.monotonic()
    last_nav_at = 0.0
    moved = False
    selected = 0

    def _step(key, now: float):
        nonlocal selected, last_nav_at, moved, opened_at
        if key in {"UP", "DOWN"}:
            if now - last_nav_at >= _KEY_REPEAT_DEBOUNCE_SECONDS:
                selected = (selected + (-1 if key == "UP" else 1)) % len(options)
                last_nav_at = now
                moved = True
            return None
        if isinstance(key, str) and key.isdigit():
            index = int(key) - 1
            return index if 0 <= index < len(options) else None
        if key == "ENTER":
            # Swallow an ENTER that was still buffered from the previous screen.
            if msvcrt is not None and not moved and (now - opened_at) < guard:
                opened_at = now
                return None
            return selected
        if key == "ESC" or key is None:
            return -1
        return None

    if _CONSOLE is not None and Live is not None:
        clear_screen()
        with Live(_menu_panel(title, options, selected, footer_hint), console=_CONSOLE, transient=True) as live:
            while True:
                before = selected
                result = _step(normalize_menu_key(read_key()), time.monotonic())
                if result is not None:
                    return result
                if selected != before:
                    live.update(_menu_panel(title, options, selected, footer_hint), refresh=True)

    while True:
        clear_screen()
        _print_plain_menu(title, options, selected, footer_hint)
        result = _step(normalize_menu_key(read_key()), time.monotonic())
        if result is not None:
            return result


def prompt_text(label: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    try:
        value = input(f"{label}{suffix}: ")
    except EOFError:
        return default
    return value.strip() or default


def pause(message: str = "Press ENTER to continue...") -> None:
    try:
        input(message)
    except EOFError:
        return
