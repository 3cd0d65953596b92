from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jam.domain.models.career import (
    PHASE_FINISHED,
    PHASE_IN_PROGRESS,
    PHASE_PLANNING,
    PHASE_READY,
    PHASE_SEASON_OVER,
)
from jam.domain.models.song import GENRES, THEMES
from jam.presentation.menu_controls import arrow_menu, clear_screen, prompt_text


_CONSOLE = Console()
_BORDER_LOOP = "magenta"
_BORDER_RELEASE = "green"
_BORDER_CALENDAR = "cyan"
_BORDER_LEDGER = "yellow"
_BORDER_WARN = "red"

_TRAINING_OPTIONS = (
    ("practice", "Practice (vocals)"),
    ("write", "Write (writing)"),
    ("perform", "Rehearse (stage)"),
)


def _prompt_continue(message: str = "Press ENTER to continue...") -> None:
    if _CONSOLE is not None:
        _CONSOLE.input(f"[dim]{message}[/dim]")
    else:
        input(message)
    clear_screen()


def _render_message_panel(title: str, lines: list[str], *, border_style: str = _BORDER_LOOP) -> None:
    rows = [str(line) for line in lines if str(line).strip()]
    if _CONSOLE is not None:
        _CONSOLE.print(
            Panel.fit(
                "\n".join(rows) if rows else "No updates.",
                title=f"[bold]{title}[/bold]",
                border_style=border_style,
            )
        )
        return
    print(f"=== {title} ===")
    for row in rows:
        print(row)


def _dice_line(view) -> str:
    parts = []
    for die in view.dice:
        rolled = f"{die.value}" if die.value is not None else "-"
        parts.append(f"{die.skill} d{die.faces}:{rolled}")
    return "  ".join(parts)


def _render_header(view) -> None:
    concept = f"'{view.song_name or 'Untitled'}' {view.genre} / {view.theme}" if view.concept_locked else "not chosen"
    week_label = f"{min(view.week, view.season_length)}/{view.season_length}"
    gains = ", ".join(f"{name} +{value:.2f}" for name, value in view.week_gains.items() if value)
    event_lines = [f"{event.title}: {event.short}" for event in view.events]
    if _CONSOLE is not None:
        header = Table.grid(padding=(0, 1))
        header.add_column(style="bold magenta", justify="right")
        header.add_column(style="white")
        header.add_row("Performer", view.performer_name)
        header.add_row("Week", week_label)
        header.add_row("Money", f"£{view.money}")
        header.add_row("Fans", str(view.fans))
        header.add_row("Stats", f"Vocals {view.vocals:.2f}  Writing {view.writing:.2f}  Stage {view.stage:.2f}")
        if view.scoring_mode == "dice":
            header.add_row("Dice", _dice_line(view))
        header.add_row("Days", f"{view.days_left} left, gigs {view.gigs_this_week}/{view.max_gigs}")
        header.add_row("Song", concept)
        if view.concept_locked:
            header.add_row("Pairing", view.pairing_hint)
        if gains:
            header.add_row("This week", gains)
        if event_lines:
            header.add_row("Calendar", "\n".join(event_lines))
        if view.effect_summary:
            header.add_row("Effects", view.effect_summary)
        _CONSOLE.print(Panel.fit(header, title="[bold magenta]Performer Jam[/bold magenta]", border_style=_BORDER_LOOP))
        return

    print("=== Performer Jam ===")
    print(f"{view.performer_name} | Week {week_label} | £{view.money} | Fans {view.fans}")
    print(f"Vocals {view.vocals:.2f} | Writing {view.writing:.2f} | Stage {view.stage:.2f}")
    print(f"Days left {view.days_left} | Gigs {view.gigs_this_week}/{view.max_gigs} | Song {concept}")
    for line in event_lines:
        print(f"- {line}")


def render_release(release) -> None:
    lines = [
        f"[bold]{release.song_name}[/bold] ({release.genre} / {release.theme}) at {release.venue}",
        f"Score {release.score:.0f}  Grade {release.grade}  Chart #{release.chart_pos}",
        f"Money £{release.money_gain}  Fans +{release.fans_gain}",
    ]
    if release.review:
        lines.append(f"Critics: {release.review}")
    if release.feedback:
        lines.append("")
        lines.extend(f"Tip: {tip}" for tip in release.feedback)
    if release.fan_comments:
        lines.append("")
        lines.extend(f"Fan: {comment}" for comment in release.fan_comments)
    if _CONSOLE is None:
        lines = [line.replace("[bold]", "").replace("[/bold]", "") for line in lines]
    _render_message_panel("Release Results", lines, border_style=_BORDER_RELEASE)


def _show_result(title: str, result, *, journal=None) -> None:
    lines = list(result.messages or [])
    if journal is not None:
        lines.extend(journal.drain())
    _render_message_panel(title, lines, border_style=_BORDER_LOOP if result.accepted else _BORDER_WARN)


def _choose_concept(service) -> None:
    genre_idx = arrow_menu("Pick a Genre", list(GENRES))
    if genre_idx < 0:
        return
    theme_idx = arrow_menu("Pick a Theme", list(THEMES))
    if theme_idx < 0:
        return
    name = prompt_text("Song name (optional)")
    result = service.choose_concept_intent(GENRES[genre_idx], THEMES[theme_idx], name)
    clear_screen()
    _show_result("Song Concept", result, journal=service.journal)
    _prompt_continue()


def _venue_labels(options) -> list[str]:
    labels = []
    for option in options:
        if option.locked:
            labels.append(f"{option.name} (locked: needs {option.fan_requirement} fans)")
        else:
            labels.append(
                f"{option.name} - cost £{option.cost}, break-even {option.break_even}, "
                f"risk {option.risk}, turnout {option.turnout}"
            )
    return labels


def _perform_release(service) -> None:
    options = service.venue_options()
    forecast = options[0].forecast_score if options else 0.0
    choice = arrow_menu("Choose a Venue", _venue_labels(options), footer_hint=f"Forecast score about {forecast:.0f}")
    if choice < 0:
        return
    clear_screen()
    _render_message_panel("On Stage", [f"Taking the stage at {options[choice].name}..."])
    result = service.perform_release_intent(options[choice].key)
    clear_screen()
    if not result.accepted:
        _show_result("Venue", result, journal=service.journal)
        _prompt_continue()
        return
    view = service.get_career_view()
    if view.last_release is not None:
        render_release(view.last_release)
    _show_result("Week Wrap-up", result, journal=service.journal)
    _prompt_continue()


def _book_gig(service) -> None:
    gigs = service.gig_options()
    if not gigs:
        _render_message_panel("Gigs", ["Release a song first; gigs replay past releases."], border_style=_BORDER_WARN)
        _prompt_continue()
        return
    labels = [
        f"{gig.song_name} (wk {gig.release_week}, {gig.grade}) - payout x{gig.decay:.2f}"
        for gig in gigs
    ]
    song_idx = arrow_menu("Play Which Song?", labels, footer_hint="Uses one day. Max 3 gigs per week.")
    if song_idx < 0:
        return
    venues = service.venue_options()
    venue_idx = arrow_menu("Gig Venue", _venue_labels(venues))
    if venue_idx < 0:
        return
    result = service.book_gig_intent(gigs[song_idx].ref, venues[venue_idx].key)
    clear_screen()
    _show_result("Gig", result, journal=service.journal)
    _prompt_continue()


def _resolve_event(service, event) -> None:
    choice = arrow_menu(event.title, list(event.choices), footer_hint=event.details)
    if choice < 0:
        return
    result = service.resolve_event_choice_intent(event.id, choice)
    clear_screen()
    _show_result(event.title, result, journal=service.journal)
    _prompt_continue()


def _render_calendar(service, week: int) -> None:
    upcoming = [event for event in service.list_calendar_views() if event.week >= week][:8]
    if _CONSOLE is not None:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Week", justify="right")
        table.add_column("Event")
        table.add_column("Details")
        table.add_column("Effect")
        for event in upcoming:
            table.add_row(str(event.week), event.title, event.details, event.effect_summary or "-")
        _CONSOLE.print(Panel.fit(table, title="[bold cyan]Season Calendar[/bold cyan]", border_style=_BORDER_CALENDAR))
    else:
        print("=== Season Calendar ===")
        for event in upcoming:
            print(f"Week {event.week}: {event.title} - {event.details}")
    _prompt_continue()


def _render_ledger(service) -> None:
    summary = service.career_summary()
    releases = service.list_release_views()
    lines = [
        f"Releases: {summary.total_releases}   Gigs: {summary.total_gigs}",
        f"Earned from music: £{summary.total_money}",
        f"Best grade: {summary.best_grade or '-'}   Best chart: {('#' + str(summary.best_chart_pos)) if summary.best_chart_pos else '-'}",
    ]
    _render_message_panel("Career Ledger", lines, border_style=_BORDER_LEDGER)
    if releases and _CONSOLE is not None:
        table = Table(show_header=True, header_style="bold yellow")
        table.add_column("Wk", justify="right")
        table.add_column("Song")
        table.add_column("Grade")
        table.add_column("Chart", justify="right")
        table.add_column("£", justify="right")
        table.add_column("Fans", justify="right")
        table.add_column("Gigs", justify="right")
        for release in releases:
            table.add_row(
                str(release.week),
                release.song_name,
                release.grade,
                f"#{release.chart_pos}",
                str(release.money_gain + release.gig_money),
                str(release.fans_gain + release.gig_fans),
                str(release.gig_count),
            )
        _CONSOLE.print(table)
    elif releases:
        for release in releases:
            print(f"Wk {release.week}: {release.song_name} {release.grade} #{release.chart_pos}")
    _prompt_continue()


def _phase_actions(view) -> list[tuple[str, str]]:
    actions: list[tuple[str, str]] = []
    if view.phase == PHASE_PLANNING:
        actions.append(("concept", "Choose Song Concept"))
    elif view.phase == PHASE_IN_PROGRESS:
        actions.extend(_TRAINING_OPTIONS)
        actions.append(("gig", "Play a Gig"))
    elif view.phase == PHASE_FINISHED:
        actions.append(("finish", "Finish Song"))
    elif view.phase == PHASE_READY:
        actions.append(("venue", "Choose Venue & Perform"))
    elif view.phase == PHASE_SEASON_OVER:
        actions.append(("restart", "Start a New Season"))
    for event in view.events:
        if event.choices and not event.resolved:
            actions.append((f"event:{event.id}", f"Decide: {event.title}"))
    actions.append(("calendar", "Season Calendar"))
    actions.append(("ledger", "Career Ledger"))
    actions.append(("quit", "Save & Return to Menu"))
    return actions


def run_career_loop(service) -> None:
    while True:
        view = service.get_career_view()
        clear_screen()
        _render_header(view)
        if view.phase == PHASE_SEASON_OVER:
            _render_message_panel("Season Over", ["The season has ended. Check your ledger or start again."])

        actions = _phase_actions(view)
        choice = arrow_menu(f"Week {min(view.week, view.season_length)}", [label for _, label in actions])
        if choice < 0:
            return
        key = actions[choice][0]

        if key == "quit":
            return
        if key == "concept":
            _choose_concept(service)
        elif key in {"practice", "write", "perform"}:
            result = service.instruct_intent(key)
            clear_screen()
            _show_result("Training", result, journal=service.journal)
            _prompt_continue()
        elif key == "gig":
            _book_gig(service)
        elif key == "finish":
            result = service.finish_song_intent()
            clear_screen()
            _show_result("Studio", result, journal=service.journal)
            _prompt_continue()
        elif key == "venue":
            _perform_release(service)
        elif key == "restart":
            result = service.restart_intent()
            clear_screen()
            _show_result("New Season", result, journal=service.journal)
            _prompt_continue()
        elif key.startswith("event:"):
            event_id = key.split(":", 1)[1]
            event = next((row for row in view.events if row.id == event_id), None)
            if event is not None:
                _resolve_event(service, event)
        elif key == "calendar":
            clear_screen()
            _render_calendar(service, view.week)
        elif key == "ledger":
            clear_screen()
            _render_ledger(service)
