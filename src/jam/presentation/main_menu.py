from rich.console import Console
from rich.panel import Panel

from jam.presentation.game_loop import run_career_loop
from jam.presentation.menu_controls import arrow_menu, clear_screen, pause, prompt_text


_CONSOLE = Console()

HELP_LINES = [
    "Each week: pick a genre, theme and song name, then spend 7 days.",
    "Practice raises vocals, Write raises writing, Rehearse raises stage.",
    "Repeating an activity in the same week gives smaller gains.",
    "Higher stats mean smaller dice; low rolls make better songs.",
    "Gigs replay an older song for money and fans (max 3 per week).",
    "Finish the song, then choose a venue. Bigger venues need more fans.",
    "Menus: arrows or W/S, ENTER to pick, a number to jump, ESC/Q to go back.",
    "Saves: JAM_DATABASE_URL for SQL, otherwise files in JAM_SAVE_DIR.",
]


def _render_panel(title: str, lines: list[str], border_style: str) -> None:
    clear_screen()
    if _CONSOLE is not None:
        _CONSOLE.print(Panel.fit("\n".join(lines), title=f"[bold]{title}[/bold]", border_style=border_style))
    else:
        print(f"=== {title} ===")
        for line in lines:
            print(line)


def main_menu(career_service) -> None:
    options = ["New Season", "Continue", "Clear Save", "Help", "Quit"]

    while True:
        has_save = career_service.has_save()
        choice_idx = arrow_menu(
            "Performer Jam",
            options,
            footer_hint="A saved season is waiting." if has_save else None,
            initial_enter_guard_seconds=0.35,
        )

        if choice_idx == 0:  # New Season
            name = prompt_text("Performer name", career_service.state.performer_name)
            result = career_service.new_season_intent(name)
            _render_panel("New Season", list(result.messages), "magenta")
            pause()
            run_career_loop(career_service)

        elif choice_idx == 1:  # Continue
            result = career_service.load_intent()
            if not result.accepted:
                _render_panel("Continue", list(result.messages), "red")
                pause()
                continue
            run_career_loop(career_service)

        elif choice_idx == 2:  # Clear Save
            confirm = arrow_menu("Delete the saved season?", ["Keep it", "Delete it"])
            if confirm == 1:
                result = career_service.clear_save_intent()
                _render_panel("Clear Save", list(result.messages), "yellow")
                pause()

        elif choice_idx == 3:  # Help
            _render_panel("How to Play", HELP_LINES, "cyan")
            pause("Press ENTER to return to the menu...")

        elif choice_idx == 4 or choice_idx == -1:  # Quit or ESC
            _render_panel("Farewell", ["See you at the next gig!"], "magenta")
            break
