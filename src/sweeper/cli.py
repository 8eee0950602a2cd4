"""
Minesweeper - terminal front end.

Usage:
    sweeper play [--difficulty {beginner,intermediate,expert}]
                 [--width W --height H --mines M] [--seed S]
    sweeper show
    sweeper clear
    sweeper settings [--difficulty D] [--width W --height H --mines M]
                     [--allow-open-around] [--auto-save] [--reset]
"""
import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional

from .board import DIFFICULTIES, BoardConfig, CellAction
from .session import LAST_STATE_KEY, GameSession
from .settings import (
    CUSTOM,
    SessionSettings,
    load_settings,
    reset_settings,
    update_settings,
)
from .snapshot import Snapshot
from .storage import JsonFileStore
from .utils import format_counter, render_text


DEFAULT_STATE_DIR = Path.home() / ".sweeper"

ACTION_COMMANDS = {
    "o": CellAction.OPEN,
    "f": CellAction.FLAG,
    "c": CellAction.OPEN_AROUND,
}

HELP_TEXT = """Commands:
  o X Y   open cell at column X, row Y
  f X Y   toggle flag
  c X Y   open around a numbered cell
  r       restart with the same mines
  n       new game
  q       save and quit"""

# Settings fields set by the custom-size options
SIZE_OPTIONS = {"width": "width", "height": "height", "mines": "num_mines"}


# ============================================================================
# Command Handling
# ============================================================================

def status_line(session: GameSession) -> str:
    """Mines left, stage and seconds, as shown above the board."""
    return (
        f"[{format_counter(session.remaining_mines)}] "
        f"{session.stage.value:<8} "
        f"[{format_counter(session.timer_ms / 1000)}]"
    )


def run_command(session: GameSession, line: str) -> Optional[str]:
    """
    Execute one command line against the session.

    Returns:
        A message for the player, or None to quit.
    """
    parts = line.split()
    if not parts:
        return ""

    cmd = parts[0].lower()
    if cmd == "q":
        return None
    if cmd == "h":
        return HELP_TEXT
    if cmd == "r":
        session.restart()
        return "Restarted."
    if cmd == "n":
        session.new_game()
        return "New game."

    action = ACTION_COMMANDS.get(cmd)
    if action is None or len(parts) != 3:
        return "Unknown command, type h for help."

    try:
        x, y = int(parts[1]), int(parts[2])
    except ValueError:
        return "Coordinates must be integers."

    config = session.board.config
    if not (0 <= x < config.width and 0 <= y < config.height):
        return "Cell is off the board."

    changed = session.operate(session.board.pos_to_index(x, y), action)
    if session.board.is_won:
        return "You won!"
    if session.board.is_lost:
        return "Boom! You lost."
    return "" if changed else "Nothing happened."


# ============================================================================
# Subcommands
# ============================================================================

def _resolve_config(
    args: argparse.Namespace, settings: SessionSettings
) -> BoardConfig:
    """Board configuration from arguments, falling back to settings."""
    if args.width or args.height or args.mines:
        return BoardConfig(
            args.width or settings.width,
            args.height or settings.height,
            args.mines or settings.num_mines,
        )
    if args.difficulty:
        return DIFFICULTIES[args.difficulty]
    return settings.board_config()


def play(
    args: argparse.Namespace,
    input_fn: Callable[[str], str] = input,
) -> None:
    """Run the interactive game loop."""
    store = JsonFileStore(args.state_dir)
    settings = load_settings(store)
    session = GameSession(store, settings, seed=args.seed)

    if session.try_reload():
        print("Resumed your last game.")
    else:
        session.new_game(_resolve_config(args, settings))
    print(HELP_TEXT)

    try:
        while True:
            print()
            print(status_line(session))
            print(render_text(session.board))
            try:
                line = input_fn("> ")
            except EOFError:
                break
            message = run_command(session, line)
            if message is None:
                break
            if message:
                print(message)
    finally:
        if session.save_on_exit():
            print("Game saved.")


def show(args: argparse.Namespace) -> None:
    """Print the saved game without resuming it."""
    store = JsonFileStore(args.state_dir)
    snapshot = Snapshot.from_dict(store.get(LAST_STATE_KEY))
    if snapshot is None:
        print("No saved game.")
        return

    session = GameSession(store)
    session.board.init(
        BoardConfig(snapshot.width, snapshot.height, snapshot.num_mines),
        restore=snapshot,
    )
    print(f"{snapshot.width}x{snapshot.height}, {snapshot.num_mines} mines, "
          f"{snapshot.duration / 1000:.1f}s played")
    print(render_text(session.board))


def clear(args: argparse.Namespace) -> None:
    """Delete the saved game."""
    JsonFileStore(args.state_dir).remove(LAST_STATE_KEY)
    print("Saved game cleared.")


def edit_settings(args: argparse.Namespace) -> None:
    """Show or change stored settings."""
    store = JsonFileStore(args.state_dir)
    if args.reset:
        current = reset_settings(store)
    else:
        changes = {}
        if args.difficulty:
            changes["difficulty"] = args.difficulty
        for option, name in SIZE_OPTIONS.items():
            value = getattr(args, option)
            if value is not None:
                changes[name] = value
        if args.allow_open_around is not None:
            changes["allow_open_around"] = args.allow_open_around
        if args.auto_save is not None:
            changes["auto_save"] = args.auto_save
        current = update_settings(store, **changes) if changes else load_settings(store)

    for key, value in current.to_dict().items():
        print(f"{key}: {value}")


# ============================================================================
# Entry Point
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sweeper", description="Minesweeper in the terminal"
    )
    parser.add_argument(
        "--state-dir", type=Path, default=DEFAULT_STATE_DIR,
        help="Directory for saved games and settings",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    play_parser = subparsers.add_parser("play", help="Play a game")
    play_parser.add_argument("--difficulty", choices=sorted(DIFFICULTIES))
    play_parser.add_argument("--width", type=int)
    play_parser.add_argument("--height", type=int)
    play_parser.add_argument("--mines", type=int)
    play_parser.add_argument("--seed", type=int, help="Random seed for mines")
    play_parser.set_defaults(func=play)

    show_parser = subparsers.add_parser("show", help="Show the saved game")
    show_parser.set_defaults(func=show)

    clear_parser = subparsers.add_parser("clear", help="Delete the saved game")
    clear_parser.set_defaults(func=clear)

    settings_parser = subparsers.add_parser("settings", help="Edit settings")
    settings_parser.add_argument(
        "--difficulty", choices=sorted(DIFFICULTIES) + [CUSTOM]
    )
    settings_parser.add_argument("--width", type=int, help="Custom columns")
    settings_parser.add_argument("--height", type=int, help="Custom rows")
    settings_parser.add_argument("--mines", type=int, help="Custom mines")
    settings_parser.add_argument(
        "--allow-open-around", action=argparse.BooleanOptionalAction
    )
    settings_parser.add_argument(
        "--auto-save", action=argparse.BooleanOptionalAction
    )
    settings_parser.add_argument("--reset", action="store_true")
    settings_parser.set_defaults(func=edit_settings)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except ValueError as e:
        parser.error(str(e))


if __name__ == "__main__":
    main()
