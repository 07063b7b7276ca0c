import os
import sys

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

def is_ci_environment():
    return (
        os.getenv('CI') is not None or
        os.getenv('GITHUB_ACTIONS') is not None or
        not sys.stdout.isatty()
    )

def get_console(stderr: bool = False) -> Console:
    """Detect environment and create console."""
    is_interactive = not is_ci_environment()
    
    if not is_interactive:
        # CI/automated environment - no colors, no interactive elements
        return Console(force_terminal=False, no_color=True, stderr=stderr)
    else:
        # Interactive terminal - full Rich capabilities
        return Console(stderr=stderr)

def confirm_prompt(text: str, console: Console = None) -> bool:
    """Ask a yes/no question, defaulting to no."""
    # Prompt texts come from the server and are shown verbatim
    return Confirm.ask(escape(text), default=False, console=console)

def ask_username(console: Console = None) -> str:
    return Prompt.ask("Your e.g.o username", console=console)

def ask_password(username: str, console: Console = None) -> str:
    return Prompt.ask(f"e.g.o password for {username}", password=True, console=console)
