"""Interactive and one-shot editing of recorded mods and tags."""

from .runner import EditMenu, apply_mod_edit
from .states import Back, BackTo, Enter, Exit, MenuState, initial_stack, navigate

__all__ = [
    "Back",
    "BackTo",
    "EditMenu",
    "Enter",
    "Exit",
    "MenuState",
    "apply_mod_edit",
    "initial_stack",
    "navigate",
]
