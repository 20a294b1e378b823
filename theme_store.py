"""Process-wide light/dark theme state.

Initialized once from the persisted preference (data/preferences.json),
falling back to CV_TAILOR_THEME and then "light". Changes are kept in
memory and written back on close().
"""

import json
import logging
import os
from pathlib import Path

from rich.theme import Theme

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")
DEFAULT_THEME = "light"
PREFERENCES_FILE = Path(__file__).parent / "data" / "preferences.json"

# Console styles per theme, used by the CLI.
_STYLES = {
    "light": {
        "info": "blue",
        "success": "green",
        "warning": "dark_orange",
        "error": "bold red",
        "muted": "grey42",
        "heading": "bold blue",
    },
    "dark": {
        "info": "bright_cyan",
        "success": "bright_green",
        "warning": "yellow",
        "error": "bold bright_red",
        "muted": "grey62",
        "heading": "bold bright_white",
    },
}


class ThemeState:
    """Theme holder with an explicit init/close lifecycle.

    Usage:
        with ThemeState() as themes:
            themes.toggle_theme()
    """

    def __init__(self, path: Path | None = None):
        self._file = Path(path) if path else PREFERENCES_FILE
        self._theme: str | None = None
        self._dirty = False

    def __enter__(self) -> "ThemeState":
        self.init()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def init(self) -> str:
        """Load the theme. Safe to call more than once."""
        if self._theme is not None:
            return self._theme

        saved = self._load_preferences().get("theme")
        env = os.environ.get("CV_TAILOR_THEME", "").strip().lower()
        if saved in THEMES:
            self._theme = saved
        elif env in THEMES:
            self._theme = env
        else:
            self._theme = DEFAULT_THEME
        self._dirty = False
        return self._theme

    def get_theme(self) -> str:
        return self.init()

    def set_theme(self, theme: str) -> str:
        """Set the theme.

        Raises:
            ValueError: If theme is not "light" or "dark".
        """
        theme = theme.strip().lower()
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}. Choose from: {', '.join(THEMES)}")
        self.init()
        if theme != self._theme:
            logger.debug("Theme %s -> %s", self._theme, theme)
            self._theme = theme
            self._dirty = True
        return theme

    def toggle_theme(self) -> str:
        return self.set_theme("dark" if self.get_theme() == "light" else "light")

    def rich_theme(self) -> Theme:
        """Console styles for the current theme."""
        return Theme(_STYLES[self.get_theme()])

    def close(self) -> None:
        """Persist a changed theme."""
        if not self._dirty:
            return
        prefs = self._load_preferences()
        prefs["theme"] = self._theme
        self._file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._file, "w") as f:
            json.dump(prefs, f, indent=2)
        self._dirty = False

    def _load_preferences(self) -> dict:
        if not self._file.exists():
            return {}
        try:
            with open(self._file) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable preferences %s: %s", self._file, e)
            return {}
        return data if isinstance(data, dict) else {}
