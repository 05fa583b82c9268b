"""CLI context management for database connections and shared state."""

from dataclasses import dataclass, field

from tablesmith.core.config import Settings
from tablesmith.core.engine import Tablesmith


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Holds resolved settings and opens the database lazily, so commands
    such as ``version`` never touch storage.
    """

    settings: Settings
    json_output: bool
    _db: Tablesmith | None = field(default=None, init=False, repr=False)

    @property
    def database_url(self) -> str:
        return self.settings.database_url

    def get_db(self) -> Tablesmith:
        """Get or create the Tablesmith instance."""
        if self._db is None:
            self._db = Tablesmith.from_settings(self.settings)
        return self._db

    def close(self) -> None:
        """Close database connection if open."""
        if self._db is not None:
            self._db.close()
            self._db = None
