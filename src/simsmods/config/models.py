"""Configuration models describing simsmods settings."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODS_DIR = Path("~/Documents/Electronic Arts/The Sims 4/Mods")
DEFAULT_DATABASE_PATH = Path("~/.simsmods/mods.sqlite")


class SimsModsBaseModel(BaseModel):
    """Shared configuration for simsmods Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class PathSettings(SimsModsBaseModel):
    """Locations of the mod root and the inventory database.

    Attributes:
        mods_dir: Directory whose immediate subdirectories are individual mods.
        database: SQLite database file holding the recorded inventory.
    """

    mods_dir: Optional[str] = None
    database: Optional[str] = None

    def resolved_mods_dir(self) -> Path:
        """Return the mod root with user expansion applied."""
        return Path(self.mods_dir).expanduser() if self.mods_dir else DEFAULT_MODS_DIR.expanduser()

    def resolved_database(self) -> Path:
        """Return the database path with user expansion applied."""
        if self.database:
            return Path(self.database).expanduser()
        return DEFAULT_DATABASE_PATH.expanduser()


class ScanSettings(SimsModsBaseModel):
    """Rules deciding which entries of the mod root are inventoried.

    Attributes:
        extensions: Package-file suffixes that are hashed, compared case-insensitively.
        ignored_directories: Subdirectories of the mod root that are never treated as mods.
    """

    extensions: List[str] = Field(default_factory=lambda: [".package", ".ts4script"])
    ignored_directories: List[str] = Field(default_factory=lambda: ["mod_data"])


class PromptSettings(SimsModsBaseModel):
    """Defaults offered by interactive prompts.

    Attributes:
        version_format: strftime pattern used for the default version label.
        source_url_placeholder: Placeholder shown when asking for a source URL.
    """

    version_format: str = "%d%m%y"
    source_url_placeholder: str = "https://myshuno.web/mod"


class LoggingSettings(SimsModsBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; rotation applies when set.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(SimsModsBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class SimsModsConfig(SimsModsBaseModel):
    """Top-level configuration struct for simsmods.

    Attributes:
        paths: Mod root and database locations.
        scanning: Inventory scanning rules.
        prompts: Interactive prompt defaults.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    paths: PathSettings = Field(default_factory=PathSettings)
    scanning: ScanSettings = Field(default_factory=ScanSettings)
    prompts: PromptSettings = Field(default_factory=PromptSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_DATABASE_PATH",
    "DEFAULT_MODS_DIR",
    "SimsModsBaseModel",
    "PathSettings",
    "ScanSettings",
    "PromptSettings",
    "LoggingSettings",
    "CLIOptions",
    "SimsModsConfig",
]
