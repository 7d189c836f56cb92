"""Prompt sequences that capture mod metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional

from simsmods.config.models import PromptSettings
from simsmods.prompts import Prompter, TagCompleter, require_text, validate_source_url
from simsmods.reconcile.tags import parse_tag_list


@dataclass(slots=True)
class ModMetadata:
    """User-supplied metadata for a mod.

    Attributes:
        name: Unique display name.
        source_url: Where the mod was downloaded from.
        version: Opaque version label.
        tags: Tag labels to attach.
    """

    name: str
    source_url: str
    version: str
    tags: list[str] = field(default_factory=list)


class MetadataForm:
    """Ask for mod metadata field by field through a :class:`Prompter`."""

    def __init__(
        self,
        prompter: Prompter,
        settings: PromptSettings | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.prompter = prompter
        self.settings = settings or PromptSettings()
        self._clock = clock

    def name(
        self,
        default: str,
        *,
        taken: Iterable[str] = (),
        current: Optional[str] = None,
    ) -> str:
        """Ask for a mod name that no other mod uses.

        ``current`` is the name the mod already carries; keeping it is allowed.
        """
        unavailable = set(taken) - {current}

        def _validate(value: str) -> bool | str:
            verdict = require_text(value)
            if verdict is not True:
                return verdict
            if value.strip() in unavailable:
                return f"A mod named {value.strip()!r} already exists"
            return True

        return self.prompter.text("Name:", default=default, validate=_validate).strip()

    def source_url(self, current: Optional[str] = None) -> str:
        return self.prompter.text(
            "Source URL:",
            default=current or "",
            validate=validate_source_url,
            placeholder=self.settings.source_url_placeholder,
        ).strip()

    def version(self, current: Optional[str] = None) -> str:
        default = current or self._clock().strftime(self.settings.version_format)
        return self.prompter.text("Version:", default=default).strip()

    def tags(self, known: Iterable[str]) -> list[str]:
        raw = self.prompter.text(
            "Tags (comma separated):",
            completer=TagCompleter(known),
            placeholder="Body, Patreon",
        )
        return parse_tag_list(raw)

    def new_mod(
        self, directory: str, *, taken: Iterable[str], known_tags: Iterable[str]
    ) -> ModMetadata:
        """Ask for every field of a mod being registered for ``directory``."""
        return ModMetadata(
            name=self.name(directory, taken=taken),
            source_url=self.source_url(),
            version=self.version(),
            tags=self.tags(known_tags),
        )


__all__ = ["MetadataForm", "ModMetadata"]
