"""Test helpers: a scripted prompter and mod-folder builders."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from simsmods.prompts import Option, PromptCancelled
from simsmods.reconcile.tags import replace_mod_tags
from simsmods.store import ModRecord, ModStore, queries

CANCEL = object()
DEFAULT = object()


class ScriptedPrompter:
    """Replay ``answers`` one per prompt and record every prompt shown.

    ``CANCEL`` simulates the user aborting the prompt. ``DEFAULT`` accepts the
    prompt's default (or, for a checkbox, the pre-checked values). Selections are
    answered by option title. A text answer its validator rejects is recorded in
    ``rejected`` and the prompt is asked again, as questionary does.
    """

    def __init__(self, answers: Iterable[Any]) -> None:
        self.answers = list(answers)
        self.asked: list[tuple[str, str]] = []
        self.rejected: list[tuple[str, Any]] = []

    @property
    def exhausted(self) -> bool:
        return not self.answers

    def _next(self, kind: str, message: str) -> Any:
        self.asked.append((kind, message))
        if not self.answers:
            raise AssertionError(f"No scripted answer left for {kind} prompt {message!r}")
        answer = self.answers.pop(0)
        if answer is CANCEL:
            raise PromptCancelled()
        return answer

    def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Optional[Any] = None,
        completer: Optional[Any] = None,
        placeholder: Optional[str] = None,
    ) -> str:
        while True:
            answer = self._next("text", message)
            value = default if answer is DEFAULT else answer
            verdict = True if validate is None else validate(value)
            if verdict is True:
                return value
            self.rejected.append((value, verdict))

    def confirm(self, message: str, *, default: bool) -> bool:
        answer = self._next("confirm", message)
        return default if answer is DEFAULT else bool(answer)

    def select(self, message: str, options: Sequence[Option[Any]]) -> Any:
        answer = self._next("select", message)
        for option in options:
            if option.title == answer:
                return option.value
        titles = [option.title for option in options]
        raise AssertionError(f"{answer!r} is not one of {titles} for {message!r}")

    def checkbox(
        self,
        message: str,
        options: Sequence[Option[Any]],
        *,
        checked: Iterable[Any] = (),
    ) -> list[Any]:
        answer = self._next("checkbox", message)
        if answer is DEFAULT:
            return list(checked)
        by_title = {option.title: option.value for option in options}
        return [by_title[title] for title in answer]


def write_mod(root: Path, directory: str, files: dict[str, bytes]) -> Path:
    """Create ``root/directory`` holding ``files`` and return its path."""
    mod_dir = root / directory
    mod_dir.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (mod_dir / name).write_bytes(content)
    return mod_dir


def add_mod(
    store: ModStore,
    name: str,
    *,
    directory: Optional[str] = None,
    tags: Sequence[str] = (),
    hashes: Optional[dict[str, str]] = None,
) -> int:
    """Record a mod directly through the store and return its id."""
    with store.transaction() as session:
        record = ModRecord(
            name=name,
            directory=directory or name,
            source_url="https://example.com/" + name.lower(),
            version="1.0",
        )
        session.add(record)
        session.flush()
        replace_mod_tags(session, record.id, tags)
        for file, fingerprint in (hashes or {}).items():
            queries.insert_hash(session, record.id, file, fingerprint)
        return record.id
