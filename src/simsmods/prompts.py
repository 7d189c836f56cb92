"""Interactive prompts used by the scan and edit workflows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, Protocol, Sequence, TypeVar
from urllib.parse import urlparse

import questionary
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

T = TypeVar("T")

Validator = Callable[[str], "bool | str"]


class PromptCancelled(Exception):
    """Raised when the user aborts a prompt (Ctrl-C or Esc)."""


@dataclass(frozen=True)
class Option(Generic[T]):
    """A labelled value offered by a selection prompt."""

    title: str
    value: T


class Prompter(Protocol):
    """Interactive input consumed by the reconciliation and edit workflows.

    Every method raises :class:`PromptCancelled` when the user aborts.
    """

    def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Optional[Validator] = None,
        completer: Optional[Completer] = None,
        placeholder: Optional[str] = None,
    ) -> str: ...

    def confirm(self, message: str, *, default: bool) -> bool: ...

    def select(self, message: str, options: Sequence[Option[T]]) -> T: ...

    def checkbox(
        self,
        message: str,
        options: Sequence[Option[T]],
        *,
        checked: Iterable[T] = (),
    ) -> list[T]: ...


def _answer(question: questionary.Question) -> Any:
    answer = question.ask()
    if answer is None:
        raise PromptCancelled()
    return answer


class QuestionaryPrompter:
    """Terminal prompts backed by questionary."""

    def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Optional[Validator] = None,
        completer: Optional[Completer] = None,
        placeholder: Optional[str] = None,
    ) -> str:
        extra: dict[str, Any] = {}
        if completer is not None:
            extra["completer"] = completer
        if placeholder:
            extra["placeholder"] = placeholder
        return _answer(questionary.text(message, default=default, validate=validate, **extra))

    def confirm(self, message: str, *, default: bool) -> bool:
        return bool(_answer(questionary.confirm(message, default=default)))

    def select(self, message: str, options: Sequence[Option[T]]) -> T:
        choices = [
            questionary.Choice(option.title, value=index) for index, option in enumerate(options)
        ]
        index = _answer(questionary.select(message, choices=choices))
        return options[index].value

    def checkbox(
        self,
        message: str,
        options: Sequence[Option[T]],
        *,
        checked: Iterable[T] = (),
    ) -> list[T]:
        preselected = list(checked)
        choices = [
            questionary.Choice(option.title, value=index, checked=option.value in preselected)
            for index, option in enumerate(options)
        ]
        indices = _answer(questionary.checkbox(message, choices=choices))
        return [options[index].value for index in indices]


class _LabelTrie:
    """Character trie over tag labels."""

    def __init__(self, labels: Iterable[str]) -> None:
        self._root: dict[str, Any] = {}
        for label in labels:
            node = self._root
            for char in label:
                node = node.setdefault(char, {})
            node[""] = label

    def with_prefix(self, prefix: str) -> list[str]:
        node = self._root
        for char in prefix:
            if char not in node:
                return []
            node = node[char]
        found: list[str] = []
        pending = [node]
        while pending:
            current = pending.pop()
            for key, child in current.items():
                if key == "":
                    found.append(child)
                else:
                    pending.append(child)
        return sorted(found)


class TagCompleter(Completer):
    """Complete the comma-separated tag entry under the cursor from known labels."""

    def __init__(self, labels: Iterable[str], *, exclude: Iterable[str] = ()) -> None:
        excluded = set(exclude)
        self._trie = _LabelTrie({label for label in labels if label not in excluded})

    def suggestions(self, prefix: str) -> list[str]:
        """Return known labels starting with ``prefix`` in sorted order."""
        return self._trie.with_prefix(prefix)

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterator[Completion]:
        segment = document.text_before_cursor.rsplit(",", 1)[-1].lstrip()
        for label in self.suggestions(segment):
            yield Completion(label, start_position=-len(segment))


def require_text(value: str) -> bool | str:
    return True if value.strip() else "A response is required"


def validate_source_url(value: str) -> bool | str:
    """Accept absolute URLs with a scheme and a host."""
    if not value.strip():
        return "A response is required"
    parsed = urlparse(value.strip())
    if not parsed.scheme or not parsed.netloc:
        return f"Failed to validate URL: {value!r} is not an absolute URL"
    return True


__all__ = [
    "Option",
    "PromptCancelled",
    "Prompter",
    "QuestionaryPrompter",
    "TagCompleter",
    "require_text",
    "validate_source_url",
]
