"""Prompt helpers and metadata form tests."""

from __future__ import annotations

from datetime import datetime

from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document
from support import DEFAULT, ScriptedPrompter

from simsmods.config.models import PromptSettings
from simsmods.forms import MetadataForm
from simsmods.prompts import TagCompleter, require_text, validate_source_url


def test_tag_completer_suggests_by_prefix() -> None:
    completer = TagCompleter(["Hair", "Body", "Hats", "Build"], exclude=["Hats"])

    assert completer.suggestions("H") == ["Hair"]
    assert completer.suggestions("Bu") == ["Build"]
    assert completer.suggestions("") == ["Body", "Build", "Hair"]
    assert completer.suggestions("Z") == []


def test_tag_completer_keeps_labels_that_prefix_others() -> None:
    completer = TagCompleter(["Hairstyle", "Hair", "Hai"])

    assert completer.suggestions("Hai") == ["Hai", "Hair", "Hairstyle"]
    assert completer.suggestions("Hair") == ["Hair", "Hairstyle"]
    assert completer.suggestions("Hairs") == ["Hairstyle"]


def test_tag_completer_completes_segment_after_last_comma() -> None:
    completer = TagCompleter(["Body", "Build", "Hair"])
    document = Document("Hair, Bu")

    completions = list(completer.get_completions(document, CompleteEvent()))

    assert [completion.text for completion in completions] == ["Build"]
    assert completions[0].start_position == -2


def test_validators() -> None:
    assert require_text("x") is True
    assert require_text("   ") == "A response is required"
    assert validate_source_url("https://example.com/mod") is True
    assert validate_source_url("example.com/mod") is not True
    assert validate_source_url("") is not True


def test_version_defaults_to_formatted_date() -> None:
    prompter = ScriptedPrompter([DEFAULT])
    form = MetadataForm(
        prompter,
        PromptSettings(version_format="%Y-%m-%d"),
        clock=lambda: datetime(2024, 3, 9),
    )

    assert form.version() == "2024-03-09"


def test_version_keeps_current_value_as_default() -> None:
    form = MetadataForm(ScriptedPrompter([DEFAULT]), clock=lambda: datetime(2024, 3, 9))

    assert form.version("1.4") == "1.4"


def test_new_mod_collects_every_field() -> None:
    prompter = ScriptedPrompter([DEFAULT, " https://example.com/a ", "7", "Body, ,Hair, Body"])
    form = MetadataForm(prompter)

    metadata = form.new_mod("Alpha", taken=["Beta"], known_tags=["Body"])

    assert metadata.name == "Alpha"
    assert metadata.source_url == "https://example.com/a"
    assert metadata.version == "7"
    assert metadata.tags == ["Body", "Hair"]
    assert [message for _, message in prompter.asked] == [
        "Name:",
        "Source URL:",
        "Version:",
        "Tags (comma separated):",
    ]


def test_name_rejects_names_of_other_mods() -> None:
    captured = {}

    class _Capture(ScriptedPrompter):
        def text(self, message, *, default="", validate=None, completer=None, placeholder=None):
            captured["validate"] = validate
            return default

    MetadataForm(_Capture([])).name("Alpha", taken=["Alpha", "Beta"], current="Alpha")

    validate = captured["validate"]
    assert validate("Alpha") is True
    assert validate("Gamma") is True
    assert validate("Beta") == "A mod named 'Beta' already exists"
    assert validate("") == "A response is required"


def test_name_default_taken_by_another_mod_is_rejected() -> None:
    prompter = ScriptedPrompter([DEFAULT, "Foo (2)"])

    name = MetadataForm(prompter).name("Foo", taken=["Foo"])

    assert name == "Foo (2)"
    assert prompter.rejected == [("Foo", "A mod named 'Foo' already exists")]
