"""Rendering and payload helpers shared by simsmods CLI commands."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from rich.markup import escape
from rich.text import Text
from rich.tree import Tree

from simsmods.reconcile import HashCollision, VerificationReport
from simsmods.reconcile.reconciler import (
    DirectoryOutcome,
    DirectoryState,
    Outcome,
    ReconciliationResult,
)
from simsmods.store import ModRecord

PHASE_TITLES = {
    DirectoryState.NEW: "New mod directories",
    DirectoryState.MISSING: "Missing mod directories",
    DirectoryState.EXISTING: "Verifying recorded mods",
}

_OUTCOME_STYLES = {
    Outcome.FOUND: ("yellow", "found, not recorded"),
    Outcome.ADDED: ("green", "added"),
    Outcome.IGNORED: ("dim", "ignored"),
    Outcome.MISSING: ("red", "missing on disk"),
    Outcome.REMOVED: ("green", "removed from the database"),
    Outcome.KEPT: ("dim", "kept in the database"),
    Outcome.UNCHECKED: ("dim", "not verified"),
    Outcome.VERIFIED: ("green", "PASSED"),
    Outcome.FAILED: ("red", "FAILED"),
    Outcome.UPDATED: ("green", "hashes updated"),
    Outcome.LEFT: ("yellow", "FAILED, left unchanged"),
    Outcome.CANCELLED: ("yellow", "cancelled"),
    Outcome.REJECTED: ("red", "rejected by the database"),
}


def describe_outcome(entry: DirectoryOutcome) -> str:
    """Return a one-line, rich-formatted description of a directory outcome."""
    style, label = _OUTCOME_STYLES[entry.outcome]
    name = escape(entry.mod_name or entry.directory)
    line = f"[{style}]{name}: {label}[/{style}]"
    if entry.mod_name and entry.mod_name != entry.directory:
        line += f" [dim]({escape(entry.directory)})[/dim]"
    if entry.removed_tags:
        removed = escape(", ".join(entry.removed_tags))
        line += f" [dim]unused tags removed: {removed}[/dim]"
    return line


def render_collision(collision: HashCollision) -> Text:
    """Render a collision warning as a red block."""
    text = Text(style="red")
    text.append("Hash collision detected!\n", style="bold red")
    text.append(f"  Hash: {collision.fingerprint}\n")
    text.append(f"  Mod: {collision.mod_name}  File: {collision.file}\n")
    text.append(f"  Existing mod: {collision.existing_mod}  File: {collision.existing_file}")
    return text


def render_verification(report: VerificationReport, label: str) -> Tree:
    """Render the verification buckets of ``report`` under ``label``."""
    status = "[green]PASSED[/green]" if report.passed else "[red]FAILED[/red]"
    tree = Tree(f"{escape(label)}: {status}")
    if report.passed:
        return tree
    buckets: Sequence[tuple[str, str, Iterable[str]]] = (
        ("New files", "yellow", report.new),
        ("Missing files", "red", report.missing),
        ("Changed files", "magenta", report.changed),
    )
    for title, style, files in buckets:
        files = list(files)
        if not files:
            continue
        branch = tree.add(f"[{style}]{title}[/{style}]")
        for name in files:
            branch.add(escape(name))
    return tree


def render_mod(record: ModRecord, tags: Sequence[str], *, details: bool) -> Tree | str:
    """Render a mod as a plain line or, with ``details``, as a tree of its fields."""
    if not details:
        return f"{escape(record.name)} [dim]({record.id})[/dim]"
    tree = Tree(f"[bold]{escape(record.name)}[/bold]")
    tree.add(f"ID: {record.id}")
    tree.add(f"Version: {escape(record.version)}")
    tree.add(f"Updated: {record.updated:%Y-%m-%d %H:%M}")
    tree.add(f"Source: {escape(record.source_url)}")
    tree.add(f"Directory: {escape(record.directory)}")
    tree.add(f"Tags: {escape(', '.join(tags)) if tags else '-'}")
    return tree


def render_tag(label: str, members: Sequence[ModRecord]) -> Tree:
    tree = Tree(f"[cyan]{escape(label)}[/cyan]")
    for record in members:
        tree.add(f"{escape(record.name)} [dim]({record.id})[/dim]")
    return tree


def mod_payload(
    record: ModRecord,
    tags: Sequence[str],
    report: VerificationReport | None = None,
) -> dict[str, Any]:
    """Return a JSON-serializable description of a mod."""
    payload: dict[str, Any] = {
        "id": record.id,
        "name": record.name,
        "directory": record.directory,
        "source_url": record.source_url,
        "version": record.version,
        "updated": record.updated.isoformat(),
        "tags": list(tags),
    }
    if report is not None:
        payload["verification"] = {"passed": report.passed, **report.model_dump(mode="json")}
    return payload


def collision_payload(collision: HashCollision) -> dict[str, str]:
    return {
        "hash": collision.fingerprint,
        "mod": collision.mod_name,
        "file": collision.file,
        "existing_mod": collision.existing_mod,
        "existing_file": collision.existing_file,
    }


def reconciliation_payload(result: ReconciliationResult) -> dict[str, Any]:
    """Return a JSON-serializable description of a scan pass."""
    outcomes = []
    for entry in result.outcomes:
        item: dict[str, Any] = {
            "directory": entry.directory,
            "state": entry.state.value,
            "outcome": entry.outcome.value,
            "mod": entry.mod_name,
        }
        if entry.report is not None:
            item["verification"] = {
                "passed": entry.report.passed,
                **entry.report.model_dump(mode="json"),
            }
        if entry.removed_tags:
            item["removed_tags"] = list(entry.removed_tags)
        outcomes.append(item)
    return {
        "context": {
            "root": str(result.root),
            "mode": result.mode.value,
            "verify": result.verify,
        },
        "counts": result.counts(),
        "directories": {
            "new": list(result.classification.new),
            "missing": list(result.classification.missing),
            "existing": list(result.classification.existing),
        },
        "outcomes": outcomes,
        "collisions": [collision_payload(collision) for collision in result.collisions],
    }


__all__ = [
    "PHASE_TITLES",
    "collision_payload",
    "describe_outcome",
    "mod_payload",
    "reconciliation_payload",
    "render_collision",
    "render_mod",
    "render_tag",
    "render_verification",
]
