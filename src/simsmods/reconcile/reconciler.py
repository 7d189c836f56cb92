"""Reconciliation of mod directories on disk with the recorded inventory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

from simsmods.config.models import PromptSettings
from simsmods.forms import MetadataForm, ModMetadata
from simsmods.inventory import InventoryScanner
from simsmods.prompts import PromptCancelled, Prompter
from simsmods.store import ConstraintError, ModRecord, ModStore, queries

from .collisions import CollisionDetector, HashCollision
from .setdiff import SetDiff
from .tags import replace_mod_tags
from .verification import VerificationReport, verify_directory

LOGGER = logging.getLogger(__name__)


class ScanMode(str, Enum):
    """How discrepancies found by a scan are acted upon."""

    REPORT = "report"
    FIX = "fix"
    SYNC_HASHES = "sync-hashes"


class DirectoryState(str, Enum):
    """Where a mod directory is known from."""

    NEW = "new"
    MISSING = "missing"
    EXISTING = "existing"


class Outcome(str, Enum):
    """What happened to a directory during a scan."""

    FOUND = "found"
    ADDED = "added"
    IGNORED = "ignored"
    MISSING = "missing"
    REMOVED = "removed"
    KEPT = "kept"
    UNCHECKED = "unchecked"
    VERIFIED = "verified"
    FAILED = "failed"
    UPDATED = "updated"
    LEFT = "left"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class DirectoryClassification:
    """Mod directory names split by :class:`DirectoryState`, each sorted."""

    new: tuple[str, ...]
    missing: tuple[str, ...]
    existing: tuple[str, ...]

    def state_of(self, directory: str) -> DirectoryState:
        if directory in self.new:
            return DirectoryState.NEW
        if directory in self.missing:
            return DirectoryState.MISSING
        if directory in self.existing:
            return DirectoryState.EXISTING
        raise KeyError(directory)


def classify_directories(
    on_disk: Iterable[str], recorded: Iterable[str]
) -> DirectoryClassification:
    """Partition directory names into new, missing, and existing."""
    diff = SetDiff.between(recorded, on_disk)
    return DirectoryClassification(
        new=tuple(sorted(diff.added)),
        missing=tuple(sorted(diff.removed)),
        existing=tuple(sorted(diff.common)),
    )


@dataclass(slots=True)
class DirectoryOutcome:
    """Result of handling one directory.

    Attributes:
        directory: Directory name relative to the mod root.
        state: Classification of the directory.
        outcome: Action taken or observation made.
        mod_name: Name of the recorded mod, when there is one.
        report: Verification report for existing directories that were verified.
        collisions: Fingerprint collisions flagged while writing hashes.
        removed_tags: Tags garbage-collected after removing the mod.
    """

    directory: str
    state: DirectoryState
    outcome: Outcome
    mod_name: Optional[str] = None
    report: Optional[VerificationReport] = None
    collisions: list[HashCollision] = field(default_factory=list)
    removed_tags: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ReconciliationResult:
    """Aggregate outcome of a scan pass."""

    root: Path
    mode: ScanMode
    verify: bool
    classification: DirectoryClassification
    outcomes: list[DirectoryOutcome] = field(default_factory=list)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for entry in self.outcomes if entry.outcome is outcome)

    @property
    def collisions(self) -> list[HashCollision]:
        return [collision for entry in self.outcomes for collision in entry.collisions]

    def counts(self) -> dict[str, int]:
        metrics = {
            "new": len(self.classification.new),
            "missing": len(self.classification.missing),
            "existing": len(self.classification.existing),
        }
        for outcome in Outcome:
            total = self.count(outcome)
            if total:
                metrics[outcome.value] = total
        return metrics


OutcomeListener = Callable[[DirectoryOutcome], None]
PhaseListener = Callable[[DirectoryState, tuple[str, ...]], None]


class DirectoryReconciler:
    """Drive add, remove, and hash-update actions for every mod directory.

    Each corrective action runs in its own transaction. A cancelled prompt or a
    write rejected by a database constraint only abandons the directory being
    handled; the remaining directories are still processed.
    """

    def __init__(
        self,
        store: ModStore,
        scanner: InventoryScanner,
        root: Path,
        *,
        mode: ScanMode = ScanMode.REPORT,
        verify: bool = False,
        prompter: Optional[Prompter] = None,
        prompt_settings: Optional[PromptSettings] = None,
        on_phase: Optional[PhaseListener] = None,
        on_outcome: Optional[OutcomeListener] = None,
        on_collision: Optional[Callable[[HashCollision], None]] = None,
    ) -> None:
        if mode is ScanMode.FIX and prompter is None:
            raise ValueError("Interactive fix mode requires a prompter.")
        self.store = store
        self.scanner = scanner
        self.root = root
        self.mode = mode
        self.verify = verify or mode is ScanMode.SYNC_HASHES
        self._form = MetadataForm(prompter, prompt_settings) if prompter is not None else None
        self._on_phase = on_phase
        self._on_outcome = on_outcome
        self._on_collision = on_collision

    def run(self) -> ReconciliationResult:
        """Classify every directory and handle each according to the scan mode.

        Raises:
            InventoryError: If the mod root or a mod directory cannot be listed.
            OSError: If a package file cannot be read.
            StoreError: If a database operation fails.
        """
        LOGGER.debug("Scanning mods under %s (mode=%s)", self.root, self.mode.value)
        with self.store.session() as session:
            records = {record.directory: record for record in queries.all_mods(session)}

        classification = classify_directories(
            self.scanner.list_mod_directories(self.root), records.keys()
        )
        result = ReconciliationResult(
            root=self.root, mode=self.mode, verify=self.verify, classification=classification
        )

        self._phase(DirectoryState.NEW, classification.new)
        for directory in classification.new:
            self._record(result, self._guard(directory, DirectoryState.NEW, None, self.handle_new))

        self._phase(DirectoryState.MISSING, classification.missing)
        for directory in classification.missing:
            record = records[directory]
            self._record(
                result,
                self._guard(directory, DirectoryState.MISSING, record, self.handle_missing),
            )

        if self.verify:
            self._phase(DirectoryState.EXISTING, classification.existing)
        for directory in classification.existing:
            record = records[directory]
            self._record(
                result,
                self._guard(directory, DirectoryState.EXISTING, record, self.handle_existing),
            )

        return result

    # Per-state handlers -----------------------------------------------

    def handle_new(self, directory: str, _: None = None) -> DirectoryOutcome:
        """Register a directory that is not recorded yet, when fixing."""
        if self.mode is not ScanMode.FIX:
            return DirectoryOutcome(directory, DirectoryState.NEW, Outcome.FOUND)

        form = self._interactive_form()
        if not form.prompter.confirm(
            f"Do you want to add {directory} to the database?", default=True
        ):
            return DirectoryOutcome(directory, DirectoryState.NEW, Outcome.IGNORED)

        with self.store.session() as session:
            taken = [record.name for record in queries.all_mods(session)]
            known_tags = [tag.tag for tag in queries.all_tags(session)]
        metadata = form.new_mod(directory, taken=taken, known_tags=known_tags)

        LOGGER.debug("Fetching file hashes for %s", directory)
        inventory = self.scanner.scan(self.root / directory)
        collisions = self.add_mod(directory, metadata, inventory.hashes)
        return DirectoryOutcome(
            directory,
            DirectoryState.NEW,
            Outcome.ADDED,
            mod_name=metadata.name,
            collisions=collisions,
        )

    def handle_missing(self, directory: str, record: ModRecord) -> DirectoryOutcome:
        """Offer to forget a recorded mod whose directory disappeared, when fixing."""
        outcome = DirectoryOutcome(
            directory, DirectoryState.MISSING, Outcome.MISSING, mod_name=record.name
        )
        if self.mode is not ScanMode.FIX:
            return outcome

        if self._interactive_form().prompter.confirm(
            f"Do you want to remove {record.name} from the database?", default=False
        ):
            outcome.removed_tags = self.remove_mod(record.id)
            outcome.outcome = Outcome.REMOVED
        else:
            outcome.outcome = Outcome.KEPT
        return outcome

    def handle_existing(self, directory: str, record: ModRecord) -> DirectoryOutcome:
        """Verify a recorded directory and apply the configured correction on failure."""
        outcome = DirectoryOutcome(
            directory, DirectoryState.EXISTING, Outcome.UNCHECKED, mod_name=record.name
        )
        if not self.verify:
            return outcome

        with self.store.session() as session:
            recorded = queries.hashes_for_mod(session, record.id)
        report = verify_directory(self.root / directory, recorded, self.scanner)
        outcome.report = report
        if report.passed:
            outcome.outcome = Outcome.VERIFIED
            return outcome

        outcome.outcome = Outcome.FAILED
        hashes = report.resynced(recorded)
        if self.mode is ScanMode.SYNC_HASHES:
            LOGGER.warning(
                "Accepting on-disk files of %s as the recorded state without confirmation",
                record.name,
            )
            outcome.collisions = self.update_hashes(record, hashes)
            outcome.outcome = Outcome.UPDATED
        elif self.mode is ScanMode.FIX:
            form = self._interactive_form()
            if not form.prompter.confirm(f"Do you want to update {record.name}?", default=True):
                outcome.outcome = Outcome.LEFT
                return outcome
            source_url = form.source_url(record.source_url)
            version = form.version(record.version)
            outcome.collisions = self.update_hashes(
                record, hashes, source_url=source_url, version=version
            )
            outcome.outcome = Outcome.UPDATED
        return outcome

    # Transactions -----------------------------------------------------

    def add_mod(
        self, directory: str, metadata: ModMetadata, hashes: dict[str, str]
    ) -> list[HashCollision]:
        """Persist a new mod, its tags, and its file hashes in one transaction."""
        detector = CollisionDetector()
        LOGGER.info("Adding %s as %s", directory, metadata.name)
        with self.store.transaction() as session:
            record = ModRecord(
                name=metadata.name,
                directory=directory,
                source_url=metadata.source_url,
                version=metadata.version,
            )
            session.add(record)
            session.flush()
            LOGGER.debug("Mod ID: %s", record.id)
            replace_mod_tags(session, record.id, metadata.tags)
            detector.record_hashes(
                session, mod_id=record.id, mod_name=metadata.name, hashes=hashes
            )
        return self._announce(detector)

    def remove_mod(self, mod_id: int) -> list[str]:
        """Delete a mod with its hashes and links, then drop orphaned tags.

        Returns:
            list[str]: Labels of tags removed because they lost their last link.
        """
        with self.store.transaction() as session:
            queries.delete_mod(session, mod_id)
            return queries.cleanup_tags(session)

    def update_hashes(
        self,
        record: ModRecord,
        hashes: dict[str, str],
        *,
        source_url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> list[HashCollision]:
        """Replace every recorded hash of ``record`` in one transaction."""
        detector = CollisionDetector()
        LOGGER.info("Updating %s", record.name)
        with self.store.transaction() as session:
            current = queries.get_mod(session, record.id)
            if source_url is not None:
                current.source_url = source_url
            if version is not None:
                current.version = version
            current.touch()
            queries.clear_hashes(session, record.id)
            detector.record_hashes(session, mod_id=record.id, mod_name=record.name, hashes=hashes)
        return self._announce(detector)

    # Internal helpers -------------------------------------------------

    def _interactive_form(self) -> MetadataForm:
        if self._form is None:
            raise RuntimeError("Interactive fix mode requires a prompter.")
        return self._form

    def _announce(self, detector: CollisionDetector) -> list[HashCollision]:
        if self._on_collision is not None:
            for collision in detector.collisions:
                self._on_collision(collision)
        return detector.collisions

    def _guard(
        self,
        directory: str,
        state: DirectoryState,
        record: Optional[ModRecord],
        handler: Callable[[str, ModRecord], DirectoryOutcome],
    ) -> DirectoryOutcome:
        try:
            return handler(directory, record)  # type: ignore[arg-type]
        except PromptCancelled:
            LOGGER.info("Cancelled pending action for %s", directory)
            outcome = Outcome.CANCELLED
        except ConstraintError as exc:
            LOGGER.error("Database rejected the change to %s: %s", directory, exc)
            outcome = Outcome.REJECTED
        return DirectoryOutcome(
            directory,
            state,
            outcome,
            mod_name=record.name if record is not None else None,
        )

    def _phase(self, state: DirectoryState, directories: tuple[str, ...]) -> None:
        if self._on_phase is not None and directories:
            self._on_phase(state, directories)

    def _record(self, result: ReconciliationResult, outcome: DirectoryOutcome) -> None:
        result.outcomes.append(outcome)
        if self._on_outcome is not None:
            self._on_outcome(outcome)


__all__ = [
    "DirectoryClassification",
    "DirectoryOutcome",
    "DirectoryReconciler",
    "DirectoryState",
    "Outcome",
    "ReconciliationResult",
    "ScanMode",
    "classify_directories",
]
