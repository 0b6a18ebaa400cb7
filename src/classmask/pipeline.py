# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Sequence cleanup, copy, extraction, rewrite, persistence and reporting."""

import concurrent.futures
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, TypeVar

from classmask.config import ObfuscationConfig
from classmask.errors import (
    ArtifactIOError,
    ObfuscationError,
    PipelineError,
    RewriteError,
)
from classmask.extractor import extract_class_names, extract_id_names, merge_ordered
from classmask.ignore import IgnoreMatcher
from classmask.mapping import MappingBuild, MappingTable, blocked_token_predicate, build_mapping
from classmask.naming import NameGenerator, build_strategy
from classmask.rewriters import (
    CLASS_ATTRIBUTES,
    ID_ATTRIBUTES,
    RewriteResult,
    attribute_tokens,
    inline_styles,
    rewrite_markup,
    rewrite_script,
    rewrite_stylesheet,
)
from classmask.scanner import (
    STYLESHEET_SUFFIXES,
    ArtifactKind,
    PathExcluder,
    classify,
    iter_artifacts,
)
from classmask.store import MappingStore
from classmask.tree import (
    ArtifactTree,
    CopySummary,
    clear_destination,
    copy_tree,
    read_artifact,
    validate_tree,
    write_atomic,
)

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5

_T = TypeVar("_T")
PhaseCallback = Callable[[str, str], None]
_Rewrite = Callable[[str], RewriteResult]


class PipelineState(str, Enum):
    """Enumerate run states in their only legal order."""

    CLEAN = "clean"
    COPIED = "copied"
    CLASSES_EXTRACTED = "classes_extracted"
    STYLESHEET_REWRITTEN = "stylesheet_rewritten"
    MARKUP_REWRITTEN = "markup_rewritten"
    SCRIPT_REWRITTEN = "script_rewritten"
    REPORTED = "reported"
    FAILED = "failed"


_ORDER: tuple[PipelineState, ...] = (
    PipelineState.CLEAN,
    PipelineState.COPIED,
    PipelineState.CLASSES_EXTRACTED,
    PipelineState.STYLESHEET_REWRITTEN,
    PipelineState.MARKUP_REWRITTEN,
    PipelineState.SCRIPT_REWRITTEN,
    PipelineState.REPORTED,
)

_PHASE_NAMES: dict[PipelineState, str] = {
    PipelineState.COPIED: "copy",
    PipelineState.CLASSES_EXTRACTED: "extract",
    PipelineState.STYLESHEET_REWRITTEN: "stylesheet",
    PipelineState.MARKUP_REWRITTEN: "markup",
    PipelineState.SCRIPT_REWRITTEN: "script",
    PipelineState.REPORTED: "report",
}


@dataclass(frozen=True)
class PhaseSummary:
    """Represent rewrite phase counters."""

    files_discovered: int
    files_rewritten: int
    files_unchanged: int
    files_skipped: int
    replacements: int
    elapsed_ms: int
    skipped_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class RunReport:
    """Summarize one successful run for verification tooling.

    Attributes:
        output_root: Root of the rewritten tree.
        mapping_path: Persisted mapping artifact.
        mapping_kept: False when the artifact was deleted after the run.
        classes_discovered: Distinct class names found in stylesheets.
        classes_mapped: Entries in the class mapping.
        classes_assigned: Entries that received a new token in this run.
        classes_reused: Entries reused from a previous mapping.
        classes_ignored: Discovered classes exempted by ignore rules.
        ids_mapped: Entries in the element id mapping.
        copy: Copy phase counters.
        stylesheets: Stylesheet phase counters.
        markup: Markup phase counters.
        scripts: Script phase counters.
        samples: First mapping entries, for display.
        elapsed_ms: Wall time of the run.
    """

    output_root: str
    mapping_path: str
    mapping_kept: bool
    classes_discovered: int
    classes_mapped: int
    classes_assigned: int
    classes_reused: int
    classes_ignored: int
    ids_mapped: int
    copy: CopySummary
    stylesheets: PhaseSummary
    markup: PhaseSummary
    scripts: PhaseSummary
    samples: tuple[tuple[str, str], ...]
    elapsed_ms: int

    def summary_fields(self) -> dict[str, int]:
        """Flatten counters for ``key=value`` rendering."""
        return {
            "files_copied": self.copy.files_copied,
            "classes_discovered": self.classes_discovered,
            "classes_mapped": self.classes_mapped,
            "classes_assigned": self.classes_assigned,
            "classes_reused": self.classes_reused,
            "classes_ignored": self.classes_ignored,
            "ids_mapped": self.ids_mapped,
            "stylesheets_rewritten": self.stylesheets.files_rewritten,
            "markup_rewritten": self.markup.files_rewritten,
            "scripts_rewritten": self.scripts.files_rewritten,
            "scripts_skipped": self.scripts.files_skipped,
            "replacements": self.stylesheets.replacements
            + self.markup.replacements
            + self.scripts.replacements,
            "elapsed_ms": self.elapsed_ms,
        }


@dataclass(frozen=True)
class PipelineResult:
    """Represent the terminal outcome of a run."""

    state: PipelineState
    report: RunReport | None = None
    error: PipelineError | None = None
    disabled: bool = False
    history: tuple[PipelineState, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return self.disabled or self.state is PipelineState.REPORTED


@dataclass
class _Artifacts:
    stylesheets: list[Path]
    markup: list[Path]
    scripts: list[Path]


@dataclass(frozen=True)
class _SourceScan:
    """Names carried by one stylesheet or markup file.

    Attributes:
        styles: Stylesheet texts (the file itself or its inline blocks).
        class_tokens: Class attribute tokens found in markup.
        id_tokens: Id reference tokens found in markup.
    """

    styles: list[str]
    class_tokens: list[str] = field(default_factory=list)
    id_tokens: list[str] = field(default_factory=list)


class Pipeline:
    """Drive one obfuscation run through its state machine."""

    def __init__(
        self,
        config: ObfuscationConfig,
        on_phase: PhaseCallback | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            config: Frozen run configuration.
            on_phase: Called with ``(phase, "start"|"done")`` around each phase.
        """
        self._config = config
        self._on_phase = on_phase or (lambda _phase, _marker: None)
        self._tree = ArtifactTree(source=config.src_path, destination=config.des_path)
        self._store = MappingStore(
            data_dir=config.jsons_path,
            fresh=config.fresh,
            format_json=config.format_json,
        )
        self._excluder = (
            PathExcluder.from_patterns(config.excludes) if config.excludes else None
        )
        self._state = PipelineState.CLEAN
        self._history: list[PipelineState] = [PipelineState.CLEAN]

    @property
    def state(self) -> PipelineState:
        return self._state

    def run(self) -> PipelineResult:
        """Run every phase; fatal failures end in ``FAILED``.

        Returns:
            Terminal run result.
        """
        if not self._config.enable:
            logger.info("Obfuscation disabled; nothing to do")
            return PipelineResult(
                state=self._state, disabled=True, history=tuple(self._history)
            )

        started = time.monotonic()
        try:
            self._cleanup()
            copy_summary = self._phase(PipelineState.COPIED, self._copy)
            artifacts = self._collect_artifacts()
            classes_build, ids_table, discovered = self._phase(
                PipelineState.CLASSES_EXTRACTED,
                lambda: self._extract(artifacts),
            )
            classes = classes_build.table
            stylesheets = self._phase(
                PipelineState.STYLESHEET_REWRITTEN,
                lambda: self._rewrite_files(
                    kind="stylesheet",
                    files=artifacts.stylesheets,
                    rewrite=lambda text: rewrite_stylesheet(text, classes, ids_table),
                    fatal=True,
                ),
            )
            markup = self._phase(
                PipelineState.MARKUP_REWRITTEN,
                lambda: self._rewrite_files(
                    kind="markup",
                    files=artifacts.markup,
                    rewrite=lambda text: rewrite_markup(text, classes, ids_table),
                    fatal=True,
                ),
            )
            scripts = self._phase(
                PipelineState.SCRIPT_REWRITTEN,
                lambda: self._rewrite_files(
                    kind="script",
                    files=artifacts.scripts,
                    rewrite=lambda text: rewrite_script(text, classes, ids_table),
                    fatal=False,
                ),
            )
            report = self._phase(
                PipelineState.REPORTED,
                lambda: self._persist_and_report(
                    classes_build=classes_build,
                    ids_table=ids_table,
                    discovered=discovered,
                    copy_summary=copy_summary,
                    stylesheets=stylesheets,
                    markup=markup,
                    scripts=scripts,
                    started=started,
                ),
            )
        except PipelineError as exc:
            logger.error(
                "Obfuscation run failed (state=%s severity=%s error=%s)",
                exc.state,
                exc.severity,
                exc,
            )
            self._transition(PipelineState.FAILED)
            return PipelineResult(
                state=self._state, error=exc, history=tuple(self._history)
            )

        return PipelineResult(
            state=self._state, report=report, history=tuple(self._history)
        )

    def _phase(self, target: PipelineState, action: Callable[[], _T]) -> _T:
        """Run one phase and advance to its target state.

        Raises:
            PipelineError: If the phase fails.
        """
        name = _PHASE_NAMES[target]
        self._on_phase(name, "start")
        try:
            value = action()
        except PipelineError:
            raise
        except (ObfuscationError, OSError) as exc:
            raise PipelineError(state=target.value, message=str(exc)) from exc
        except Exception as exc:
            logger.exception("Unexpected failure in phase (phase=%s)", name)
            raise PipelineError(
                state=target.value, message=f"{type(exc).__name__}: {exc}"
            ) from exc
        self._transition(target)
        self._on_phase(name, "done")
        return value

    def _transition(self, target: PipelineState) -> None:
        if target is not PipelineState.FAILED:
            expected = _ORDER[_ORDER.index(self._state) + 1]
            if target is not expected:
                raise PipelineError(
                    state=target.value,
                    message=f"Illegal transition {self._state.value} -> {target.value}",
                )
        logger.debug("Pipeline transition (from=%s to=%s)", self._state.value, target.value)
        self._state = target
        self._history.append(target)

    def _cleanup(self) -> None:
        try:
            validate_tree(self._tree)
            if self._config.fresh:
                self._store.discard()
                clear_destination(self._tree)
        except (ObfuscationError, OSError) as exc:
            raise PipelineError(state=PipelineState.CLEAN.value, message=str(exc)) from exc

    def _copy(self) -> CopySummary:
        summary = copy_tree(self._tree)
        logger.info(
            "Copy completed (files_copied=%s dirs_created=%s in_place=%s)",
            summary.files_copied,
            summary.dirs_created,
            self._tree.in_place,
        )
        return summary

    def _collect_artifacts(self) -> _Artifacts:
        targets = set(self._config.extensions) | STYLESHEET_SUFFIXES
        buckets: dict[ArtifactKind, list[Path]] = {
            "stylesheet": [],
            "markup": [],
            "script": [],
            "other": [],
        }
        try:
            for path in iter_artifacts(self._tree.destination, targets, self._excluder):
                buckets[classify(path)].append(path)
        except ArtifactIOError as exc:
            raise PipelineError(
                state=PipelineState.CLASSES_EXTRACTED.value, message=str(exc)
            ) from exc
        logger.info(
            "Artifacts discovered (stylesheets=%s markup=%s scripts=%s)",
            len(buckets["stylesheet"]),
            len(buckets["markup"]),
            len(buckets["script"]),
        )
        return _Artifacts(
            stylesheets=buckets["stylesheet"],
            markup=buckets["markup"],
            scripts=buckets["script"],
        )

    def _extract(
        self, artifacts: _Artifacts
    ) -> tuple[MappingBuild, MappingTable | None, int]:
        """Discover names and build frozen mapping tables.

        Returns:
            Class mapping build, id table (None when ids are disabled), and the
            number of distinct discovered class names.
        """
        sources = [*artifacts.stylesheets, *artifacts.markup]
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._config.workers
        ) as executor:
            scans = list(executor.map(self._scan_source, sources))

        class_candidates = merge_ordered(
            extract_class_names(text) for scan in scans for text in scan.styles
        )
        class_build = self._build_table(
            candidates=class_candidates,
            reserved=merge_ordered(scan.class_tokens for scan in scans),
            ignore=IgnoreMatcher(self._config.class_ignore),
            generator_for=lambda blocked: NameGenerator(
                strategy=build_strategy(
                    self._config.class_method, self._config.length, self._config.seed
                ),
                prefix=self._config.class_prefix,
                suffix=self._config.class_suffix,
                is_blocked=blocked,
            ),
            section="classes",
        )

        ids_table: MappingTable | None = None
        if self._config.ids:
            id_candidates = merge_ordered(
                extract_id_names(text) for scan in scans for text in scan.styles
            )
            ids_table = self._build_table(
                candidates=id_candidates,
                reserved=merge_ordered(scan.id_tokens for scan in scans),
                ignore=IgnoreMatcher(self._config.id_ignore),
                generator_for=lambda blocked: NameGenerator(
                    strategy=build_strategy(
                        self._config.id_method, self._config.length, self._config.seed
                    ),
                    is_blocked=blocked,
                ),
                section="ids",
            ).table
        return class_build, ids_table, len(class_candidates)

    def _build_table(
        self,
        candidates: list[str],
        reserved: list[str],
        ignore: IgnoreMatcher,
        generator_for: Callable[[Callable[[str], bool]], NameGenerator],
        section: str,
    ) -> MappingBuild:
        previous = self._store.load(section=section)
        blocked = blocked_token_predicate(
            matcher=ignore, originals=candidates, reserved=reserved
        )
        return build_mapping(
            candidates=candidates,
            matcher=ignore,
            generator=generator_for(blocked),
            previous=previous,
        )

    def _scan_source(self, path: Path) -> _SourceScan:
        """Read the stylesheet text and markup names carried by one artifact.

        Raises:
            ArtifactIOError: If the file cannot be read.
        """
        try:
            text = read_artifact(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ArtifactIOError(f"Cannot read {path}: {exc}") from exc
        if classify(path) == "stylesheet":
            return _SourceScan(styles=[text])
        return _SourceScan(
            styles=inline_styles(text),
            class_tokens=attribute_tokens(text, CLASS_ATTRIBUTES),
            id_tokens=attribute_tokens(text, ID_ATTRIBUTES) if self._config.ids else [],
        )

    def _rewrite_files(
        self,
        kind: ArtifactKind,
        files: list[Path],
        rewrite: _Rewrite,
        fatal: bool,
    ) -> PhaseSummary:
        """Rewrite every file of one kind in parallel.

        Args:
            kind: Artifact kind.
            files: Files to rewrite.
            rewrite: Pure text transformation.
            fatal: Re-raise the first failure instead of skipping the file.

        Returns:
            Phase counters.

        Raises:
            RewriteError: If a file fails and the phase is fatal.
        """
        started = time.monotonic()
        rewritten = 0
        unchanged = 0
        replacements = 0
        skipped: list[str] = []
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._config.workers
        ) as executor:
            future_to_path = {
                executor.submit(self._rewrite_one, kind, path, rewrite): path
                for path in files
            }
            for future in concurrent.futures.as_completed(future_to_path):
                path = future_to_path[future]
                try:
                    count = future.result()
                except RewriteError as exc:
                    if fatal:
                        for pending in future_to_path:
                            pending.cancel()
                        raise
                    logger.warning(
                        "Skipping file after rewrite failure (kind=%s path=%s error=%s)",
                        kind,
                        path,
                        exc,
                    )
                    skipped.append(str(path.relative_to(self._tree.destination)))
                    continue
                if count:
                    rewritten += 1
                    replacements += count
                else:
                    unchanged += 1

        elapsed_ms = int(round((time.monotonic() - started) * 1000))
        logger.info(
            "Rewrite phase completed (kind=%s rewritten=%s unchanged=%s skipped=%s replacements=%s)",
            kind,
            rewritten,
            unchanged,
            len(skipped),
            replacements,
        )
        return PhaseSummary(
            files_discovered=len(files),
            files_rewritten=rewritten,
            files_unchanged=unchanged,
            files_skipped=len(skipped),
            replacements=replacements,
            elapsed_ms=elapsed_ms,
            skipped_paths=tuple(sorted(skipped)),
        )

    def _rewrite_one(self, kind: ArtifactKind, path: Path, rewrite: _Rewrite) -> int:
        """Rewrite one file in place.

        Returns:
            Number of substitutions made.

        Raises:
            RewriteError: If reading, transforming or writing fails.
        """
        try:
            source = read_artifact(path)
            result = rewrite(source)
            if result.changed:
                write_atomic(path, result.text)
        except Exception as exc:
            raise RewriteError(
                kind=kind, path=path, message=f"{type(exc).__name__}: {exc}"
            ) from exc
        logger.debug(
            "Rewrote file (kind=%s path=%s replacements=%s)",
            kind,
            path,
            result.replacements,
        )
        return result.replacements

    def _persist_and_report(
        self,
        classes_build: MappingBuild,
        ids_table: MappingTable | None,
        discovered: int,
        copy_summary: CopySummary,
        stylesheets: PhaseSummary,
        markup: PhaseSummary,
        scripts: PhaseSummary,
        started: float,
    ) -> RunReport:
        classes = classes_build.table
        self._store.save(classes=classes, ids=ids_table)
        samples = tuple(list(classes.items())[:SAMPLE_SIZE])
        report = RunReport(
            output_root=str(self._tree.destination),
            mapping_path=str(self._store.path),
            mapping_kept=self._config.keep_data,
            classes_discovered=discovered,
            classes_mapped=len(classes),
            classes_assigned=len(classes_build.assigned),
            classes_reused=len(classes_build.reused),
            classes_ignored=len(classes_build.ignored),
            ids_mapped=0 if ids_table is None else len(ids_table),
            copy=copy_summary,
            stylesheets=stylesheets,
            markup=markup,
            scripts=scripts,
            samples=samples,
            elapsed_ms=int(round((time.monotonic() - started) * 1000)),
        )
        logger.info(
            "Obfuscation report (classes=%s mapping=%s output=%s)",
            report.classes_mapped,
            report.mapping_path,
            report.output_root,
        )
        for original, token in samples:
            logger.info("Example mapping (original=%s token=%s)", original, token)
        if not self._config.keep_data:
            self._store.discard()
        return report
