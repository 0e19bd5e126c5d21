"""High-level organize operations combining scanning, planning, and execution."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from smart_organizer.cancellation import CancellationToken
from smart_organizer.classification.strategies import (
    ArchiveStrategy,
    DateStrategy,
    ExtensionStrategy,
    OrganizeStrategy,
    PatternRenameStrategy,
    SizeStrategy,
    TempStrategy,
    prune_empty_directories,
)
from smart_organizer.config.models import OrganizerConfig
from smart_organizer.duplicates.detector import DuplicateDetector
from smart_organizer.errors import AdvisorError, InvalidRequestError, OrganizerError
from smart_organizer.scanning.discovery import DirectoryScanner
from smart_organizer.scanning.models import FileEntry
from smart_organizer.scanning.sandbox import PathSandbox

from .advisor import Completer, build_prompt, parse_actions
from .executor import ActionExecutor
from .models import OrganizePlan, OrganizeReport
from .validator import ActionValidator

LOGGER = logging.getLogger(__name__)

MODES: tuple[str, ...] = (
    "extension",
    "date",
    "duplicate",
    "temp",
    "size",
    "archive",
    "rename",
    "ai",
)


class SmartOrganizer:
    """Entry point for every organizing mode.

    Each `organize_*` call scans the target, builds a plan, executes it (unless
    `dry_run` is set), and returns an `OrganizeReport`. Failures are reported
    through the report rather than raised. Rule-based modes fail as a whole
    when any action fails; applied actions are not rolled back.
    """

    def __init__(
        self,
        config: OrganizerConfig | None = None,
        *,
        completer: Completer | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.config = config or OrganizerConfig()
        self.completer = completer
        self.cancel_token = cancel_token

    # ------------------------------------------------------------------ #
    # Rule-based modes                                                   #
    # ------------------------------------------------------------------ #

    def organize_by_extension(
        self, target_path: Path | str, recursive: bool = False, *, dry_run: bool = False
    ) -> OrganizeReport:
        """Move files into one folder per lowercase extension."""
        return self._run_strategy(
            "extension",
            target_path,
            recursive,
            dry_run,
            lambda: ExtensionStrategy(self.config.review),
        )

    def organize_by_temp(
        self, target_path: Path | str, recursive: bool = False, *, dry_run: bool = False
    ) -> OrganizeReport:
        """Move temporary-looking files into the temp review folder."""
        return self._run_strategy(
            "temp",
            target_path,
            recursive,
            dry_run,
            lambda: TempStrategy(self.config.review),
        )

    def organize_by_size(
        self,
        target_path: Path | str,
        recursive: bool = False,
        size_threshold: Optional[int] = None,
        *,
        dry_run: bool = False,
    ) -> OrganizeReport:
        """Move files larger than `size_threshold` bytes into the large-file review folder."""
        return self._run_strategy(
            "size",
            target_path,
            recursive,
            dry_run,
            lambda: SizeStrategy(size_threshold, self.config.review),
        )

    def organize_by_age(
        self,
        target_path: Path | str,
        recursive: bool = False,
        min_age_days: Optional[int] = None,
        *,
        dry_run: bool = False,
    ) -> OrganizeReport:
        """Archive files not modified within `min_age_days` (configured default if omitted)."""
        options = self.config.archive
        days = options.min_age_days if min_age_days is None else min_age_days
        return self._run_strategy(
            "archive",
            target_path,
            recursive,
            dry_run,
            lambda: ArchiveStrategy(days, options.folder),
        )

    def organize_by_pattern(
        self,
        target_path: Path | str,
        recursive: bool = False,
        pattern: Optional[str] = None,
        *,
        use_regex: bool = False,
        case_sensitive: bool = False,
        dry_run: bool = False,
    ) -> OrganizeReport:
        """Strip `pattern` from matching file names, leaving files in their folders."""
        return self._run_strategy(
            "rename",
            target_path,
            recursive,
            dry_run,
            lambda: PatternRenameStrategy(
                pattern, use_regex=use_regex, case_sensitive=case_sensitive
            ),
        )

    def organize_by_date(
        self, target_path: Path | str, recursive: bool = False, *, dry_run: bool = False
    ) -> OrganizeReport:
        """Move files into `YYYY-MM` folders.

        With `recursive`, nested files are first flattened into the root and
        emptied subdirectories are removed, so the original folder structure
        is not preserved.
        """

        def build(report: OrganizeReport, root: Path, token: CancellationToken) -> None:
            strategy = DateStrategy()
            if not recursive:
                entries = self._scanner(False, token).scan(root)
                self._apply(report, strategy.build_plan(entries, root), token)
                return

            nested = self._scanner(True, token).scan(root)
            flatten = strategy.flatten_plan(nested, root)
            self._apply(report, flatten, token)

            if report.dry_run:
                entries = self._project_flatten(nested, flatten, root)
            else:
                prune_empty_directories(root)
                entries = self._scanner(False, token).scan(root)
            self._apply(report, strategy.build_plan(entries, root), token)

        return self._run("date", target_path, recursive, dry_run, build)

    def organize_by_duplicate(
        self, target_path: Path | str, recursive: bool = False, *, dry_run: bool = False
    ) -> OrganizeReport:
        """Move byte-identical copies into the duplicates review folder, keeping the first."""

        def build(report: OrganizeReport, root: Path, token: CancellationToken) -> None:
            entries = self._scanner(recursive, token).scan(root)
            folder = self.config.review.duplicates
            detector = DuplicateDetector(self.config.duplicates, cancel_token=token)
            groups = detector.find_groups(entries, exclude_dir=root / folder)
            plan = detector.build_plan(groups, root, folder=folder, recursive=recursive)
            self._apply(report, plan, token)

        return self._run("duplicate", target_path, recursive, dry_run, build)

    # ------------------------------------------------------------------ #
    # Advisor-driven modes                                               #
    # ------------------------------------------------------------------ #

    def organize_by_ai(
        self,
        target_path: Path | str,
        recursive: bool = False,
        raw_actions: Any = None,
        *,
        dry_run: bool = False,
    ) -> OrganizeReport:
        """Validate untrusted actions against a fresh scan and execute the survivors.

        Per-action outcomes are reported in `results`; a batch in which every
        action was rejected succeeds with nothing executed.
        """

        def build(report: OrganizeReport, root: Path, token: CancellationToken) -> None:
            entries = self._scanner(recursive, token).scan(root)
            validator = ActionValidator(
                PathSandbox(root),
                (entry.path for entry in entries),
                min_destination_length=self.config.advisor.min_destination_length,
            )
            outcome = validator.validate(raw_actions)
            report.rejected.extend(outcome.rejected)
            if not outcome.accepted:
                LOGGER.info("No valid actions to execute under %s", root)
                return
            self._apply(report, outcome.to_plan(), token)

        return self._run("ai", target_path, recursive, dry_run, build, fail_on_action_errors=False)

    def suggest_actions(
        self,
        target_path: Path | str,
        recursive: bool = False,
        user_request: str = "",
    ) -> list[Any]:
        """Ask the configured completer for raw actions over the target's files.

        Raises:
            AdvisorError: If no completer is configured or its output is unusable.
            FilesystemError: If the target cannot be scanned.
        """

        if self.completer is None:
            raise AdvisorError("No advisor completer is configured")
        if not user_request.strip():
            raise InvalidRequestError("An organizing request is required for advisor mode")

        root = self._resolve_root(target_path)
        entries = self._scanner(recursive, self._token()).scan(root)
        prompt = build_prompt(
            user_request,
            entries,
            root,
            max_listed_files=self.config.advisor.max_listed_files,
        )
        LOGGER.debug("Requesting advisor suggestions for %d file(s)", len(entries))
        return parse_actions(self.completer.complete(prompt))

    def organize_with_advisor(
        self,
        target_path: Path | str,
        recursive: bool = False,
        user_request: str = "",
        *,
        dry_run: bool = False,
    ) -> OrganizeReport:
        """Request suggestions from the completer and run them through `organize_by_ai`."""
        try:
            raw_actions = self.suggest_actions(target_path, recursive, user_request)
        except OrganizerError as exc:
            return self._error_report("ai", target_path, recursive, dry_run, exc.message)
        return self.organize_by_ai(target_path, recursive, raw_actions, dry_run=dry_run)

    # ------------------------------------------------------------------ #
    # Dispatch                                                           #
    # ------------------------------------------------------------------ #

    def organize(
        self,
        mode: str,
        target_path: Path | str,
        *,
        recursive: bool = False,
        size_threshold: Optional[int] = None,
        min_age_days: Optional[int] = None,
        pattern: Optional[str] = None,
        use_regex: bool = False,
        case_sensitive: bool = False,
        raw_actions: Any = None,
        user_request: Optional[str] = None,
        dry_run: bool = False,
    ) -> OrganizeReport:
        """Run the organizing mode named by `mode`.

        For `ai`, `raw_actions` takes precedence; otherwise `user_request` is
        sent to the configured completer.
        """

        if mode == "extension":
            return self.organize_by_extension(target_path, recursive, dry_run=dry_run)
        if mode == "date":
            return self.organize_by_date(target_path, recursive, dry_run=dry_run)
        if mode == "duplicate":
            return self.organize_by_duplicate(target_path, recursive, dry_run=dry_run)
        if mode == "temp":
            return self.organize_by_temp(target_path, recursive, dry_run=dry_run)
        if mode == "size":
            return self.organize_by_size(target_path, recursive, size_threshold, dry_run=dry_run)
        if mode == "archive":
            return self.organize_by_age(target_path, recursive, min_age_days, dry_run=dry_run)
        if mode == "rename":
            return self.organize_by_pattern(
                target_path,
                recursive,
                pattern,
                use_regex=use_regex,
                case_sensitive=case_sensitive,
                dry_run=dry_run,
            )
        if mode == "ai":
            if raw_actions is None and user_request is not None:
                return self.organize_with_advisor(target_path, recursive, user_request, dry_run=dry_run)
            return self.organize_by_ai(target_path, recursive, raw_actions, dry_run=dry_run)

        message = f"Unknown organize mode '{mode}'. Expected one of: {', '.join(MODES)}"
        return self._error_report(mode, target_path, recursive, dry_run, message)

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _run_strategy(
        self,
        mode: str,
        target_path: Path | str,
        recursive: bool,
        dry_run: bool,
        factory: Callable[[], OrganizeStrategy],
    ) -> OrganizeReport:
        def build(report: OrganizeReport, root: Path, token: CancellationToken) -> None:
            strategy = factory()
            entries = self._scanner(recursive, token).scan(root)
            self._apply(report, strategy.build_plan(entries, root), token)

        return self._run(mode, target_path, recursive, dry_run, build)

    def _run(
        self,
        mode: str,
        target_path: Path | str,
        recursive: bool,
        dry_run: bool,
        build: Callable[[OrganizeReport, Path, CancellationToken], None],
        *,
        fail_on_action_errors: bool = True,
    ) -> OrganizeReport:
        try:
            root = self._resolve_root(target_path)
        except InvalidRequestError as exc:
            return self._error_report(mode, target_path, recursive, dry_run, exc.message)

        report = OrganizeReport(mode=mode, root=root, recursive=recursive, dry_run=dry_run)
        LOGGER.info("Organizing %s by %s (recursive=%s, dry_run=%s)", root, mode, recursive, dry_run)

        try:
            build(report, root, self._token())
        except OrganizerError as exc:
            LOGGER.error("%s organization of %s failed: %s", mode, root, exc.message)
            report.success = False
            report.error = exc.message
            return report
        except OSError as exc:
            LOGGER.error("%s organization of %s failed: %s", mode, root, exc)
            report.success = False
            report.error = str(exc)
            return report

        if fail_on_action_errors and report.failed:
            first = next(result for result in report.results if not result.success)
            report.success = False
            report.error = (
                f"{report.failed} of {len(report.results)} action(s) failed; first error: {first.error}"
            )
            LOGGER.error("%s organization of %s: %s", mode, root, report.error)
        else:
            LOGGER.info("%s organization of %s: %s", mode, root, report.summary)
        return report

    def _apply(self, report: OrganizeReport, plan: OrganizePlan, token: CancellationToken) -> None:
        report.plan.extend(plan)
        if report.dry_run or not plan.actions:
            return
        report.results.extend(ActionExecutor(token).execute(plan.actions))

    def _project_flatten(
        self,
        entries: list[FileEntry],
        plan: OrganizePlan,
        root: Path,
    ) -> list[FileEntry]:
        moved = {move.src: move.dest for move in plan.moves}
        projected: list[FileEntry] = []
        for entry in entries:
            destination = moved.get(entry.path)
            if destination is not None:
                projected.append(entry.model_copy(update={"path": destination, "name": destination.name}))
            elif entry.path.parent == root:
                projected.append(entry)
        return sorted(projected, key=lambda entry: entry.name)

    def _scanner(self, recursive: bool, token: CancellationToken) -> DirectoryScanner:
        return DirectoryScanner(
            recursive=recursive,
            include_hidden=self.config.scanning.include_hidden,
            follow_symlinks=self.config.scanning.follow_symlinks,
            cancel_token=token,
        )

    def _token(self) -> CancellationToken:
        if self.cancel_token is not None:
            return self.cancel_token
        return CancellationToken(self.config.execution.timeout_seconds)

    def _resolve_root(self, target_path: Path | str) -> Path:
        if not isinstance(target_path, (str, Path)) or "\x00" in str(target_path):
            raise InvalidRequestError(f"Invalid target path: {target_path!r}")
        try:
            return Path(target_path).expanduser().resolve()
        except (OSError, RuntimeError, ValueError) as exc:
            raise InvalidRequestError(f"Invalid target path {target_path!r}: {exc}") from exc

    def _error_report(
        self,
        mode: str,
        target_path: Path | str,
        recursive: bool,
        dry_run: bool,
        message: str,
    ) -> OrganizeReport:
        LOGGER.error("%s organization failed: %s", mode, message)
        try:
            root: Optional[Path] = self._resolve_root(target_path)
        except InvalidRequestError:
            root = None
        return OrganizeReport(
            mode=mode,
            root=root,
            recursive=recursive,
            dry_run=dry_run,
            success=False,
            error=message,
        )


__all__ = ["MODES", "SmartOrganizer"]
