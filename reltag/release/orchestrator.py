"""Release Tag Orchestrator.

Sequences the release as a forward-only state machine::

    INIT -> GUARD_CHECKED -> VERSION_LOADED -> VERSION_CONFIRMED
         -> CHANGELOG_UPDATED -> CHANGELOG_CONFIRMED -> COMMITTED -> TAGGED

Any failing step ends the run in ABORTED with the triggering error. No
step is retried and nothing already done is undone: an updated
changelog or a created commit stays in place and the report lists it,
so the operator can inspect, fix and re-run.

A version that is already tagged is rejected while loading the version,
before any side effect. If the tag shows up later anyway (someone else
tagged in between), tagging fails with ``DuplicateTagError`` after the
commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Protocol

from reltag.core.config import ReleaseConfig
from reltag.core.result import Err, Ok, Result
from reltag.git.repository import GitError
from reltag.output.console import ConsoleProtocol, Style
from reltag.release.changelog import ChangelogAdapter
from reltag.release.confirm import Confirmer
from reltag.release.errors import (
    Cancelled,
    DuplicateTagError,
    ReleaseError,
    SigningError,
    VcsError,
)
from reltag.release.fsm import FINISH, StepOutcome, advance, run_state_machine
from reltag.release.guard import WorkspaceGuard
from reltag.release.lock import RunLock
from reltag.release.semver import parse_semver
from reltag.release.version_store import VersionStore

__all__ = ["ReleaseVcs", "RunReport", "RunState", "Stage", "TagOrchestrator"]

logger = logging.getLogger(__name__)


class Stage(StrEnum):
    INIT = "init"
    GUARD_CHECKED = "guard_checked"
    VERSION_LOADED = "version_loaded"
    VERSION_CONFIRMED = "version_confirmed"
    CHANGELOG_UPDATED = "changelog_updated"
    CHANGELOG_CONFIRMED = "changelog_confirmed"
    COMMITTED = "committed"
    TAGGED = "tagged"
    ABORTED = "aborted"


_ORDER: tuple[Stage, ...] = (
    Stage.INIT,
    Stage.GUARD_CHECKED,
    Stage.VERSION_LOADED,
    Stage.VERSION_CONFIRMED,
    Stage.CHANGELOG_UPDATED,
    Stage.CHANGELOG_CONFIRMED,
    Stage.COMMITTED,
    Stage.TAGGED,
)


def _next_stage(stage: Stage) -> Stage:
    return _ORDER[_ORDER.index(stage) + 1]


class ReleaseVcs(Protocol):
    """The git operations the orchestrator performs itself."""

    def tag_exists(self, name: str) -> Result[bool, GitError]: ...

    def stage_all(self) -> Result[None, GitError]: ...

    def commit(self, message: str) -> Result[str, GitError]: ...

    def create_tag(
        self, name: str, message: str, *, key: str | None = None
    ) -> Result[None, GitError]: ...


@dataclass(frozen=True, slots=True)
class RunState:
    stage: Stage = Stage.INIT
    version: str | None = None
    tag: str | None = None
    notes: str | None = None
    commit_sha: str | None = None
    side_effects: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RunReport:
    """Outcome of one ``tag`` run.

    Attributes:
        stage: TAGGED on success, ABORTED otherwise
        history: Every stage reached, in order, starting at INIT
        failed_stage: The stage the run was trying to enter when it aborted
        error: The triggering error when aborted
        side_effects: Human-readable list of changes already made
    """

    stage: Stage
    history: tuple[Stage, ...]
    version: str | None = None
    tag: str | None = None
    commit_sha: str | None = None
    failed_stage: Stage | None = None
    error: ReleaseError | None = None
    side_effects: tuple[str, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.stage is Stage.TAGGED

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, Cancelled)


class TagOrchestrator:
    """Runs the release state machine against injected collaborators."""

    def __init__(
        self,
        *,
        store: VersionStore,
        guard: WorkspaceGuard,
        changelog: ChangelogAdapter,
        confirmer: Confirmer,
        vcs: ReleaseVcs,
        console: ConsoleProtocol,
        config: ReleaseConfig | None = None,
        lock: RunLock | None = None,
    ) -> None:
        self.store = store
        self.guard = guard
        self.changelog = changelog
        self.confirmer = confirmer
        self.vcs = vcs
        self.console = console
        self.config = config or ReleaseConfig()
        self.lock = lock

    def run(self) -> RunReport:
        if self.lock is None:
            return self._run_unlocked()

        with self.lock.hold() as acquired:
            if isinstance(acquired, Err):
                report = RunReport(
                    stage=Stage.ABORTED,
                    history=(Stage.INIT,),
                    failed_stage=Stage.INIT,
                    error=acquired.error,
                )
                self._log_outcome(report)
                return report
            return self._run_unlocked()

    def _run_unlocked(self) -> RunReport:
        history: list[Stage] = [Stage.INIT]

        def on_advance(prev: RunState, nxt: RunState) -> None:
            logger.info("release stage %s -> %s", prev.stage, nxt.stage)
            history.append(nxt.stage)

        result = run_state_machine(
            initial_state=RunState(),
            get_step=lambda s: s.stage.value,
            handlers={
                Stage.INIT.value: self._check_guard,
                Stage.GUARD_CHECKED.value: self._load_version,
                Stage.VERSION_LOADED.value: self._confirm_version,
                Stage.VERSION_CONFIRMED.value: self._update_changelog,
                Stage.CHANGELOG_UPDATED.value: self._confirm_changelog,
                Stage.CHANGELOG_CONFIRMED.value: self._commit,
                Stage.COMMITTED.value: self._tag,
                Stage.TAGGED.value: lambda _: Ok(FINISH),
            },
            order=tuple(s.value for s in _ORDER),
            on_advance=on_advance,
        )

        match result:
            case Ok(state):
                report = RunReport(
                    stage=Stage.TAGGED,
                    history=tuple(history),
                    version=state.version,
                    tag=state.tag,
                    commit_sha=state.commit_sha,
                    side_effects=state.side_effects,
                )
            case Err(halted):
                state = halted.state
                history.append(Stage.ABORTED)
                report = RunReport(
                    stage=Stage.ABORTED,
                    history=tuple(history),
                    version=state.version,
                    tag=state.tag,
                    commit_sha=state.commit_sha,
                    failed_stage=_next_stage(state.stage),
                    error=halted.error,
                    side_effects=state.side_effects,
                )

        self._log_outcome(report)
        return report

    # -- steps ---------------------------------------------------------

    def _check_guard(self, s: RunState) -> Result[StepOutcome[RunState], ReleaseError]:
        clean = self.guard.check_clean()
        if isinstance(clean, Err):
            return clean
        return Ok(advance(replace(s, stage=Stage.GUARD_CHECKED)))

    def _load_version(self, s: RunState) -> Result[StepOutcome[RunState], ReleaseError]:
        loaded = self.store.get_version()
        if isinstance(loaded, Err):
            return loaded
        version = loaded.value

        parsed = parse_semver(version)
        if isinstance(parsed, Err):
            return parsed

        tag = self.config.tag_name(version)
        exists = self.vcs.tag_exists(tag)
        if isinstance(exists, Err):
            return Err(VcsError(f"cannot look up tag {tag}: {exists.error.message}"))
        if exists.value:
            return Err(DuplicateTagError(tag=tag))

        return Ok(advance(replace(s, stage=Stage.VERSION_LOADED, version=version, tag=tag)))

    def _confirm_version(self, s: RunState) -> Result[StepOutcome[RunState], ReleaseError]:
        self.console.print(f"This release will be tagged as: {s.tag}", Style.BOLD)
        self.console.print(
            "This version should match your release. If it doesn't, re-run "
            "'reltag set-version'.",
            Style.DIM,
        )
        self.console.rule()
        gate = self.confirmer.confirm(f"Is {s.version} the version to release?")
        if isinstance(gate, Err):
            return gate
        return Ok(advance(replace(s, stage=Stage.VERSION_CONFIRMED)))

    def _update_changelog(self, s: RunState) -> Result[StepOutcome[RunState], ReleaseError]:
        assert s.version is not None
        updated = self.changelog.update_for_version(s.version)
        if isinstance(updated, Err):
            return updated
        effect = f"changelog {self.changelog.path.name} updated for {s.version} (not committed)"
        return Ok(
            advance(
                replace(
                    s,
                    stage=Stage.CHANGELOG_UPDATED,
                    side_effects=(*s.side_effects, effect),
                )
            )
        )

    def _confirm_changelog(self, s: RunState) -> Result[StepOutcome[RunState], ReleaseError]:
        assert s.version is not None
        contents = self.changelog.contents_for_version(s.version)
        if isinstance(contents, Err):
            return contents

        self.console.header(f"Changelog for {s.version}")
        self.console.rule()
        self.console.block(contents.value)
        self.console.rule()
        self.console.print(
            f"Are these release notes correct? If not, cancel and update "
            f"{self.changelog.path.name}.",
            Style.DIM,
        )
        gate = self.confirmer.confirm(f"Are the release notes for {s.version} correct?")
        if isinstance(gate, Err):
            return gate
        return Ok(advance(replace(s, stage=Stage.CHANGELOG_CONFIRMED, notes=contents.value)))

    def _commit(self, s: RunState) -> Result[StepOutcome[RunState], ReleaseError]:
        assert s.version is not None
        message = self.config.commit_message_for(s.version)

        staged = self.vcs.stage_all()
        if isinstance(staged, Err):
            return Err(VcsError(f"git add failed: {staged.error.message}"))

        committed = self.vcs.commit(message)
        if isinstance(committed, Err):
            return Err(
                VcsError(
                    f"git commit failed: {committed.error.message}",
                    hint="Pending changes are staged; inspect them with 'git status'.",
                )
            )

        sha = committed.value
        self.console.success(f"committed {sha[:7]}: {message}")
        effect = f"commit {sha[:7]} created: {message}"
        return Ok(
            advance(
                replace(
                    s,
                    stage=Stage.COMMITTED,
                    commit_sha=sha,
                    side_effects=(*s.side_effects, effect),
                )
            )
        )

    def _tag(self, s: RunState) -> Result[StepOutcome[RunState], ReleaseError]:
        assert s.tag is not None and s.version is not None
        message = s.notes or self.config.commit_message_for(s.version)

        created = self.vcs.create_tag(s.tag, message, key=self.config.signing_key)
        if isinstance(created, Err):
            if "already exists" in created.error.message:
                return Err(DuplicateTagError(tag=s.tag))
            return Err(SigningError(f"git tag failed: {created.error.message}"))

        self.console.success(f"created signed tag {s.tag}")
        effect = f"signed tag {s.tag} created"
        return Ok(
            advance(replace(s, stage=Stage.TAGGED, side_effects=(*s.side_effects, effect)))
        )

    def _log_outcome(self, report: RunReport) -> None:
        if report.succeeded:
            logger.info("release run finished: outcome=tagged tag=%s", report.tag)
            return
        outcome = "cancelled" if report.cancelled else "aborted"
        logger.warning(
            "release run finished: outcome=%s failed_stage=%s error=%s",
            outcome,
            report.failed_stage,
            type(report.error).__name__,
        )
