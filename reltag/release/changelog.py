"""Changelog Collaborator Adapter.

The orchestrator needs exactly two things from a changelog tool: "make
the top section describe version V" and "give me the text of V's
section". Two adapters provide them:

- :class:`MarkdownChangelog` edits a chag-style ``CHANGELOG.md`` in
  process::

      CHANGELOG
      =========

      ## Unreleased

      * Pending note

      ## 1.0.0 - 2024-04-15

      * Initial release

- :class:`CommandChangelog` shells out to an external tool (``chag`` by
  default) through configurable command templates.

Neither adapter commits anything; the orchestrator owns the commit.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Protocol

from reltag.core.result import Err, Ok, Result
from reltag.git.repository import GitError
from reltag.platform.files import atomic_write_text
from reltag.platform.process import run as run_process
from reltag.release.errors import ChangelogError

__all__ = [
    "ChangelogAdapter",
    "CommandChangelog",
    "MarkdownChangelog",
    "Section",
    "parse_changelog",
]

logger = logging.getLogger(__name__)

HistorySource = Callable[[], Result[list[str], GitError]]

_HEADING_RE = re.compile(
    r"^##\s+(?P<open>\[)?(?P<title>[^\]\s]+)\]?(?:\s+-\s+(?P<date>\S.*?))?\s*$"
)
_UNRELEASED = "unreleased"
_DEFAULT_PREAMBLE = "CHANGELOG\n=========\n"


class ChangelogAdapter(Protocol):
    path: Path

    def update_for_version(self, version: str) -> Result[None, ChangelogError]: ...

    def contents_for_version(self, version: str) -> Result[str, ChangelogError]: ...


@dataclass
class Section:
    """One ``## title - date`` section and the lines below it.

    ``heading`` is the line exactly as read from the file. It is written
    back unchanged until :meth:`retitle` drops it; ``bracketed`` keeps the
    ``## [1.0.0]`` style when the heading has to be rebuilt.
    """

    title: str
    date: str | None
    body: list[str] = field(default_factory=list)
    heading: str | None = None
    bracketed: bool = False

    @property
    def is_unreleased(self) -> bool:
        return self.title.lower() == _UNRELEASED

    @property
    def text(self) -> str:
        return "\n".join(self.body).strip()

    def retitle(self, title: str, date: str) -> None:
        self.title, self.date = title, date
        self.heading = None

    def lines(self) -> list[str]:
        heading = self.heading
        if heading is None:
            title = f"[{self.title}]" if self.bracketed else self.title
            heading = f"## {title}" if self.date is None else f"## {title} - {self.date}"
        return [heading, *self.body]


@dataclass
class ChangelogDocument:
    """A parsed changelog that renders back line for line.

    Only sections that were retitled or inserted change on render; the
    preamble, every other heading and every body line (link definitions
    included) come out as they went in.
    """

    preamble: list[str]
    sections: list[Section]
    trailing_newline: bool = True

    def find(self, version: str) -> int | None:
        for i, section in enumerate(self.sections):
            if section.title == version:
                return i
        return None

    def insert_top(self, section: Section) -> None:
        if self.preamble and self.preamble[-1].strip():
            self.preamble.append("")
        if self.sections:
            section.bracketed = self.sections[0].bracketed
        self.sections.insert(0, section)

    def render(self) -> str:
        lines = list(self.preamble)
        for section in self.sections:
            lines += section.lines()
        text = "\n".join(lines)
        return text + "\n" if self.trailing_newline and text else text


def parse_changelog(text: str) -> ChangelogDocument:
    preamble: list[str] = []
    sections: list[Section] = []

    for line in text.splitlines():
        m = _HEADING_RE.match(line)
        if m is not None:
            sections.append(
                Section(
                    title=m.group("title"),
                    date=m.group("date"),
                    heading=line,
                    bracketed=m.group("open") is not None,
                )
            )
        elif sections:
            sections[-1].body.append(line)
        else:
            preamble.append(line)

    return ChangelogDocument(
        preamble=preamble,
        sections=sections,
        trailing_newline=text.endswith("\n") or not text,
    )


class MarkdownChangelog:
    """In-process, chag-compatible markdown changelog.

    ``update_for_version`` picks the first rule that applies:

    1. top section is already ``version``: refresh its date;
    2. top section is ``Unreleased``: rename it to ``version - today``;
    3. otherwise insert a new top section.

    Only that top section is rewritten; older sections keep their heading
    and body byte for byte. An empty section (cases 2 and 3) is seeded
    with the subjects of the commits since the previous tag. If it is
    still empty nothing is written and the update fails.
    """

    def __init__(
        self,
        path: Path,
        *,
        history: HistorySource | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.path = path
        self._history = history
        self._today = today

    def update_for_version(self, version: str) -> Result[None, ChangelogError]:
        loaded = self._load()
        if isinstance(loaded, Err):
            return loaded
        doc = loaded.value
        stamp = self._today().isoformat()

        index = doc.find(version)
        if index is not None and index != 0:
            return Err(
                ChangelogError(
                    f"{self.path.name} already has a {version} section below newer releases",
                    hint="Pick a version newer than the top changelog section.",
                )
            )

        if index == 0 or (doc.sections and doc.sections[0].is_unreleased):
            section = doc.sections[0]
            section.retitle(version, stamp)
        else:
            section = Section(title=version, date=stamp)
            doc.insert_top(section)

        if not section.text:
            seeded = self._seed()
            if isinstance(seeded, Err):
                return seeded
            section.body = ["", *seeded.value]
            if section is not doc.sections[-1]:
                section.body.append("")

        if not section.text:
            return Err(
                ChangelogError(
                    f"no release notes for {version}",
                    hint=f"Add notes under '## Unreleased' in {self.path.name}, then re-run.",
                )
            )

        try:
            atomic_write_text(self.path, doc.render())
        except OSError as e:
            return Err(ChangelogError(f"cannot write {self.path}: {e}"))

        logger.info("changelog %s updated for %s", self.path, version)
        return Ok(None)

    def contents_for_version(self, version: str) -> Result[str, ChangelogError]:
        loaded = self._load(create=False)
        if isinstance(loaded, Err):
            return loaded
        doc = loaded.value

        index = doc.find(version)
        if index is None:
            return Err(ChangelogError(f"{self.path.name} has no section for {version}"))

        text = doc.sections[index].text
        if not text:
            return Err(ChangelogError(f"{self.path.name} section for {version} is empty"))
        return Ok(text)

    def _load(self, *, create: bool = True) -> Result[ChangelogDocument, ChangelogError]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            if not create:
                return Err(ChangelogError(f"changelog not found: {self.path}"))
            text = _DEFAULT_PREAMBLE
        except (OSError, UnicodeDecodeError) as e:
            return Err(ChangelogError(f"cannot read {self.path}: {e}"))
        return Ok(parse_changelog(text))

    def _seed(self) -> Result[list[str], ChangelogError]:
        if self._history is None:
            return Ok([])
        subjects = self._history()
        if isinstance(subjects, Err):
            return Err(ChangelogError(f"cannot read commit history: {subjects.error.message}"))
        return Ok([f"* {subject}" for subject in subjects.value])


class CommandChangelog:
    """Changelog managed by an external tool such as ``chag``.

    Command templates are argument lists; ``{version}`` and ``{path}``
    are substituted in every argument.
    """

    def __init__(
        self,
        repo_root: Path,
        path: Path,
        *,
        update_command: Sequence[str],
        contents_command: Sequence[str],
    ) -> None:
        self.repo_root = repo_root
        self.path = path
        self.update_command = tuple(update_command)
        self.contents_command = tuple(contents_command)

    def update_for_version(self, version: str) -> Result[None, ChangelogError]:
        result = run_process(self._render(self.update_command, version), cwd=self.repo_root)
        if isinstance(result, Err):
            return Err(ChangelogError(f"changelog update failed: {result.error.detail}"))
        logger.info("changelog tool updated %s for %s", self.path, version)
        return Ok(None)

    def contents_for_version(self, version: str) -> Result[str, ChangelogError]:
        result = run_process(self._render(self.contents_command, version), cwd=self.repo_root)
        if isinstance(result, Err):
            return Err(ChangelogError(f"changelog contents failed: {result.error.detail}"))

        text = result.value.strip()
        if not text:
            return Err(ChangelogError(f"changelog section for {version} is empty"))
        return Ok(text)

    def _render(self, template: tuple[str, ...], version: str) -> list[str]:
        path = str(self.path)
        return [arg.replace("{version}", version).replace("{path}", path) for arg in template]
