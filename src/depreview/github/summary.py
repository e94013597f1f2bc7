"""Job summary builder.

Buffers HTML in the shape the Actions toolkit's summary API produces and
appends it to the file named by GITHUB_STEP_SUMMARY. Content is written
verbatim; callers escape any untrusted text.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

SUMMARY_ENV_VAR = "GITHUB_STEP_SUMMARY"


@dataclass(frozen=True)
class TableCell:
    """One cell of a summary table."""
    data: str
    header: bool = False
    colspan: int = 1


Row = Sequence["TableCell | str"]


def _wrap(tag: str, content: str, attrs: Mapping[str, str] | None = None) -> str:
    attr_text = "".join(f' {k}="{v}"' for k, v in (attrs or {}).items())
    return f"<{tag}{attr_text}>{content}</{tag}>"


def _render_cell(cell: TableCell | str) -> str:
    if isinstance(cell, str):
        return _wrap("td", cell)
    attrs: dict[str, str] = {}
    if cell.colspan != 1:
        attrs["colspan"] = str(cell.colspan)
    return _wrap("th" if cell.header else "td", cell.data, attrs)


class StepSummary:
    """Fluent builder for the workflow run's job summary."""

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = os.environ if env is None else env
        self._buffer = ""

    @property
    def path(self) -> Path | None:
        value = self._env.get(SUMMARY_ENV_VAR, "")
        return Path(value) if value else None

    def add_raw(self, text: str, add_eol: bool = False) -> StepSummary:
        self._buffer += text
        if add_eol:
            self._buffer += os.linesep
        return self

    def add_heading(self, text: str, level: int = 1) -> StepSummary:
        tag = f"h{level}" if 1 <= level <= 6 else "h1"
        return self.add_raw(_wrap(tag, text), add_eol=True)

    def add_quote(self, text: str) -> StepSummary:
        return self.add_raw(_wrap("blockquote", text), add_eol=True)

    def add_table(self, rows: Sequence[Row]) -> StepSummary:
        body = "".join(_wrap("tr", "".join(_render_cell(c) for c in row)) for row in rows)
        return self.add_raw(_wrap("table", body), add_eol=True)

    def stringify(self) -> str:
        return self._buffer

    def empty_buffer(self) -> StepSummary:
        self._buffer = ""
        return self

    def write(self) -> bool:
        """Append the buffer to the summary file and clear it.

        Returns False, leaving nothing written, when no summary file is
        configured for this run.
        """
        path = self.path
        if path is None:
            self.empty_buffer()
            return False
        with open(path, "a", encoding="utf-8") as f:
            f.write(self._buffer)
        self.empty_buffer()
        return True
