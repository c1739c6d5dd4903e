"""Parsers turning colored ``jj log`` and ``jj diff --git`` output into nodes.

Structure is detected on ANSI-stripped text while the colored lines are kept
verbatim for display.
"""

from __future__ import annotations

import re

from ..ansi import strip_ansi
from ..errors import EngineInvocationError
from .types import CommitNode, DiffLineNode, FileDiffNode, HunkNode

FIELD_MARK = "\x1d"
FIELD_SEP = "\x1e"
WORKING_COPY_FLAG = "@"

# Every commit's first line carries "\x1d<change id>\x1e<@?>\x1e<description>\x1d".
LOG_TEMPLATE = (
    f'"{FIELD_MARK}" ++ change_id.short() ++ "{FIELD_SEP}"'
    f' ++ if(current_working_copy, "{WORKING_COPY_FLAG}") ++ "{FIELD_SEP}"'
    f' ++ description.first_line() ++ "{FIELD_MARK}"'
    " ++ builtin_log_compact"
)


def split_output_lines(output: str) -> list[str]:
    """Split command output on newlines only.

    ``str.splitlines`` also breaks on the template's field separators and on
    control characters inside file content.
    """
    if not output:
        return []
    return output.rstrip("\n").split("\n")


HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")
FILE_HEADER_PREFIXES = (
    "new file mode",
    "deleted file mode",
    "old mode",
    "new mode",
    "rename from",
    "rename to",
    "copy from",
    "copy to",
    "Binary files",
)


def _split_marker(raw_line: str) -> tuple[str, str] | None:
    """Return ``(display_line, marker_payload)`` or ``None`` for plain lines."""
    start = raw_line.find(FIELD_MARK)
    if start < 0:
        return None
    end = raw_line.find(FIELD_MARK, start + 1)
    if end < 0:
        raise EngineInvocationError(f"Unterminated commit marker in jj log output: {strip_ansi(raw_line)!r}")
    display = raw_line[:start] + raw_line[end + 1 :]
    return display, strip_ansi(raw_line[start + 1 : end])


def parse_log(output: str) -> list[CommitNode]:
    """Parse marker-annotated ``jj log`` output into commit nodes.

    Lines without a marker continue the previous commit's block (description,
    elided-revision and graph connector lines).
    """
    commits: list[CommitNode] = []
    for raw_line in split_output_lines(output):
        split = _split_marker(raw_line)
        if split is None:
            if not commits:
                if not strip_ansi(raw_line).strip():
                    continue
                raise EngineInvocationError(f"Unexpected jj log output: {strip_ansi(raw_line)!r}")
            commits[-1].lines.append(raw_line)
            continue

        display, payload = split
        fields = payload.split(FIELD_SEP)
        if len(fields) != 3 or not fields[0]:
            raise EngineInvocationError(f"Malformed commit marker in jj log output: {payload!r}")
        change_id, working_copy, description = fields
        commits.append(
            CommitNode(
                lines=[display],
                change_id=change_id.strip(),
                current_working_copy=working_copy == WORKING_COPY_FLAG,
                description_first_line=description or None,
            )
        )
    return commits


def _path_from_git_header(plain: str) -> str:
    rest = plain[len("diff --git ") :]
    split_at = rest.rfind(" b/")
    if split_at < 0:
        return rest.strip()
    return rest[split_at + 3 :].strip().strip('"')


def parse_diff(output: str) -> list[FileDiffNode]:
    """Parse ``jj diff --git`` output into file diff / hunk / line nodes.

    Line numbers follow the new side of the diff: context and added lines
    advance the counter, removed lines report where they would sit.
    """
    files: list[FileDiffNode] = []
    current_file: FileDiffNode | None = None
    current_hunk: HunkNode | None = None
    new_line = 0

    for raw_line in split_output_lines(output):
        plain = strip_ansi(raw_line)
        if plain.startswith("diff --git "):
            current_file = FileDiffNode(lines=[raw_line], path=_path_from_git_header(plain))
            files.append(current_file)
            current_hunk = None
            continue
        if current_file is None:
            continue

        hunk_match = HUNK_HEADER_RE.match(plain)
        if hunk_match:
            new_line = int(hunk_match.group(1))
            current_hunk = HunkNode(lines=[raw_line], new_start=new_line)
            current_file.children.append(current_hunk)
            continue

        if current_hunk is None:
            if plain.startswith(FILE_HEADER_PREFIXES):
                current_file.lines.append(raw_line)
            continue

        number: int | None
        if plain.startswith("-"):
            number = new_line
        elif plain.startswith("\\"):
            number = None
        else:
            number = new_line
            new_line += 1
        current_hunk.children.append(DiffLineNode(lines=[raw_line], number=number))

    return files
