from typing import Dict, List, Tuple
from dataclasses import dataclass, field

################################################################################
# Errors
################################################################################

class DiffParseError(ValueError):
    """Raised when a hunk header cannot be parsed."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"Malformed hunk header {line!r}: {reason}")
        self.line = line
        self.reason = reason

################################################################################
# Hunk headers
################################################################################

LinePair = Tuple[int, str]

def _header_ranges(line: str) -> Tuple[str, str]:
    tokens = line.split(' ')
    if len(tokens) < 3 or not tokens[0].startswith('@@'):
        raise DiffParseError(line, "expected '@@ -<old> +<new> @@'")
    return tokens[1], tokens[2]


def _split_range(token: str, sign: str, line: str) -> Tuple[str, str]:
    if not token.startswith(sign):
        raise DiffParseError(line, f"expected a range starting with '{sign}', got {token!r}")
    start, _, count = token[1:].partition(',')
    return start, count


def _number(value: str, token: str, line: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise DiffParseError(line, f"range {token!r} is not numeric") from e


def parse_hunk_starts(line: str) -> Tuple[int, int]:
    """
    Parses only the start lines of a hunk header, (old_start, new_start).
    The counts are not looked at.
    """
    old_token, new_token = _header_ranges(line)
    old_start, _ = _split_range(old_token, '-', line)
    new_start, _ = _split_range(new_token, '+', line)
    return _number(old_start, old_token, line), _number(new_start, new_token, line)


def parse_hunk_header(line: str) -> Tuple[int, int, int, int]:
    """
    Parses "@@ -<old>[,<n>] +<new>[,<n>] @@ ..." into
    (old_start, old_count, new_start, new_count). A missing count means 1.
    """
    old_token, new_token = _header_ranges(line)
    old_start, old_count = _split_range(old_token, '-', line)
    new_start, new_count = _split_range(new_token, '+', line)
    return (
        _number(old_start, old_token, line),
        _number(old_count, old_token, line) if old_count else 1,
        _number(new_start, new_token, line),
        _number(new_count, new_token, line) if new_count else 1,
    )


def _diff_lines(diff_text: str) -> List[str]:
    """
    Splits on "\\n" only, the way git terminates lines. Form feeds and other
    separators that str.splitlines() breaks on stay part of the line.
    """
    lines = diff_text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


def _is_deletion(line: str) -> bool:
    return line.startswith('-') and not line.startswith('---')


def _is_addition(line: str) -> bool:
    return line.startswith('+') and not line.startswith('+++')

################################################################################
# Parsing
################################################################################

def parse_diff(diff_text: str) -> Dict[str, List[LinePair]]:
    """
    Returns the deleted and added lines of a unified diff as
    {"deleted": [(line, content), ...], "added": [(line, content), ...]}.

    Deleted line numbers refer to the old file, added line numbers to the
    new one. Both counters advance on every line; a deletion holds the
    addition counter back and vice versa.
    """
    modified_lines: Dict[str, List[LinePair]] = {
        "deleted": [],
        "added": [],
    }

    count_deletions = 0
    count_additions = 0
    for line in _diff_lines(diff_text):
        count_deletions += 1
        count_additions += 1

        if line.startswith('@@'):
            old_start, new_start = parse_hunk_starts(line)
            count_deletions = old_start - 1
            count_additions = new_start - 1

        if _is_deletion(line):
            modified_lines["deleted"].append((count_deletions, line[1:]))
            count_additions -= 1

        if _is_addition(line):
            modified_lines["added"].append((count_additions, line[1:]))
            count_deletions -= 1

    return modified_lines


def count_changed_lines(diff_text: str) -> Tuple[int, int]:
    """Returns (added, deleted) line counts, ignoring the ---/+++ file headers."""
    added = 0
    deleted = 0
    for line in _diff_lines(diff_text):
        if _is_addition(line):
            added += 1
        elif _is_deletion(line):
            deleted += 1
    return added, deleted

################################################################################
# Hunks
################################################################################

@dataclass
class Hunk:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    deleted: List[LinePair] = field(default_factory=list)
    added: List[LinePair] = field(default_factory=list)
    context: int = 0

    def is_consistent(self) -> bool:
        """Checks the recorded lines against the counts declared in the header."""
        return (len(self.deleted) + self.context == self.old_count
                and len(self.added) + self.context == self.new_count)


def parse_hunks(diff_text: str) -> List[Hunk]:
    """
    Splits a unified diff into hunks. Lines before the first header (the
    "diff --git", "index", ---/+++ lines) are skipped, and so are
    "\\ No newline at end of file" markers.
    """
    hunks: List[Hunk] = []
    current: Hunk | None = None
    old_line = 0
    new_line = 0

    for line in _diff_lines(diff_text):
        if line.startswith('@@'):
            old_start, old_count, new_start, new_count = parse_hunk_header(line)
            current = Hunk(old_start, old_count, new_start, new_count)
            hunks.append(current)
            old_line = old_start
            new_line = new_start
            continue

        if current is None or line.startswith('\\'):
            continue

        if _is_deletion(line):
            current.deleted.append((old_line, line[1:]))
            old_line += 1
        elif _is_addition(line):
            current.added.append((new_line, line[1:]))
            new_line += 1
        else:
            current.context += 1
            old_line += 1
            new_line += 1

    return hunks
