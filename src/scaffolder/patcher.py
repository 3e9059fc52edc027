"""Idempotent patching of registration files.

Registration files (``lib/config/decoders.dart``, ``lib/routes/router.dart``,
...) are owned by the application, not by the scaffolder. The patcher only
ever appends: it locates a named map/list literal, parses its entries, and
inserts new entries immediately before the closing delimiter. Everything
that was already in the file is kept byte-for-byte.

The source is not parsed as Dart. ``DartSource`` recognises just enough
structure for the append operation: string and comment regions, bracket
nesting, top-level commas, and the declaration that names a literal.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from src.errors import RegistrationPatternNotFound
from src.scaffolder.filesystem import FileSystem

_OPENERS = {"{": "}", "[": "]", "(": ")"}
_CLOSERS = set(_OPENERS.values())
_TYPE_ARGUMENT_PUNCTUATION = frozenset(" \t\n,.?")


def _is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class LiteralKind(str, enum.Enum):
    MAP = "map"
    LIST = "list"

    @property
    def opener(self) -> str:
        return "{" if self is LiteralKind.MAP else "["


class PatchStatus(str, enum.Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    PATTERN_NOT_FOUND = "pattern_not_found"


@dataclass(frozen=True)
class LiteralSignature:
    """A named declaration that introduces a registration literal.

    ``declaration`` is matched token by token with flexible whitespace, e.g.
    ``final Map<Type, NyEvent> events`` followed by ``= {``.
    """

    name: str
    declaration: str
    kind: LiteralKind = LiteralKind.MAP

    @property
    def pattern(self) -> re.Pattern[str]:
        tokens = r"\s+".join(re.escape(token) for token in self.declaration.split())
        return re.compile(rf"{tokens}\s*=\s*{re.escape(self.kind.opener)}")


@dataclass(frozen=True)
class RegistrationRule:
    """Entries to append when ``signature`` is the literal found in the file."""

    signature: LiteralSignature
    entries: tuple[str, ...]


@dataclass(frozen=True)
class RegistrationEdit:
    """One append-only change to a registration file.

    ``rules`` are tried in order; the first signature present in the file is
    the one patched. Applying an edit whose ``import_line`` is already in the
    file is a no-op.
    """

    target: str
    import_line: str
    rules: tuple[RegistrationRule, ...]


@dataclass
class PatchOutcome:
    path: str
    status: PatchStatus
    matched: str | None = None

    @property
    def applied(self) -> bool:
        return self.status is PatchStatus.APPLIED


# ---------------------------------------------------------------------------
# Source scanning
# ---------------------------------------------------------------------------


def _starts_string(text: str, i: int) -> bool:
    ch = text[i]
    if ch in "'\"":
        return True
    if ch == "r" and i + 1 < len(text) and text[i + 1] in "'\"":
        return i == 0 or not (text[i - 1].isalnum() or text[i - 1] == "_")
    return False


def _string_end(text: str, i: int) -> int:
    """Index just past the string literal starting at ``i``."""
    raw = text[i] == "r"
    if raw:
        i += 1
    quote = text[i]
    delim = quote * 3 if text.startswith(quote * 3, i) else quote
    j = i + len(delim)
    n = len(text)
    while j < n:
        if not raw and text[j] == "\\":
            j += 2
            continue
        if text.startswith(delim, j):
            return j + len(delim)
        if not raw and text.startswith("${", j):
            j = _interpolation_end(text, j + 2)
            continue
        if len(delim) == 1 and text[j] == "\n":
            return j
        j += 1
    return n


def _interpolation_end(text: str, j: int) -> int:
    depth = 1
    n = len(text)
    while j < n and depth:
        if _starts_string(text, j):
            j = _string_end(text, j)
            continue
        if text[j] == "{":
            depth += 1
        elif text[j] == "}":
            depth -= 1
        j += 1
    return j


def _scan_regions(text: str) -> list[tuple[int, int, str]]:
    """Return ``(start, end, kind)`` spans of comments and strings."""
    regions: list[tuple[int, int, str]] = []
    i, n = 0, len(text)
    while i < n:
        if text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end < 0 else end
            regions.append((i, end, "comment"))
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end < 0 else end + 2
            regions.append((i, end, "comment"))
            i = end
        elif _starts_string(text, i):
            end = _string_end(text, i)
            regions.append((i, end, "string"))
            i = end
        else:
            i += 1
    return regions


@dataclass(frozen=True)
class LiteralEntry:
    """One top-level item of a literal.

    ``code`` is the entry without comments and with whitespace collapsed;
    ``key`` is the map key (text before the first top-level ``:``) or, for
    lists, the whole ``code``.
    """

    start: int
    end: int
    code: str
    key: str


@dataclass(frozen=True)
class LiteralNode:
    """A located literal: its signature, delimiters and parsed entries."""

    signature: LiteralSignature
    start: int
    open: int
    close: int
    entries: tuple[LiteralEntry, ...]
    needs_comma_at: int | None = None
    indent: str = ""
    entry_indent: str = "  "

    def contains(self, key: str) -> bool:
        return any(entry.key == key for entry in self.entries)


class DartSource:
    """Structural view over Dart source text sufficient for appending entries.

    ``masked`` has the same length as ``text`` with comments blanked out and
    string contents replaced by spaces (quote characters are kept), so that
    brackets, commas and colons inside them are never mistaken for code.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.regions = _scan_regions(text)
        chars = list(text)
        for start, end, kind in self.regions:
            first, last = (start, end - 1) if kind == "string" else (-1, -1)
            for k in range(start, end):
                if k not in (first, last) and chars[k] != "\n":
                    chars[k] = " "
        self.masked = "".join(chars)

    # -- Primitive queries -------------------------------------------------

    def code(self, start: int, end: int) -> str:
        """Source between ``start`` and ``end`` without comments, whitespace collapsed."""
        pieces: list[str] = []
        cursor = start
        for r_start, r_end, kind in self.regions:
            if kind != "comment" or r_end <= start or r_start >= end:
                continue
            pieces.append(self.text[cursor:max(r_start, cursor)])
            cursor = max(cursor, r_end)
        pieces.append(self.text[cursor:end])
        return " ".join("".join(pieces).split())

    def match_close(self, open_index: int) -> int:
        """Index of the delimiter closing the one at ``open_index``, or -1."""
        stack = [_OPENERS[self.masked[open_index]]]
        for i in range(open_index + 1, len(self.masked)):
            ch = self.masked[i]
            if ch in _OPENERS:
                stack.append(_OPENERS[ch])
            elif ch in _CLOSERS:
                if ch != stack[-1]:
                    return -1
                stack.pop()
                if not stack:
                    return i
        return -1

    def top_level(self, start: int, end: int) -> Iterator[int]:
        """Yield indices in ``[start, end)`` outside brackets and type arguments.

        ``<`` opens type arguments only when it directly follows an identifier,
        as in ``Map<String, dynamic>``. Any character that cannot appear in a
        type argument list, such as ``:`` or ``=``, closes them again.
        """
        depth = 0
        angles = 0
        for i in range(start, end):
            ch = self.masked[i]
            if ch in _OPENERS:
                depth += 1
            elif ch in _CLOSERS:
                depth -= 1
            elif depth:
                continue
            elif ch == "<" and i > 0 and _is_identifier_char(self.masked[i - 1]):
                angles += 1
            elif ch == ">" and angles:
                angles -= 1
            else:
                if angles and not (_is_identifier_char(ch) or ch in _TYPE_ARGUMENT_PUNCTUATION):
                    angles = 0
                if not angles:
                    yield i

    def line_indent(self, index: int) -> str:
        """Leading whitespace of the line containing ``index``."""
        line_start = self.text.rfind("\n", 0, index) + 1
        line = self.text[line_start:index]
        return line[: len(line) - len(line.lstrip())]

    # -- Literals ----------------------------------------------------------

    def find_literal(self, signature: LiteralSignature) -> LiteralNode | None:
        """Locate and parse the literal introduced by ``signature``."""
        match = signature.pattern.search(self.masked)
        if match is None:
            return None
        open_index = match.end() - 1
        close_index = self.match_close(open_index)
        if close_index < 0:
            return None

        segments: list[tuple[int, int]] = []
        seg_start = open_index + 1
        for i in self.top_level(open_index + 1, close_index):
            if self.masked[i] == ",":
                segments.append((seg_start, i))
                seg_start = i + 1
        segments.append((seg_start, close_index))

        entries: list[LiteralEntry] = []
        for seg_start, seg_end in segments:
            code = self.code(seg_start, seg_end)
            if not code:
                continue
            entries.append(
                LiteralEntry(
                    start=seg_start,
                    end=seg_end,
                    code=code,
                    key=self._entry_key(seg_start, seg_end, signature.kind),
                )
            )

        needs_comma_at: int | None = None
        last_start, last_end = segments[-1]
        last_masked = self.masked[last_start:last_end]
        if last_masked.strip():
            needs_comma_at = last_start + len(last_masked.rstrip())

        indent = self.line_indent(match.start())
        entry_indent = indent + "  "
        if entries:
            first = entries[0]
            offset = len(self.masked[first.start:first.end]) - len(
                self.masked[first.start:first.end].lstrip()
            )
            if "\n" in self.text[first.start:first.start + offset]:
                entry_indent = self.line_indent(first.start + offset)

        return LiteralNode(
            signature=signature,
            start=match.start(),
            open=open_index,
            close=close_index,
            entries=tuple(entries),
            needs_comma_at=needs_comma_at,
            indent=indent,
            entry_indent=entry_indent,
        )

    def _entry_key(self, start: int, end: int, kind: LiteralKind) -> str:
        if kind is LiteralKind.MAP:
            for i in self.top_level(start, end):
                if self.masked[i] == ":":
                    return self.code(start, i)
        return self.code(start, end)

    def append_entries(self, node: LiteralNode, new_entries: list[str]) -> str:
        """Return the text with ``new_entries`` inserted before ``node.close``."""
        body_end = node.open + 1 + len(self.text[node.open + 1:node.close].rstrip())
        if node.needs_comma_at is not None:
            head = (
                self.text[:node.needs_comma_at]
                + ","
                + self.text[node.needs_comma_at:body_end]
            )
        else:
            head = self.text[:body_end]
        addition = "".join(f"\n{node.entry_indent}{entry}," for entry in new_entries)
        return f"{head}{addition}\n{node.indent}{self.text[node.close:]}"

    # -- Router calls ------------------------------------------------------

    def calls(self, callee: str) -> list[str]:
        """Normalised text of every ``callee(...)`` call outside comments."""
        found: list[str] = []
        pattern = re.compile(rf"{re.escape(callee)}\s*\(")
        for match in pattern.finditer(self.masked):
            close = self.match_close(match.end() - 1)
            if close >= 0:
                found.append(self.code(match.start(), close + 1))
        return found


def entry_key(entry: str, kind: LiteralKind) -> str:
    """Key of a rendered entry, computed the same way as for parsed entries."""
    source = DartSource(entry)
    return source._entry_key(0, len(entry), kind)


# ---------------------------------------------------------------------------
# Patcher
# ---------------------------------------------------------------------------


@dataclass
class _PatchState:
    matched: str | None = None
    already_present: bool = False
    tried: list[str] = field(default_factory=list)


class RegistrationPatcher:
    """Applies ``RegistrationEdit`` objects to files of a ``FileSystem``.

    A file is only written when an entry is actually added; a failed match
    leaves it untouched.
    """

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs

    def load(self, path: str) -> str:
        if not self.fs.exists(path):
            return ""
        return self.fs.read_text(path)

    def patch(
        self,
        path: str,
        import_line: str,
        transform: Callable[[str], str | None],
    ) -> bool:
        """Rewrite ``path`` through ``transform`` and prepend ``import_line``.

        Returns ``False`` without writing when the import line is already in
        the file or when ``transform`` returns ``None`` (no change needed).
        """
        original = self.load(path)
        if import_line in original:
            return False

        updated = transform(original)
        if updated is None:
            return False

        self.fs.write_text(path, f"{import_line}\n{updated}")
        return True

    def apply(self, edit: RegistrationEdit, strict: bool = False) -> PatchOutcome:
        """Append the edit's entries to the first matching literal.

        Args:
            edit: The registration to apply.
            strict: Raise ``RegistrationPatternNotFound`` instead of
                returning a ``PATTERN_NOT_FOUND`` outcome.
        """
        state = _PatchState()

        def transform(text: str) -> str | None:
            source = DartSource(text)
            for rule in edit.rules:
                state.tried.append(rule.signature.name)
                node = source.find_literal(rule.signature)
                if node is None:
                    continue
                state.matched = rule.signature.name
                missing: list[str] = []
                for entry in rule.entries:
                    key = entry_key(entry, rule.signature.kind)
                    if not node.contains(key) and key not in (
                        entry_key(m, rule.signature.kind) for m in missing
                    ):
                        missing.append(entry)
                if not missing:
                    state.already_present = True
                    return None
                return source.append_entries(node, missing)
            return None

        if self.patch(edit.target, edit.import_line, transform):
            return PatchOutcome(edit.target, PatchStatus.APPLIED, state.matched)
        if state.already_present or not state.tried:
            # Either the entries exist already or the import line did.
            return PatchOutcome(edit.target, PatchStatus.ALREADY_APPLIED, state.matched)
        if strict:
            raise RegistrationPatternNotFound(edit.target, state.tried)
        return PatchOutcome(edit.target, PatchStatus.PATTERN_NOT_FOUND)

    def apply_router(
        self, path: str, import_line: str, route_call: str
    ) -> PatchOutcome:
        """Add ``route_call`` before the final ``});`` of the router file.

        The call is skipped when an identical ``router.add(...)`` call is
        already registered. Whitespace before the closing ``});`` is
        collapsed and the file ends with exactly one newline, so repeated
        runs do not accumulate blank lines.
        """
        original = self.load(path)
        source = DartSource(original)
        call = route_call.rstrip().rstrip(";")
        callee = call.split("(", 1)[0].strip()
        normalized = " ".join(call.split())
        if normalized in source.calls(callee):
            return PatchOutcome(path, PatchStatus.ALREADY_APPLIED, "router")

        closing = source.masked.rfind("});")
        if closing < 0:
            return PatchOutcome(path, PatchStatus.PATTERN_NOT_FOUND)

        indent = source.line_indent(closing)
        head = original[:closing].rstrip()
        tail = original[closing + 3:].rstrip()
        updated = f"{head}\n{indent}  {call};\n{indent}}});{tail}\n"
        if import_line not in original:
            updated = f"{import_line}\n{updated}"
        self.fs.write_text(path, updated)
        return PatchOutcome(path, PatchStatus.APPLIED, "router")
