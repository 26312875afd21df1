"""Markdown note parsing: task and tag extraction.

The parser reads a note line by line and recovers just enough of its block
structure (lists, list items, block quotes, paragraphs, headings, code and
raw HTML) to tell which list items are tasks and which sit under a ``tags:``
label. Each note produces a stream of blocks in document order:

- ``ITEM``: a list item, with its trimmed text and the line it starts on
- ``TEXT``: one line of paragraph, heading or list item text
- ``LIST_END``: a list has closed

A ``TEXT`` block equal to ``tags:`` opens the tags section; the next
``LIST_END`` closes it. Items inside the section are tags, everything else
goes to task extraction.

Block quote contents, Obsidian callouts included, are scanned like a
document of their own, so list items inside a quote are found too. Raw HTML
blocks are opaque: nothing inside them is a list item.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator
from datetime import date
from enum import Enum
from pathlib import Path
from typing import NamedTuple

import frontmatter
import yaml

from an.core.tags import TagHandler
from an.core.tasks import TaskHandler
from an.models import NoteEntry
from an.utils.paths import normalize_path, vault_relative_components
from an.utils.patterns import (
    BLANK_LINE_PATTERN,
    BLOCK_QUOTE_PATTERN,
    CODE_FENCE_PATTERN,
    FULFILLED_PATTERN,
    HEADING_PATTERN,
    HTML_BLOCK_RULES,
    HTML_TAG_LINE_PATTERN,
    LIST_ITEM_PATTERN,
    NOTE_LINK_PATTERN,
    TAGS_MARKER,
    THEMATIC_BREAK_PATTERN,
)

_logger = logging.getLogger(__name__)

NOTE_EXTENSION = ".md"
TAB_WIDTH = 4


class BlockKind(Enum):
    ITEM = "item"
    TEXT = "text"
    LIST_END = "list_end"


class Block(NamedTuple):
    kind: BlockKind
    text: str = ""
    line: int = 0


class _List:
    """An open list and the content column of its current item."""

    __slots__ = ("kind", "marker_indent", "content_indent")

    def __init__(self, kind: str, marker_indent: int, content_indent: int) -> None:
        self.kind = kind
        self.marker_indent = marker_indent
        self.content_indent = content_indent


def _expand_indent(line: str) -> str:
    """Expand tabs in the leading whitespace of ``line`` to 4-column stops."""
    body = line.lstrip(" \t")
    if "\t" not in line[: len(line) - len(body)]:
        return line
    column = 0
    for char in line[: len(line) - len(body)]:
        column = column + TAB_WIDTH - column % TAB_WIDTH if char == "\t" else column + 1
    return " " * column + body


def _list_kind(bullet: str) -> str:
    # "-", "*" and "+" each start their own list; ordered lists split on the delimiter
    return bullet if bullet in "-*+" else bullet[-1]


def _html_block(text: str, paragraph_open: bool) -> tuple[bool, re.Pattern[str] | None]:
    """Check whether ``text`` starts a raw HTML block.

    Returns ``(starts, end)`` where ``end`` is the pattern that closes the
    block on a later line, or None when it already closed on this one.
    """
    for start, end in HTML_BLOCK_RULES:
        match = start.match(text)
        if match:
            if end is not BLANK_LINE_PATTERN and end.search(text, match.end()):
                return True, None
            return True, end
    if not paragraph_open and HTML_TAG_LINE_PATTERN.match(text):
        return True, BLANK_LINE_PATTERN
    return False, None


def iter_blocks(source: str) -> Iterator[Block]:
    """Yield the structural blocks of a Markdown document in order."""
    lines = [(line_num, raw.rstrip("\r")) for line_num, raw in enumerate(source.split("\n"), 1)]
    yield from _scan(lines)


def _scan(lines: list[tuple[int, str]]) -> Iterator[Block]:
    """Scan numbered lines; block quote contents are scanned recursively."""
    lists: list[_List] = []
    item_line = 0
    item_lines: list[str] | None = None
    paragraph_open = False
    blank_before = False
    fence: str | None = None
    html_end: re.Pattern[str] | None = None

    def flush_item() -> Iterator[Block]:
        nonlocal item_lines
        if item_lines is None:
            return
        text_lines, item_lines = item_lines, None
        yield Block(BlockKind.ITEM, "\n".join(text_lines).strip(), item_line)
        for text in text_lines:
            if text.strip():
                yield Block(BlockKind.TEXT, text.strip(), item_line)

    def close_lists(keep: int) -> Iterator[Block]:
        yield from flush_item()
        while len(lists) > keep:
            lists.pop()
            yield Block(BlockKind.LIST_END)

    def containing(indent: int) -> int:
        """Number of open lists whose current item contains a line at ``indent``."""
        depth = 0
        for entry in lists:
            if indent < entry.content_indent:
                break
            depth += 1
        return depth

    position = 0
    while position < len(lines):
        line_num, raw = lines[position]
        position += 1
        line = _expand_indent(raw)

        if fence is not None:
            closing = CODE_FENCE_PATTERN.match(line)
            if (
                closing
                and closing.group("fence")[0] == fence[0]
                and len(closing.group("fence")) >= len(fence)
                and not line[closing.end() :].strip()
            ):
                fence = None
            continue

        if html_end is not None:
            if not html_end.search(line):
                continue
            html_end = None
            # A blank line ending the block is still a blank line
            if line.strip():
                continue

        stripped = line.strip()
        if not stripped:
            yield from flush_item()
            paragraph_open = False
            blank_before = True
            continue

        indent = len(line) - len(line.lstrip(" "))
        depth = containing(indent)
        base = lists[depth - 1].content_indent if depth else 0
        was_blank, blank_before = blank_before, False

        # Indented code: never interrupts a paragraph
        if indent - base >= 4 and not paragraph_open:
            yield from close_lists(depth)
            continue

        quote = BLOCK_QUOTE_PATTERN.match(line[base:]) if indent - base < 4 else None
        if quote:
            yield from close_lists(depth)
            quoted = [(line_num, line[base:][quote.end() :])]
            while position < len(lines):
                next_num, next_raw = lines[position]
                next_line = _expand_indent(next_raw)
                if next_line[:base].strip():
                    break
                next_quote = BLOCK_QUOTE_PATTERN.match(next_line[base:])
                if not next_quote:
                    break
                quoted.append((next_num, next_line[base:][next_quote.end() :]))
                position += 1
            yield from _scan(quoted)
            paragraph_open = False
            continue

        fence_match = CODE_FENCE_PATTERN.match(line)
        if fence_match and indent - base < 4:
            yield from close_lists(depth)
            fence = fence_match.group("fence")
            paragraph_open = False
            continue

        starts_html, html_block_end = (
            _html_block(line[base:], paragraph_open) if indent - base < 4 else (False, None)
        )
        if starts_html:
            yield from close_lists(depth)
            paragraph_open = False
            html_end = html_block_end
            continue

        if THEMATIC_BREAK_PATTERN.match(line[base:]):
            yield from close_lists(depth)
            paragraph_open = False
            continue

        heading = HEADING_PATTERN.match(line[base:])
        if heading:
            yield from close_lists(depth)
            text = (heading.group("text") or "").strip()
            if text:
                yield Block(BlockKind.TEXT, text, line_num)
            paragraph_open = False
            continue

        item = LIST_ITEM_PATTERN.match(line)
        if item and indent - base < 4:
            bullet = item.group("bullet")
            text = item.group("text")
            kind = _list_kind(bullet)
            sibling = depth < len(lists) and lists[depth].kind == kind
            opens_list = not sibling
            # Only a non-empty bullet item or an ordered item starting at 1 can interrupt a paragraph
            interrupts = bool(text.strip()) and (kind in "-*+" or bullet[:-1].lstrip("0") == "1")
            if not (paragraph_open and opens_list and not interrupts):
                gap = len(item.group("gap").expandtabs(TAB_WIDTH))
                if gap == 0 or gap > 4:
                    gap = 1
                content_indent = indent + len(bullet) + gap

                if sibling:
                    yield from close_lists(depth + 1)
                    lists[depth].content_indent = content_indent
                else:
                    yield from close_lists(depth)
                    lists.append(_List(kind, indent, content_indent))

                item_line = line_num
                item_lines = [text] if text.strip() else []
                paragraph_open = bool(text.strip())
                continue

        # Paragraph text
        if paragraph_open and not was_blank:
            if item_lines is not None:
                keep = min(indent, lists[-1].content_indent) if lists else indent
                item_lines.append(line[keep:].rstrip())
            else:
                yield Block(BlockKind.TEXT, stripped, line_num)
            continue

        if item_lines is not None and not item_lines and depth == len(lists) and lists:
            # First text of an item whose marker line was empty
            item_line = line_num
            item_lines.append(line[lists[-1].content_indent :].rstrip())
            paragraph_open = True
            continue

        yield from close_lists(depth)
        yield Block(BlockKind.TEXT, stripped, line_num)
        paragraph_open = True

    yield from close_lists(0)


class NoteParser:
    """Extracts tasks and tags from the Markdown notes under a root.

    Example:
        parser = NoteParser(vault_dir, ignore_dirs=[".git"])
        parser.walk()
        for task_id, task in parser.task_handler.sort_by_id():
            ...
    """

    def __init__(
        self,
        root: Path | str = "",
        ignore_dirs: Iterable[str] = (),
        today: date | None = None,
    ) -> None:
        self.root = Path(root) if root else None
        self.ignore_dirs = set(ignore_dirs)
        self.task_handler = TaskHandler(today=today)
        self.tag_handler = TagHandler()

    def walk(self) -> None:
        """Parse every ``.md`` file under the root.

        Unreadable files are logged and skipped. Errors listing a directory
        propagate as ``OSError``.
        """
        if self.root is None:
            raise ValueError("NoteParser has no root to walk")
        walk_tree(self.root, self, ignore_dirs=self.ignore_dirs)

    def parse(self, path: Path | str) -> None:
        """Parse one note, feeding its list items to the task or tag handler.

        Raises:
            OSError: If the file cannot be read.
        """
        note_path = normalize_path(os.path.abspath(path))
        source = Path(note_path).read_text(encoding="utf-8", errors="replace")
        self.parse_text(source, note_path)

    def parse_text(self, source: str, path: str = "") -> None:
        in_tags_section = False
        for block in iter_blocks(source):
            if block.kind is BlockKind.ITEM:
                if in_tags_section:
                    self.tag_handler.parse_tag(block.text)
                else:
                    self.task_handler.parse_task(block.text, path, block.line)
            elif block.kind is BlockKind.TEXT:
                if block.text == TAGS_MARKER:
                    in_tags_section = True
            elif block.kind is BlockKind.LIST_END:
                in_tags_section = False


def _raise_walk_error(error: OSError) -> None:
    raise error


def iter_note_files(root: Path, ignore_dirs: Iterable[str] = ()) -> Iterator[Path]:
    """Yield every ``.md`` file under ``root`` in a stable order.

    Directories named in ``ignore_dirs`` are pruned. Errors listing a
    directory propagate as ``OSError``.
    """
    if root.is_file():
        if root.suffix == NOTE_EXTENSION:
            yield root
        return

    ignored = set(ignore_dirs)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames[:] = sorted(d for d in dirnames if d not in ignored)
        for filename in sorted(filenames):
            # Exact extension match: "notes.MD" is not a note
            if os.path.splitext(filename)[1] == NOTE_EXTENSION:
                yield Path(dirpath) / filename


def walk_tree(root: Path, parser: NoteParser, ignore_dirs: Iterable[str] = ()) -> int:
    """Run ``parser`` over every note under ``root``.

    Returns:
        Number of notes parsed successfully.
    """
    parsed = 0
    for path in iter_note_files(root, ignore_dirs):
        try:
            parser.parse(path)
        except OSError as e:
            _logger.warning("Skipping %s: %s", path, e)
            continue
        parsed += 1
    return parsed


def has_note_links(content: str) -> bool:
    """Check whether ``content`` contains at least one ``[[...]]`` link."""
    return NOTE_LINK_PATTERN.search(content) is not None


def check_fulfillment(content: str, check: str) -> bool:
    """Compare a note's ``fulfilled:`` flag with ``check`` ("true" or "false").

    Notes without the flag match neither value.
    """
    match = FULFILLED_PATTERN.search(content)
    if match:
        return match.group(1) == check
    return False


def parse_front_matter(content: str) -> tuple[str, list[str]]:
    """Extract the note filename and tags from YAML front matter.

    Returns ``("<title>.md", tags)``. Content without front matter, or with
    front matter that is not valid YAML, yields ``("", [])``.
    """
    try:
        post = frontmatter.loads(content)
    except yaml.YAMLError:
        return "", []

    if not post.metadata:
        return "", []

    tags = post.metadata.get("tags") or []
    if isinstance(tags, str) or not isinstance(tags, list):
        return "", []

    title = post.metadata.get("title") or ""
    return f"{title}{NOTE_EXTENSION}".strip(), [str(tag) for tag in tags]


def find_orphans(root: Path, ignore_dirs: Iterable[str] = ()) -> list[Path]:
    """List the notes under ``root`` that contain no ``[[...]]`` links."""
    orphans = []
    for path in iter_note_files(root, ignore_dirs):
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            _logger.warning("Skipping %s: %s", path, e)
            continue
        if not has_note_links(content):
            orphans.append(path)
    return orphans


def find_by_fulfillment(root: Path, check: str, ignore_dirs: Iterable[str] = ()) -> list[Path]:
    """List the notes under ``root`` whose ``fulfilled:`` flag equals ``check``."""
    matches = []
    for path in iter_note_files(root, ignore_dirs):
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            _logger.warning("Skipping %s: %s", path, e)
            continue
        if check_fulfillment(content, check):
            matches.append(path)
    return matches


def list_notes(root: Path, ignore_dirs: Iterable[str] = ()) -> list[NoteEntry]:
    """Describe every note under ``root`` by folder, title and front matter tags.

    The title comes from front matter and falls back to the file name.
    Unreadable notes are logged and skipped.
    """
    entries = []
    for path in iter_note_files(root, ignore_dirs):
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            _logger.warning("Skipping %s: %s", path, e)
            continue

        folder, name = vault_relative_components(root, path)
        if not name:
            folder, name = "", path.name

        title, tags = parse_front_matter(content)
        title = title.removesuffix(NOTE_EXTENSION) or path.name
        entries.append(NoteEntry(path=path, folder=folder, name=name, title=title, tags=tags))
    return entries
