"""Centralized regex patterns for parsing note content.

Every pattern used to read Markdown structure or inline task syntax lives
here so the parser, metadata extraction and file rewriting agree on them.
"""

from __future__ import annotations

import re

# Inline task metadata: @key(value)
METADATA_PATTERN = re.compile(r"@([a-zA-Z0-9_-]+)\(([^)]+)\)")

# Backlink to another note: [[Target]]
BACKLINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")

# Any wiki-style link on a single line, used for orphan detection
NOTE_LINK_PATTERN = re.compile(r"\[\[.+\]\]")

# Front matter style fulfillment flag: "fulfilled: true"
FULFILLED_PATTERN = re.compile(r"^fulfilled:\s*(true|false)$", re.MULTILINE)

# List item: "- text", "* text", "+ text", "1. text", "1) text"
LIST_ITEM_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)(?P<bullet>[-*+]|\d{1,9}[.)])(?P<gap>[ \t]+|$)(?P<text>.*)$"
)

# Checkbox directly after a list bullet, used when rewriting a task line
CHECKBOX_PATTERN = re.compile(
    r"^(?P<prefix>[ \t]*(?:[-*+]|\d{1,9}[.)])[ \t]+)\[(?P<state>[ x])\]"
)

# Fenced code block delimiter
CODE_FENCE_PATTERN = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})")

# ATX heading: "## Heading"
HEADING_PATTERN = re.compile(r"^[ \t]{0,3}(?P<level>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t#]*$")

# Thematic break: "---", "***", "___" (optionally spaced)
THEMATIC_BREAK_PATTERN = re.compile(r"^[ \t]{0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")

# Block quote marker, with the optional space after ">"
BLOCK_QUOTE_PATTERN = re.compile(r"^ {0,3}> ?")

BLANK_LINE_PATTERN = re.compile(r"^\s*$")

_HTML_BLOCK_TAGS = (
    "address|article|aside|base|basefont|blockquote|body|caption|center|col|colgroup|"
    "dd|details|dialog|dir|div|dl|dt|fieldset|figcaption|figure|footer|form|frame|"
    "frameset|h[1-6]|head|header|hr|html|iframe|legend|li|link|main|menu|menuitem|nav|"
    "noframes|ol|optgroup|option|p|param|search|section|summary|table|tbody|td|tfoot|"
    "th|thead|title|tr|track|ul"
)

# Raw HTML blocks: (start, end). The block runs up to and including the
# line the end pattern matches; block-level tags end at a blank line.
HTML_BLOCK_RULES: tuple[tuple[re.Pattern[str], re.Pattern[str]], ...] = (
    (
        re.compile(r"^ {0,3}<(?:script|pre|style|textarea)(?:\s|>|$)", re.IGNORECASE),
        re.compile(r"</(?:script|pre|style|textarea)>", re.IGNORECASE),
    ),
    (re.compile(r"^ {0,3}<!--"), re.compile(r"-->")),
    (re.compile(r"^ {0,3}<\?"), re.compile(r"\?>")),
    (re.compile(r"^ {0,3}<!\[CDATA\["), re.compile(r"\]\]>")),
    (re.compile(r"^ {0,3}<![A-Za-z]"), re.compile(r">")),
    (
        re.compile(rf"^ {{0,3}}</?(?:{_HTML_BLOCK_TAGS})(?:\s|/?>|$)", re.IGNORECASE),
        BLANK_LINE_PATTERN,
    ),
)

# A line holding a single complete open or closing tag. Starts an HTML block
# that ends at a blank line, but cannot interrupt a paragraph.
HTML_TAG_LINE_PATTERN = re.compile(
    r"^ {0,3}(?:<[A-Za-z][A-Za-z0-9-]*"
    r"(?:\s+[A-Za-z_:][\w.:-]*(?:\s*=\s*(?:[^\s\"'=<>`]+|'[^']*'|\"[^\"]*\"))?)*"
    r"\s*/?>|</[A-Za-z][A-Za-z0-9-]*\s*>)\s*$"
)

# RFC3339 timestamp, e.g. 2024-05-20T09:30:00Z or 2024-05-20T09:30:00+02:00
RFC3339_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})$"
)

# Text node that opens a tag list
TAGS_MARKER = "tags:"
