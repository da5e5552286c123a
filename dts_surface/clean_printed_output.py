"""Cosmetic cleanup of printed declaration text."""

import re

# A block comment opened on the same line as preceding code.
INLINE_BLOCK_COMMENT_RE = re.compile(r"(\S)[ \t]+(/\*)")

# "@privateRemarks" up to the next tag or the comment close.
PRIVATE_REMARKS_RE = re.compile(r"(\s*\*)\s*@privateRemarks[\s\S]*?((?: @|\*/))")

# The empty " *" line left behind when a comment ends with the removed block.
EMPTY_COMMENT_TAIL_RE = re.compile(r"(\*\n[ ]+)\*\*/")


def break_inline_comments(text: str) -> str:
    """Move block comments that follow code onto their own line."""
    return INLINE_BLOCK_COMMENT_RE.sub(r"\1\n\2", text)


def strip_private_remarks(text: str) -> str:
    """Remove @privateRemarks blocks from documentation comments."""
    text = PRIVATE_REMARKS_RE.sub(r"\1\2", text)
    return EMPTY_COMMENT_TAIL_RE.sub("*/", text)


def clean_printed_output(text: str) -> str:
    """Apply both cleanup passes to printed declaration text."""
    return strip_private_remarks(break_inline_comments(text))
