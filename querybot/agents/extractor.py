"""
Query extraction from free-form model replies.

This is a syntactic heuristic, not a SQL parser. A reply is expected to carry
its statement either in a fenced code block (optionally tagged with a
language name) or as free text starting at ``SELECT``.

Known ambiguities:
    - Only the first fenced block is considered; a query placed in a later
      block is not recovered.
    - A ``SELECT`` token inside unrelated prose is accepted as-is. The text is
      not checked for well-formed SQL; a bad statement fails at execution.
    - The language tag is any word right after the opening fence. A block
      with no tag and no line break, such as ```` ```SELECT * FROM t``` ````,
      loses its first word to the tag and yields ``* FROM t``.
"""

import re

FENCE = "```"
SELECT_TOKEN = "SELECT"

_FENCED_BLOCK_RE = re.compile(r"```(\w+)?\s([\s\S]+?)```")


def extract_code_block(text: str) -> str | None:
    """
    Pull a candidate query out of model text.

    Returns the content of the first fenced block verbatim (callers trim),
    else the substring from the first ``SELECT`` to the end of the text,
    else None. Text that opens a fence but never forms a complete block
    yields None.
    """
    if FENCE not in text:
        start = text.find(SELECT_TOKEN)
        if start == -1:
            return None
        return text[start:]

    match = _FENCED_BLOCK_RE.search(text)
    if match is None:
        return None
    return match.group(2)
