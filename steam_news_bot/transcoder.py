"""Steam BBCode to Telegram MarkdownV2 transcoder.

The conversion is an ordered list of pure text passes. Link constructs are
swapped for alphanumeric placeholders before escaping so that their URLs
survive untouched, then restored and rewritten as MarkdownV2 links.
"""

import re

VIDEO_NOTICE = (
    "(This update contains video. To watch the video, go to the official website.)"
)

PLACEHOLDER_PREFIX = "PLACEHOLDER"
PLACEHOLDER_SUFFIX = "END"

# Characters that MarkdownV2 requires to be escaped in plain text
SPECIAL_CHARS = frozenset("_*()~`>#-|{}.!")

URL_PATTERN = re.compile(r"\[url=([^\]]+)\]([^\[]+)\[/url\]")
TABLE_PATTERN = re.compile(r"\[table\].*?\[\\?/table\]", re.DOTALL)
IMG_PATTERN = re.compile(r"\[img\].*?\[\\?/img\]", re.DOTALL)
PREVIEW_PATTERN = re.compile(r"\[previewyoutube.*?\]", re.DOTALL)
PLACEHOLDER_PATTERN = re.compile(rf"{PLACEHOLDER_PREFIX}([0-9]+){PLACEHOLDER_SUFFIX}")

# Applied in order; "[*][b]" must run before "[*]"
TOKEN_REPLACEMENTS = (
    ("[/h1]", "*"),
    ("[\\/h1]", "*"),
    ("[/h2]", "*"),
    ("[\\/h2]", "*"),
    ("[/h3]", "*"),
    ("[\\/h3]", "*"),
    ("[/h5]", "*"),
    ("[\\/h5]", "*"),
    ("[list]", ""),
    ("[/list]", ""),
    ("[\\/list]", ""),
    ("[*][b]", "🔸*"),
    ("[\\/b]", "*"),
    ("[/b]", "*"),
    ("[*]", "📌"),
    ("[strike]", "~"),
    ("[\\/strike]", "~"),
    ("[/strike]", "~"),
    ("[\\/previewyoutube]", ""),
    ("[/previewyoutube]", ""),
)


def remove_tables(text: str) -> str:
    return TABLE_PATTERN.sub("", text)


def remove_images(text: str) -> str:
    return IMG_PATTERN.sub("", text)


def replace_video_previews(text: str) -> str:
    return PREVIEW_PATTERN.sub(VIDEO_NOTICE, text)


def protect_links(text: str) -> tuple[str, list[str]]:
    """Replace every link construct with a positional placeholder.

    Args:
        text: Body text

    Returns:
        Tuple of the rewritten text and the original fragments, indexed by
        placeholder number
    """
    fragments: list[str] = []

    def _stash(match: re.Match) -> str:
        fragments.append(match.group(0))
        return f"{PLACEHOLDER_PREFIX}{len(fragments) - 1}{PLACEHOLDER_SUFFIX}"

    return URL_PATTERN.sub(_stash, text), fragments


def replace_tokens(text: str) -> str:
    for token, replacement in TOKEN_REPLACEMENTS:
        text = text.replace(token, replacement)
    return text


def escape_markdown(text: str) -> str:
    """Prefix every MarkdownV2 special character with a backslash."""
    return "".join(f"\\{char}" if char in SPECIAL_CHARS else char for char in text)


def restore_links(text: str, fragments: list[str]) -> str:
    """Put the original fragments back in place of their placeholders.

    Placeholders carry a terminator, so a link followed by digits in the
    body, or ``PLACEHOLDER1END`` next to ``PLACEHOLDER10END``, resolves to
    the right fragment.
    Tokens whose index has no recorded fragment are left as they are.
    """
    if not fragments:
        return text

    def _restore(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(fragments):
            return fragments[index]
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_restore, text)


def rewrite_links(text: str) -> str:
    return URL_PATTERN.sub(r"[\2](\1)", text)


def transcode(body: str) -> str:
    """Convert a BBCode event body into escaped Telegram MarkdownV2.

    Args:
        body: Event body in Steam bracket markup

    Returns:
        MarkdownV2 text with links rewritten as ``[label](target)``
    """
    text = remove_tables(body)
    text = remove_images(text)
    text = replace_video_previews(text)
    text, fragments = protect_links(text)
    text = replace_tokens(text)
    text = escape_markdown(text)
    text = restore_links(text, fragments)
    return rewrite_links(text)
