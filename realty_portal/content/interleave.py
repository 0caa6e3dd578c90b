"""
Spread uploaded images through a body of text.

Blog posts and listing descriptions are written as plain paragraphs;
images attached to them are placed between paragraphs at even intervals
so that long texts are not followed by one block of pictures.

Inserted tags carry a ``data-inline-image`` marker. Edits strip the
marked tags first and lay the current image list out again, so repeated
saves never duplicate images.
"""

from __future__ import annotations

import html
import re
from typing import Iterable, List, Sequence

INLINE_MARKER = 'data-inline-image="true"'

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_INLINE_TAG = re.compile(r"<img\b[^>]*\bdata-inline-image=\"true\"[^>]*/?>", re.IGNORECASE)


def split_paragraphs(text: str) -> List[str]:
    """Non-empty paragraphs of ``text``, split on blank lines."""
    return [part.strip() for part in _PARAGRAPH_SPLIT.split(text or "") if part.strip()]


def image_tag(url: str, alt_text: str = "") -> str:
    return f'<img src="{html.escape(url, quote=True)}" alt="{html.escape(alt_text, quote=True)}" {INLINE_MARKER} />'


def insertion_points(paragraph_count: int, image_count: int) -> List[int]:
    """Paragraph index after which each image goes.

    Image ``i`` (0-based) follows paragraph ``floor((i + 1) * n / (m + 1))``,
    clamped to ``1..n``, which spaces ``m`` images evenly over ``n`` paragraphs.
    """
    if paragraph_count <= 0:
        return [0] * image_count
    points = []
    for i in range(image_count):
        position = ((i + 1) * paragraph_count) // (image_count + 1)
        points.append(min(max(position, 1), paragraph_count))
    return points


def strip_inline_images(text: str) -> str:
    """Remove previously inserted image tags and the blank lines they leave."""
    without_tags = _INLINE_TAG.sub("", text or "")
    return "\n\n".join(split_paragraphs(without_tags))


def distribute_images(text: str, images: Iterable[str], alt_text: str = "") -> str:
    """Interleave ``images`` into ``text``.

    Args:
        text: Paragraphs separated by blank lines
        images: Image URLs in display order; URLs already present in the
            text are skipped
        alt_text: ``alt`` attribute for the inserted tags (usually the title)

    Returns:
        The text with image tags placed between paragraphs
    """
    text = text or ""
    base = strip_inline_images(text) if _INLINE_TAG.search(text) else text
    pending: Sequence[str] = [url for url in dict.fromkeys(u for u in images if u) if url not in base]
    if not pending:
        return base

    paragraphs = split_paragraphs(base)
    tags = [image_tag(url, alt_text) for url in pending]
    if not paragraphs:
        return "\n\n".join(tags)

    placed: List[List[str]] = [[] for _ in paragraphs]
    for tag, point in zip(tags, insertion_points(len(paragraphs), len(tags))):
        placed[point - 1].append(tag)

    blocks: List[str] = []
    for paragraph, after in zip(paragraphs, placed):
        blocks.append(paragraph)
        blocks.extend(after)
    return "\n\n".join(blocks)
