"""Split task descriptions into plain text and link segments.

The UI renders each segment as its own text span, so user text is never
interpreted as markup.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Union


_URL_RE = re.compile(r"https?://\S+", re.I)
_TRAILING_PUNCTUATION = ".,;:!?)'\""


@dataclass(frozen=True)
class TextSegment:
    text: str


@dataclass(frozen=True)
class LinkSegment:
    url: str

    @property
    def text(self) -> str:
        return self.url


Segment = Union[TextSegment, LinkSegment]


def _append_text(segments: List[Segment], text: str) -> None:
    if not text:
        return
    if segments and isinstance(segments[-1], TextSegment):
        segments[-1] = TextSegment(segments[-1].text + text)
    else:
        segments.append(TextSegment(text))


def _has_host(link: str) -> bool:
    rest = link.split("://", 1)[1]
    return bool(re.split(r"[/?#]", rest, maxsplit=1)[0])


def tokenize(text: Optional[str]) -> List[Segment]:
    segments: List[Segment] = []
    if not text:
        return segments
    pos = 0
    for match in _URL_RE.finditer(text):
        _append_text(segments, text[pos:match.start()])
        url = match.group(0)
        link = url.rstrip(_TRAILING_PUNCTUATION)
        if _has_host(link):
            segments.append(LinkSegment(link))
            _append_text(segments, url[len(link):])
        else:
            _append_text(segments, url)
        pos = match.end()
    _append_text(segments, text[pos:])
    return segments


__all__ = ["LinkSegment", "Segment", "TextSegment", "tokenize"]
