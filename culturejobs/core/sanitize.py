"""Reduce scraped HTML fragments to a small, safe subset.

Two independent passes over a parsed tree:

1. ``filter_allowed`` keeps only the allow-listed tags, and on ``<a>`` only
   ``href``/``title`` with an http(s)/mailto (or relative) target.
2. ``fix_up_markup`` re-parses that output, drops ``class``/``style``/``on*``
   attributes, delinks anchors without a usable href and pins ``rel`` on the
   others.

``sanitize_html`` chains both and collapses fragments with no visible text to "".
"""
from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction, Tag
from bs4.formatter import HTMLFormatter

from .normalize import normalize_text, strip_html_to_text

ALLOWED_TAGS = frozenset({"p", "br", "ul", "ol", "li", "strong", "em", "a"})
ALLOWED_ATTRIBUTES = {"a": frozenset({"href", "title"})}
ALLOWED_SCHEMES = frozenset({"http", "https", "mailto"})
# Removed together with everything inside them
DROP_WITH_CONTENT = frozenset({"script", "style", "textarea", "noscript", "option", "iframe", "head", "title"})
LINK_REL = "noopener noreferrer nofollow"

_SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.\-]*):", re.I)
_CONTROL_RE = re.compile(r"[\x00-\x20]+")
_NON_MARKUP = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


class _SourceOrderFormatter(HTMLFormatter):
    """Minimal entity escaping; attributes in the order they were set, so `rel` stays last."""

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


OUTPUT_FORMATTER = _SourceOrderFormatter(entity_substitution=EntitySubstitution.substitute_xml)


def _href_allowed(href: str) -> bool:
    compact = _CONTROL_RE.sub("", href)
    if compact.startswith("//"):
        return False
    m = _SCHEME_RE.match(compact)
    if m is None:
        return True  # relative URL
    return m.group(1).lower() in ALLOWED_SCHEMES


def _filter_attributes(tag: Tag) -> None:
    allowed = ALLOWED_ATTRIBUTES.get(tag.name, frozenset())
    for name in list(tag.attrs):
        if name.lower() not in allowed:
            del tag.attrs[name]
    href = tag.attrs.get("href")
    if isinstance(href, str) and not _href_allowed(href):
        del tag.attrs["href"]


def _filter_children(node: Tag) -> None:
    for child in list(node.children):
        if isinstance(child, _NON_MARKUP):
            child.extract()
            continue
        if not isinstance(child, Tag):
            continue
        name = (child.name or "").lower()
        if name in DROP_WITH_CONTENT:
            child.decompose()
            continue
        _filter_children(child)
        if name in ALLOWED_TAGS:
            _filter_attributes(child)
        else:
            child.unwrap()


def filter_allowed(raw_html: Optional[str]) -> str:
    """Pass 1: allow-list tags and attributes."""
    if not raw_html:
        return ""
    soup = BeautifulSoup(raw_html, "html.parser")
    _filter_children(soup)
    return soup.decode_contents(formatter=OUTPUT_FORMATTER).strip()


def fix_up_markup(html: Optional[str]) -> str:
    """Pass 2: strip presentation/event attributes and normalize links."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(True):
        for name in list(tag.attrs):
            lowered = name.lower()
            if lowered in ("class", "style") or lowered.startswith("on"):
                del tag.attrs[name]
        if tag.name != "a":
            continue
        href = tag.get("href")
        if not normalize_text(href if isinstance(href, str) else None):
            tag.replace_with(tag.get_text())
            continue
        tag["rel"] = LINK_REL
    return soup.decode_contents(formatter=OUTPUT_FORMATTER).strip()


def sanitize_html(raw_html: Optional[str]) -> str:
    cleaned = fix_up_markup(filter_allowed(raw_html))
    if not cleaned or not strip_html_to_text(cleaned):
        return ""
    return cleaned
