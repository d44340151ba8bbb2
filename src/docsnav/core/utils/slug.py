"""Slug generation and docs path helpers"""

import re


DOCS_PREFIX = "/docs/"

_TAG_RE = re.compile(r'<[^>]*>')


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug (HTML tags dropped)."""
    text = _TAG_RE.sub('', text.lower())
    text = re.sub(r'[^a-z0-9]+', '-', text)
    return text.strip('-')


def doc_path(slug: str) -> str:
    """Canonical NavRoute path for a slug: '/docs/{slug}'."""
    return f"{DOCS_PREFIX}{slug.strip('/')}"


def path_to_slug(path: str) -> str:
    """Strip the '/docs/' prefix from a NavRoute path."""
    if path.startswith(DOCS_PREFIX):
        return path[len(DOCS_PREFIX):]
    return path.lstrip('/')


def section_label(slug: str) -> str | None:
    """Humanized first segment of a nested slug ('getting-started/intro' -> 'Getting Started')."""
    parts = slug.split('/')
    if len(parts) < 2:
        return None
    return ' '.join(w.capitalize() for w in parts[0].split('-') if w)
