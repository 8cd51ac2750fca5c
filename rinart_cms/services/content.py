"""
Project content helpers.

Projects keep their long-form description in a single JSON column shaped as
``{"body": [...], "bodyHtml": "...", "facts": [{"label", "value"}], "seo": {...}}``.
Every section is optional; empty sections are dropped and a document with no
sections at all is stored as NULL. These helpers build, clean and take apart
that document, and parse the loosely typed JSON columns written by older
versions of the admin panel.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

SEO_KEYS = ("title", "description", "keywords", "ogImage")

_TAG_PATTERN = re.compile(r"<[^>]+>")
_PARAGRAPH_SPLIT = re.compile(r"\n|</p>", re.IGNORECASE)


@dataclass
class ContentParts:
    """Sections of a project content document, with empty defaults."""

    body: list[str] = field(default_factory=list)
    facts: list[dict[str, str]] = field(default_factory=list)
    seo: dict[str, Any] | None = None
    html: str = ""


def ensure_string_list(value: Any) -> list[str]:
    """Trimmed non-empty strings from a list, or from a comma separated string."""

    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def ensure_facts(value: Any) -> list[dict[str, str]]:
    if not isinstance(value, (list, tuple)):
        return []
    facts: list[dict[str, str]] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        label, fact_value = item.get("label"), item.get("value")
        if not isinstance(label, str) or not isinstance(fact_value, str):
            continue
        facts.append({"label": label, "value": fact_value})
    return facts


def normalise_nullable(value: Any) -> str | None:
    """Empty or missing values become None; everything else becomes a string."""

    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return str(value)


def _trim_or_none(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def build_seo_payload(
    *,
    title: str | None = None,
    description: str | None = None,
    keywords: list[str] | None = None,
    og_image: str | None = None,
) -> dict[str, Any] | None:
    payload: dict[str, Any] = {}
    if trimmed := _trim_or_none(title):
        payload["title"] = trimmed
    if trimmed := _trim_or_none(description):
        payload["description"] = trimmed
    cleaned_keywords = ensure_string_list(keywords or [])
    if cleaned_keywords:
        payload["keywords"] = cleaned_keywords
    if trimmed := _trim_or_none(og_image):
        payload["ogImage"] = trimmed
    return payload or None


def build_content(
    body: list[str],
    facts: list[dict[str, str]],
    seo: dict[str, Any] | None = None,
    html: str | None = None,
) -> dict[str, Any] | None:
    """Assemble a content document, returning None when every section is empty."""

    trimmed_html = (html or "").strip()
    payload: dict[str, Any] = {}
    if body:
        payload["body"] = list(body)
    if trimmed_html:
        payload["bodyHtml"] = trimmed_html
    if facts:
        payload["facts"] = [dict(fact) for fact in facts]
    if seo:
        payload["seo"] = dict(seo)
    return payload or None


def normalise_seo(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None
    return build_seo_payload(
        title=value.get("title"),
        description=value.get("description"),
        keywords=ensure_string_list(value.get("keywords")),
        og_image=value.get("ogImage"),
    )


def normalise_project_content(content: Any) -> dict[str, Any] | None:
    """Clean a content document before it is written to the database."""

    if not isinstance(content, dict) or not content:
        return None

    body_raw = content.get("body")
    body = (
        [item.strip() for item in body_raw if isinstance(item, str) and item.strip()]
        if isinstance(body_raw, list)
        else []
    )

    facts: list[dict[str, str]] = []
    for fact in ensure_facts(content.get("facts")):
        label, value = fact["label"].strip(), fact["value"].strip()
        if label or value:
            facts.append({"label": label, "value": value})

    html = content.get("bodyHtml") if isinstance(content.get("bodyHtml"), str) else ""
    return build_content(body, facts, normalise_seo(content.get("seo")), html)


def parse_content(content: Any) -> ContentParts:
    """Split a stored content document back into its sections."""

    if not isinstance(content, dict):
        return ContentParts()
    body = content.get("body")
    html = content.get("bodyHtml")
    return ContentParts(
        body=[item for item in body if isinstance(item, str)] if isinstance(body, list) else [],
        facts=ensure_facts(content.get("facts")),
        seo=normalise_seo(content.get("seo")),
        html=html if isinstance(html, str) else "",
    )


def html_to_paragraphs(html: str) -> list[str]:
    """Plain text paragraphs extracted from rich text markup."""

    paragraphs = (_TAG_PATTERN.sub("", chunk).strip() for chunk in _PARAGRAPH_SPLIT.split(html))
    return [paragraph for paragraph in paragraphs if paragraph]


def parse_json_value(value: Any, fallback: Any) -> Any:
    """Decode a JSON column that may hold decoded data, a JSON string or nothing."""

    if value is None:
        return fallback
    if not isinstance(value, (str, bytes)):
        return value
    raw = value.decode() if isinstance(value, bytes) else value
    if not raw.strip():
        return fallback
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("content.json_parse_failed", preview=raw[:80])
        return fallback


def parse_string_list_column(value: Any) -> list[str]:
    """Read a list column stored as a JSON array, a JSON string or comma separated text."""

    if value is None:
        return []
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    raw = value.decode() if isinstance(value, bytes) else str(value)
    trimmed = raw.strip()
    if not trimmed:
        return []
    if trimmed[0] in "[{\"":
        try:
            parsed = json.loads(trimmed)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [item.strip() for item in parsed if isinstance(item, str) and item.strip()]
        if isinstance(parsed, str):
            return ensure_string_list(parsed)
    return ensure_string_list(trimmed)
