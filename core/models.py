from dataclasses import dataclass, field
from typing import Any, Optional

# ---------------------------------------------------------------------------
# Enrichment results
#
# Plain dataclasses owned by core/. api/models.py maps them onto the HTTP
# contract; the pipeline never builds responses itself.
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Article:
    title: str = ""
    description: Optional[str] = None
    url: str = ""
    image: Optional[str] = None
    published_at: Optional[str] = None
    source: str = "Unknown"


@dataclass
class CountryInfoResult:
    """Descriptive data for one country. info is empty when the upstream failed."""

    code: str
    info: dict[str, Any] = field(default_factory=dict)
    note: Optional[str] = None


@dataclass
class CountryNewsResult:
    """Recent articles for one country. articles is empty when unavailable."""

    code: str
    articles: list[Article] = field(default_factory=list)
    note: Optional[str] = None
