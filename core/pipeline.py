"""
core/pipeline.py -- Country enrichment through the TTL cache.

No side effects beyond the cache. Called by the enrichment routes in
api/routes/v1/countries.py; both functions take the cache and settings
explicitly so tests can pass their own.

Codes reaching this module are already normalized by
travel.models.normalize_country_code at the route boundary.
"""

from typing import Optional

from cache.store import TTLCache
from core.config import Settings
from core.fetcher import fetch_country_info, fetch_country_news
from core.models import Article, CountryInfoResult, CountryNewsResult

NEWS_NOT_CONFIGURED = "News not configured. Set GNEWS_API_KEY to enable news."


def news_search_term(code: str, country_name: Optional[str] = None) -> str:
    """Search by "<name> country" when a name is known; fall back to the bare code."""
    name = (country_name or "").strip()
    return f"{name} country" if name else code


def get_country_info(code: str, cache: TTLCache, settings: Settings) -> CountryInfoResult:
    """Return cached-or-fresh REST Countries data for code.

    Raises UpstreamNotFound if REST Countries does not know the code; any other
    upstream failure yields an empty result with a note.
    """
    lookup = cache.get_or_fetch(
        f"info:{code}",
        settings.country_info_ttl_seconds,
        lambda: fetch_country_info(code, timeout=settings.upstream_timeout_seconds),
        empty={},
    )
    return CountryInfoResult(code=code, info=lookup.value, note=lookup.note)


def get_country_news(
    code: str,
    cache: TTLCache,
    settings: Settings,
    country_name: Optional[str] = None,
) -> CountryNewsResult:
    """Return cached-or-fresh GNews articles for code.

    Without GNEWS_API_KEY no upstream call is made and nothing is cached.
    The cache key includes the search term because the same code can be
    searched under different display names.
    """
    if not settings.gnews_api_key:
        return CountryNewsResult(code=code, articles=[], note=NEWS_NOT_CONFIGURED)

    term = news_search_term(code, country_name)
    lookup = cache.get_or_fetch(
        f"news:{code}:{term.lower()}",
        settings.country_news_ttl_seconds,
        lambda: fetch_country_news(term, settings.gnews_api_key, timeout=settings.upstream_timeout_seconds),
        empty=[],
    )
    articles: list[Article] = lookup.value
    return CountryNewsResult(code=code, articles=articles, note=lookup.note)
