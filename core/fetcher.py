"""
fetcher.py -- All external data fetching.

REST Countries is free and keyless. GNews needs GNEWS_API_KEY (free tier,
100 requests/day) -- see core.config.Settings.gnews_api_key.

Unlike a best-effort fetcher that returns None, these functions raise:
  UpstreamNotFound -- the provider answered 404 for this country
  UpstreamError    -- network failure, timeout, non-2xx, or unparseable body
The TTL cache decides what a failure means for the caller; the fetcher only
reports it.
"""

import logging
from typing import Any

import requests

from core.errors import UpstreamError, UpstreamNotFound
from core.models import Article

logger = logging.getLogger("travelglobe.fetcher")

REST_COUNTRIES_API = "https://restcountries.com/v3.1/alpha/{code}"
GNEWS_API = "https://gnews.io/api/v4/search"

# REST Countries v3.1 requires an explicit field list on /alpha lookups.
COUNTRY_FIELDS = (
    "name,flags,coatOfArms,capital,population,area,region,subregion,languages,currencies,"
    "timezones,borders,continents,maps,car,unMember,startOfWeek,capitalInfo,latlng,tld"
)

# Module-level session shared across all fetcher calls for connection pooling.
# max_redirects=3 replaces the requests default of 30 -- these are known public APIs,
# 3 hops is generous and protects against open redirect / SSRF via redirect chains.
_session = requests.Session()
_session.max_redirects = 3


def fetch_country_info(code: str, timeout: float = 10) -> dict[str, Any]:
    """Fetch descriptive data for an ISO-2 code from REST Countries."""
    url = REST_COUNTRIES_API.format(code=code)
    try:
        resp = _session.get(url, params={"fields": COUNTRY_FIELDS}, timeout=timeout)
        if resp.status_code == 404:
            raise UpstreamNotFound(detail=f"REST Countries has no entry for {code}.")
        resp.raise_for_status()
        data = resp.json()
    except requests.RequestException as e:
        logger.warning("REST Countries fetch failed for %s: %s", code, e)
        raise UpstreamError("Country info temporarily unavailable.", detail=str(e)) from e
    except ValueError as e:
        logger.warning("REST Countries returned invalid JSON for %s: %s", code, e)
        raise UpstreamError("Country info temporarily unavailable.", detail=str(e)) from e
    # /alpha/{code} occasionally answers with a one-element list.
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        raise UpstreamError("Country info temporarily unavailable.", detail="Unexpected payload shape.")
    return data


def fetch_country_news(query: str, api_key: str, timeout: float = 10, max_articles: int = 6) -> list[Article]:
    """Search GNews for recent English-language articles matching query."""
    params = {"q": query, "lang": "en", "max": str(max_articles), "apikey": api_key}
    try:
        resp = _session.get(GNEWS_API, params=params, timeout=timeout)
        if not resp.ok:
            # Body may describe quota exhaustion; log it, never forward it.
            logger.warning("GNews API error %d: %s", resp.status_code, resp.text[:200])
            raise UpstreamError("News temporarily unavailable.", detail=f"HTTP {resp.status_code}")
        raw = resp.json()
    except requests.RequestException as e:
        logger.warning("GNews fetch failed for %r: %s", query, e)
        raise UpstreamError("News temporarily unavailable.", detail=str(e)) from e
    except ValueError as e:
        logger.warning("GNews returned invalid JSON for %r: %s", query, e)
        raise UpstreamError("News temporarily unavailable.", detail=str(e)) from e
    if not isinstance(raw, dict):
        raise UpstreamError("News temporarily unavailable.", detail="Unexpected payload shape.")
    return [_to_article(a) for a in raw.get("articles") or [] if isinstance(a, dict)]


def _to_article(raw: dict[str, Any]) -> Article:
    source = raw.get("source")
    source_name = source.get("name") if isinstance(source, dict) else None
    return Article(
        title=raw.get("title") or "",
        description=raw.get("description"),
        url=raw.get("url") or "",
        image=raw.get("image"),
        published_at=raw.get("publishedAt"),
        source=source_name or "Unknown",
    )
