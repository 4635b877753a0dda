"""
Place-name search (query -> coordinates) backed by OpenStreetMap Nominatim.

Results are cached in the tracker DB, keyed by the normalized query, for
48 hours. Please respect the Nominatim usage policy: one request per second
at most and a descriptive User-Agent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from tracker.storage.dao import DAO
from tracker.utils.log import get_logger
from tracker.utils.validate import Place

logger = get_logger(__name__)


class GeocodeError(RuntimeError):
    """The upstream search service failed or answered garbage."""


@dataclass(frozen=True)
class NominatimConfig:
    """Configuration for the Nominatim search API."""

    base_url: str = "https://nominatim.openstreetmap.org/search"
    accept_language: str = "es,en"
    limit: int = 5
    timeout_seconds: float = 10.0
    cache_ttl_seconds: int = 48 * 60 * 60
    user_agent: str = "seasonal-tracker/0.1 (place search)"


def normalize_query(query: str) -> str:
    return query.strip().lower()


def _to_place(item: dict[str, Any]) -> dict[str, Any]:
    return Place(
        display_name=item["display_name"],
        lat=float(item["lat"]),
        lon=float(item["lon"]),
        type=item.get("type"),
        address=item.get("address"),
    ).model_dump()


def nominatim_search_raw(query: str, cfg: NominatimConfig) -> list[dict[str, Any]]:
    """
    Call the Nominatim search endpoint and return the parsed JSON list.

    Raises
    ------
    GeocodeError
        On transport errors, non-2xx answers, or unexpected payloads.
    """
    params = {
        "format": "json",
        "q": query,
        "limit": cfg.limit,
        "addressdetails": 1,
    }
    headers = {
        "User-Agent": cfg.user_agent,
        "Accept-Language": cfg.accept_language,
    }
    try:
        resp = requests.get(cfg.base_url, params=params, headers=headers, timeout=cfg.timeout_seconds)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise GeocodeError(f"Nominatim search failed: {exc}") from exc
    if not isinstance(data, list):
        raise GeocodeError("Nominatim returned an unexpected payload")
    return data


class Geocoder:
    """
    Cached forward geocoder.
    """

    def __init__(self, dao: DAO, config: NominatimConfig | None = None) -> None:
        self._dao = dao
        self._cfg = config or NominatimConfig()

    def search(self, query: str) -> list[Place]:
        """
        Look up places matching `query`.

        Raises
        ------
        ValueError
            If the query is blank.
        GeocodeError
            If the upstream service fails.
        """
        key = normalize_query(query)
        if not key:
            raise ValueError("query must not be empty")

        cached = self._dao.get_cached_geocode(key, self._cfg.cache_ttl_seconds)
        if cached is not None:
            logger.debug("Geocode cache hit for %r", key)
            return [Place(**p) for p in cached]

        logger.info("Geocode cache miss for %r, querying Nominatim", key)
        try:
            results = [_to_place(item) for item in nominatim_search_raw(query.strip(), self._cfg)]
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodeError(f"malformed Nominatim result: {exc}") from exc
        logger.info("Nominatim returned %d results", len(results))
        self._dao.put_cached_geocode(key, results)
        return [Place(**p) for p in results]
