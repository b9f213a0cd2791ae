"""ClinicalTrials.gov API v2 search.

Builds a disjunctive condition query from the extracted symptoms and
condition, filters by a single location token, and returns at most
``page_size`` raw study records.

API docs: https://clinicaltrials.gov/data-api/api
No authentication required.

Uses aiohttp instead of httpx because ClinicalTrials.gov blocks httpx's
TLS fingerprint.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from health_assistant.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5


def build_condition_query(symptoms: list[str], condition: str | None) -> str:
    """OR-join every symptom and the condition, e.g. ``"cough OR asthma"``."""
    terms = [s.strip() for s in symptoms if s and s.strip()]
    if condition and condition.strip():
        terms.append(condition.strip())
    return " OR ".join(terms)


def location_token(location: str | None) -> str | None:
    """First whitespace token of the location, treated as a country name."""
    if not location:
        return None
    parts = location.split()
    return parts[0] if parts else None


class TrialFinder:
    def __init__(
        self,
        base_url: str = "https://clinicaltrials.gov/api/v2",
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout_seconds: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout_seconds = timeout_seconds
        self.session = session

    @classmethod
    def from_settings(cls, settings: Settings) -> TrialFinder:
        return cls(
            base_url=settings.ctgov_api_base,
            page_size=min(settings.trials_page_size, DEFAULT_PAGE_SIZE),
            timeout_seconds=settings.trials_timeout_seconds,
        )

    async def _get(self, path: str, params: dict[str, Any]) -> dict:
        """Make a GET request to the ClinicalTrials.gov API."""
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        if self.session is not None:
            async with self.session.get(
                f"{self.base_url}{path}", params=params, timeout=timeout
            ) as resp:
                resp.raise_for_status()
                return await resp.json()

        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"{self.base_url}{path}", params=params, timeout=timeout
            ) as resp:
                resp.raise_for_status()
                return await resp.json()

    async def find_trials(
        self,
        symptoms: list[str],
        location: str | None,
        condition: str | None,
    ) -> list[dict]:
        """Search for studies matching any symptom or the condition near ``location``.

        Returns:
            Up to ``page_size`` raw study records. Empty list when there is
            nothing to search for or on any upstream error.
        """
        query = build_condition_query(symptoms, condition)
        country = location_token(location)
        if not query or not country:
            logger.info(
                "Skipping trial search (query=%r, location=%r)", query, location
            )
            return []

        params: dict[str, Any] = {
            "format": "json",
            "query.cond": query,
            "query.locn": country,
            "pageSize": self.page_size,
        }

        try:
            data = await self._get("/studies", params)
        except aiohttp.ClientResponseError as exc:
            logger.error(
                "ClinicalTrials.gov API HTTP error %s for cond=%r locn=%r: %s",
                exc.status,
                query,
                country,
                exc,
            )
            return []
        except asyncio.TimeoutError:
            logger.error("ClinicalTrials.gov API timed out for cond=%r locn=%r", query, country)
            return []
        except Exception as exc:
            logger.error(
                "Error searching trials for cond=%r locn=%r: %s", query, country, exc
            )
            return []

        studies = data.get("studies") if isinstance(data, dict) else None
        if not isinstance(studies, list):
            logger.error("Unexpected ClinicalTrials.gov payload for cond=%r", query)
            return []

        results = [s for s in studies if isinstance(s, dict)][: self.page_size]
        logger.info("Found %d trials for cond=%r locn=%r", len(results), query, country)
        return results
