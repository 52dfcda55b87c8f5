"""
Thin client for the football-data.org v4 API, used to import a matchday's
fixtures into a round.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from scoreline.config import settings

logger = logging.getLogger(__name__)


class FootballDataError(Exception):
    """Upstream failure, already translated to the status code our API should answer with."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class FootballDataClient:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.football_data_api_key
        self.base_url = (base_url or settings.football_data_base_url).rstrip("/")

    def get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            logger.error("FOOTBALL_DATA_API_KEY is not configured")
            raise FootballDataError(500, "Server configuration error.")

        url = f"{self.base_url}/{path}"
        try:
            r = requests.get(url, params=params, headers={"X-Auth-Token": self.api_key}, timeout=20)
        except requests.RequestException as e:
            logger.error(f"Could not reach football-data.org at {url}: {e}")
            raise FootballDataError(500, "Failed to connect to external API.")

        if r.status_code >= 400:
            raise self._translate_error(r)
        return r.json()

    @staticmethod
    def _translate_error(response: requests.Response) -> FootballDataError:
        status = response.status_code
        try:
            upstream_message = response.json().get("message")
        except ValueError:
            upstream_message = None
        logger.error(f"football-data.org answered {status}: {upstream_message or response.text[:200]}")

        if status == 403:
            return FootballDataError(500, "External API access denied. Check API key or subscription plan.")
        if status == 404:
            return FootballDataError(404, "Competition or matchday not found on external API.")
        message = upstream_message or "Error fetching data from external API."
        return FootballDataError(400 if status < 500 else 502, f"External API Error ({status}): {message}")

    def fetch_matchday(self, competition_code: str, matchday: int) -> List[Dict[str, Any]]:
        """Matches of one matchday mapped to fixture rows (home_team, away_team, match_time)"""
        data = self.get(f"competitions/{competition_code}/matches", {"matchday": matchday})
        matches = data.get("matches") or []
        logger.info(f"Fetched {len(matches)} matches for {competition_code} matchday {matchday}")
        if not matches:
            raise FootballDataError(
                404,
                f"No matches found on football-data.org for {competition_code} and matchday {matchday}."
            )

        fixtures = []
        for match in matches:
            home = (match.get("homeTeam") or {}).get("name")
            away = (match.get("awayTeam") or {}).get("name")
            kickoff = match.get("utcDate")
            if home and away and kickoff:
                fixtures.append({"home_team": home, "away_team": away, "match_time": kickoff})
        return fixtures
