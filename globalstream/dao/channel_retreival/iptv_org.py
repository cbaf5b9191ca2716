import logging
from typing import List, Optional

import requests

from globalstream.dao.channel_retreival.base import BaseChannelRetrieval
from globalstream.dto.channel import ChannelRecord
from globalstream.dto.country import CountryEntity
from globalstream.parsing.m3u import parse_playlist

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://iptv-org.github.io"


class IptvOrgChannelSource(BaseChannelRetrieval):
    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 60) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def retreive_countries(self) -> List[CountryEntity]:
        url = f"{self.base_url}/api/countries.json"

        try:
            logger.debug(f"Requesting countries from {url}")
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            countries = response.json()
        except requests.RequestException as e:
            logger.error(f"HTTP error while retrieving countries: {e}")
            return []
        except ValueError as e:
            logger.error(f"Failed to parse JSON from countries response: {e}")
            return []

        result: List[CountryEntity] = []
        for country in countries:
            code = (country.get("code") or "").strip()
            if not code:
                continue
            result.append(
                CountryEntity(
                    name=(country.get("name") or code).strip(),
                    code=code,
                    languages=list(country.get("languages") or []),
                    flag=country.get("flag") or "",
                )
            )

        logger.info(f"Retrieved {len(result)} countries")
        return result

    def fetch_playlist_text(self, country_code: str) -> Optional[str]:
        """Download the raw M3U for a country; None when it cannot be fetched."""
        url = f"{self.base_url}/iptv/countries/{country_code.strip().lower()}.m3u"

        try:
            logger.debug(f"Requesting playlist from {url}")
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Could not fetch channels for {country_code}: {e}")
            return None

        return response.text

    def retreive_channels_by_country(
        self, country_code: str, secure_context: bool = False
    ) -> List[ChannelRecord]:
        text = self.fetch_playlist_text(country_code)
        if text is None:
            return []

        channels = parse_playlist(text, secure_context=secure_context)
        logger.info(f"Retrieved {len(channels)} playable channels for {country_code}")
        return channels
