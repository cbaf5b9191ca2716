from abc import ABC, abstractmethod
from typing import List

from globalstream.dto.channel import ChannelRecord
from globalstream.dto.country import CountryEntity


class BaseChannelRetrieval(ABC):
    @abstractmethod
    def retreive_countries(self) -> List[CountryEntity]:
        pass

    @abstractmethod
    def retreive_channels_by_country(
        self, country_code: str, secure_context: bool = False
    ) -> List[ChannelRecord]:
        pass
