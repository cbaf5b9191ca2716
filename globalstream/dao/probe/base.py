from abc import ABC, abstractmethod


class BaseProbe(ABC):
    @abstractmethod
    def probe(self, url: str, timeout: float) -> bool:
        """Return True when ``url`` answered with a success status within ``timeout`` seconds."""
        pass
