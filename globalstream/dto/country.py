import dataclasses
from typing import List


@dataclasses.dataclass
class CountryEntity:
    name: str
    code: str
    languages: List[str] = dataclasses.field(default_factory=list)
    flag: str = ""
