"""Data models for the land-registry portal client."""
from typing import Any, List, Literal, Tuple, Union
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/115.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_4) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.5 Safari/605.1.15",
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:115.0) Gecko/20100101 Firefox/115.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/115.0.1901.188 Safari/537.36 Edg/115.0.1901.188",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/114.0.5735.199 Safari/537.36 OPR/100.0.4815.54",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 12_6_3) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/114.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:114.0) Gecko/20100101 Firefox/114.0",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.4 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (Linux; Android 13; Pixel 6) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/115.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_4; rv:115.0) Gecko/20100101 Firefox/115.0",
]


class PortalConfig(BaseModel):
    """Connection settings for the land-registry portal."""
    base_url: str = "https://cf.ro"
    timeout: float = 30.0
    requests_per_second: float = 5.0
    user_agents: List[str] = Field(default_factory=lambda: list(DEFAULT_USER_AGENTS))
    token_field_id: str = "orders-stoken"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("user_agents")
    @classmethod
    def _require_user_agents(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("user_agents must not be empty")
        return value

    @property
    def referer(self) -> str:
        return f"{self.base_url}/"


class CityUnit(BaseModel):
    """Administrative unit (UAT) entry from the portal's city list."""
    model_config = ConfigDict(extra="allow")

    name: str
    value: Union[str, int]  # doubles as the location id (lid)


class RecordQuery(BaseModel):
    """Land-book record lookup target."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    county: str
    city_name: str
    city_id: Union[str, int]
    record_number: str
    page_id: str = "1"

    def to_form(self) -> List[Tuple[str, str]]:
        """Form fields in the order the portal expects them."""
        return [
            ("jud", self.county),
            ("uat", self.city_name),
            ("pid", self.page_id),
            ("lid", str(self.city_id)),
            ("cf", self.record_number),
            ("cad", ""),
        ]

    def encode(self) -> str:
        return urlencode(self.to_form())


class UnitsSuccess(BaseModel):
    success: Literal[True] = True
    cities: List[CityUnit]
    token: str


class RecordSuccess(BaseModel):
    success: Literal[True] = True
    data: Any
    city: str
    lid: Union[str, int]
    token: str


class Failure(BaseModel):
    """Failed operation; the message is the only diagnostic."""
    success: Literal[False] = False
    error: str


UnitsResult = Union[UnitsSuccess, Failure]
RecordResult = Union[RecordSuccess, Failure]

