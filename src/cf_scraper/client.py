"""Session-scoped query client for the land-registry portal."""
import json
import logging
from typing import Any, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .errors import PortalError, UpstreamDataError
from .models import (
    CityUnit,
    Failure,
    PortalConfig,
    RecordQuery,
    RecordResult,
    RecordSuccess,
    UnitsResult,
    UnitsSuccess,
)
from .session import PortalSession, SessionManager
from .token import extract_token

logger = logging.getLogger(__name__)

_CITY_LIST = TypeAdapter(List[CityUnit])

DEFAULT_COUNTY = "ALBA"
DEFAULT_CITY_NAME = "Alba Iulia"
DEFAULT_RECORD_NUMBER = "100002"
DEFAULT_PAGE_ID = "1"


class CadastralClient:
    """Looks up administrative units and land-book records on the portal.

    Every operation loads the homepage for a fresh token before calling the
    AJAX endpoint. Listing units keeps the session (and its cookies) for the
    next call; a record query is the last step of a lookup, so the session is
    dropped as soon as the search POST has answered.
    """

    def __init__(
        self,
        config: Optional[PortalConfig] = None,
        sessions: Optional[SessionManager] = None,
    ):
        self.config = config or PortalConfig()
        self.sessions = sessions or SessionManager(self.config)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self.sessions.close()

    async def invalidate_session(self) -> None:
        """Force the next operation to start from a new session and cookie jar."""
        await self.sessions.close()

    async def fetch_token(self, session: PortalSession) -> str:
        """Load the homepage through ``session`` and pull the stoken out of it."""
        response = await session.get("/")
        token = extract_token(response.text, self.config.token_field_id)
        logger.debug(f"Fetched stoken {token}")
        return token

    async def list_units(self, county: str) -> UnitsResult:
        """List the administrative units (cities) of a county."""
        try:
            async with self.sessions.lease() as session:
                token = await self.fetch_token(session)
                response = await session.get(f"/ajax/uats/{county}/{token}")
                cities = self._parse_cities(response.text)
        except PortalError as e:
            logger.warning(f"Listing units for {county} failed: {e}")
            return Failure(error=str(e))

        logger.info(f"Found {len(cities)} units in {county}")
        return UnitsSuccess(cities=cities, token=token)

    async def query_record(
        self,
        county: str,
        city_name: str,
        city_id: Union[str, int],
        record_number: str,
        page_id: str = DEFAULT_PAGE_ID,
    ) -> RecordResult:
        """Search one land-book record; ``city_id`` is sent as the portal's location id."""
        try:
            query = RecordQuery(
                county=county,
                city_name=city_name,
                city_id=city_id,
                record_number=record_number,
                page_id=page_id,
            )
            async with self.sessions.lease() as session:
                token = await self.fetch_token(session)
                response = await session.post_form(f"/ajax/searchCF/{token}", query.encode())
                await self.sessions.invalidate()
            response.raise_for_status()
            data = self._decode_payload(response.text)
        except ValidationError as e:
            fields = ", ".join(dict.fromkeys(str(err["loc"][0]) for err in e.errors()))
            logger.warning(f"Rejected record query {county}/{city_name}/{record_number}: invalid {fields}")
            return Failure(error=f"Invalid record query: {fields}")
        except PortalError as e:
            logger.warning(f"Record query {county}/{city_name}/{record_number} failed: {e}")
            return Failure(error=str(e))

        logger.info(f"Record {record_number} in {city_name} ({county}) retrieved")
        return RecordSuccess(data=data, city=city_name, lid=query.city_id, token=token)

    async def lookup_record(
        self,
        county: str,
        city_name: str,
        record_number: str,
        page_id: str = DEFAULT_PAGE_ID,
    ) -> RecordResult:
        """Resolve ``city_name`` within ``county`` and query the record there."""
        units = await self.list_units(county)
        if not units.success:
            return units

        unit = self.match_unit(units.cities, city_name)
        if unit is None:
            message = f"City {city_name!r} not found in county {county}"
            logger.warning(message)
            return Failure(error=message)

        return await self.query_record(county, unit.name, unit.value, record_number, page_id)

    async def run_default_search(self) -> RecordResult:
        """Look up the built-in sample record."""
        return await self.lookup_record(
            DEFAULT_COUNTY, DEFAULT_CITY_NAME, DEFAULT_RECORD_NUMBER, DEFAULT_PAGE_ID
        )

    @staticmethod
    def match_unit(cities: List[CityUnit], city_name: str) -> Optional[CityUnit]:
        wanted = city_name.strip().casefold()
        for city in cities:
            if city.name.strip().casefold() == wanted:
                return city
        return None

    @staticmethod
    def _parse_cities(body: str) -> List[CityUnit]:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise UpstreamDataError(f"Unit list is not valid JSON: {e}") from e

        if not isinstance(payload, dict) or "cities" not in payload:
            raise UpstreamDataError("Unit list response has no 'cities' field")

        try:
            return _CITY_LIST.validate_python(payload["cities"])
        except ValidationError as e:
            raise UpstreamDataError(f"Malformed 'cities' field: {e.error_count()} invalid entries") from e

    @staticmethod
    def _decode_payload(body: str) -> Any:
        # the search payload is opaque; keep raw text when it is not JSON
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            return body
