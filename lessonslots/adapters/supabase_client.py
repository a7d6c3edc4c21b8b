"""
Supabase (PostgREST) client for fetching booking data.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests
from pendulum import DateTime

from ..config import SupabaseTables
from ..domain.exceptions import DataSourceError
from ..domain.models import BookingStatus, Lesson, OccupiedInterval
from . import records

logger = logging.getLogger(__name__)

QueryParams = Sequence[Tuple[str, str]]


class SupabaseClient:
    """
    Client for the Supabase REST API.

    Reads the Settings, Lesson, Booking and BlockedSlot tables through the
    ``/rest/v1/<table>`` endpoints using PostgREST filter syntax.
    """

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        url: str,
        api_key: str,
        timezone: str = "Europe/Stockholm",
        tables: SupabaseTables | None = None,
        timeout: int = 30,
        session: requests.Session | None = None,
    ):
        """
        Initialize the Supabase client.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            api_key: Service role or anon key
            timezone: IANA timezone used for day boundaries
            tables: Table names, defaults to the standard schema
            timeout: Request timeout in seconds
            session: Optional requests session (connection reuse, testing)
        """
        self.base_url = f"{url.rstrip('/')}{self.REST_PATH}"
        self.timezone = timezone
        self.tables = tables or SupabaseTables()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    def _get(self, table: str, params: QueryParams) -> List[Dict[str, Any]]:
        """
        Run a GET against a table endpoint.

        Raises:
            DataSourceError: If the request fails or returns something other than a list
        """
        url = f"{self.base_url}/{table}"

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=list(params),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise DataSourceError(f"Failed to fetch {table} from Supabase: {e}") from e
        except ValueError as e:
            raise DataSourceError(f"Supabase returned invalid JSON for {table}: {e}") from e

        if not isinstance(data, list):
            raise DataSourceError(f"Unexpected response for {table}: expected a list of rows")

        return data

    def get_settings(self) -> Dict[str, str]:
        """Return the settings as an upper-cased key -> value mapping."""
        rows = self._get(self.tables.settings, [("select", "category,key,value")])
        return records.settings_to_map(rows)

    def list_lessons(self) -> List[Lesson]:
        """Return active lessons ordered by name."""
        rows = self._get(
            self.tables.lessons,
            [("select", "*"), ("isActive", "eq.true"), ("order", "name.asc")],
        )
        return self._parse_lessons(rows)

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        """Find a lesson by id (active or not)."""
        rows = self._get(
            self.tables.lessons,
            [("select", "*"), ("id", f"eq.{lesson_id}"), ("limit", "1")],
        )
        lessons = self._parse_lessons(rows)
        return lessons[0] if lessons else None

    def get_occupied_bookings(self, day: DateTime) -> List[OccupiedInterval]:
        """Return pending and confirmed bookings on ``day``."""
        statuses = ",".join(sorted(status.value for status in BookingStatus.occupying()))
        params = [
            ("select", "date,startTime,endTime,status"),
            *self._day_filter(day),
            ("status", f"in.({statuses})"),
        ]
        rows = self._get(self.tables.bookings, params)
        return self._parse_intervals(rows, records.BOOKING_SOURCE)

    def get_blocked_slots(self, day: DateTime) -> List[OccupiedInterval]:
        """Return admin-blocked intervals on ``day``."""
        params = [("select", "date,startTime,endTime"), *self._day_filter(day)]
        rows = self._get(self.tables.blocked_slots, params)
        return self._parse_intervals(rows, records.BLOCKED_SOURCE)

    def test_connection(self) -> int:
        """
        Probe the settings table.

        Returns:
            Number of settings found

        Raises:
            DataSourceError: If the endpoint cannot be reached
        """
        return len(self.get_settings())

    def _day_filter(self, day: DateTime) -> List[Tuple[str, str]]:
        """PostgREST filter selecting rows between the start and end of ``day``."""
        local_day = day.in_timezone(self.timezone)
        return [
            ("date", f"gte.{local_day.start_of('day').to_iso8601_string()}"),
            ("date", f"lte.{local_day.end_of('day').to_iso8601_string()}"),
        ]

    @staticmethod
    def _parse_lessons(rows: List[Dict[str, Any]]) -> List[Lesson]:
        lessons: List[Lesson] = []
        for row in rows:
            try:
                lessons.append(records.parse_lesson(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Could not parse lesson row %r: %s", row, exc)
        return lessons

    @staticmethod
    def _parse_intervals(rows: List[Dict[str, Any]], source: str) -> List[OccupiedInterval]:
        intervals: List[OccupiedInterval] = []
        for row in rows:
            try:
                intervals.append(records.parse_interval(row, source))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Could not parse %s row %r: %s", source, row, exc)
        return intervals
