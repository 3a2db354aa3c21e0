"""Repository for per-day analytics counters."""

from dataclasses import dataclass, field
from datetime import date

from redis import Redis

from continuum.models.analytics import ConversionKind, VisitorSession
from continuum.repositories.base import DocumentRepository

PREFIX = "analytics"


@dataclass
class DayCounters:
    """Every counter recorded for one calendar day."""

    day: str
    views: dict[str, int] = field(default_factory=dict)
    bots: dict[str, int] = field(default_factory=dict)
    sources: dict[str, int] = field(default_factory=dict)
    contacts: int = 0
    appointments: int = 0


class AnalyticsRepository(DocumentRepository):
    """Counter keys are ``analytics:<dimension>:...`` with an ISO date segment."""

    def __init__(self, redis: Redis, session_ttl_seconds: int = 1800) -> None:  # type: ignore[type-arg]
        super().__init__(redis)
        self.session_ttl_seconds = session_ttl_seconds

    @staticmethod
    def views_key(day: str, path: str) -> str:
        return f"{PREFIX}:views:{day}:{path}"

    @staticmethod
    def bot_key(bot: str, day: str) -> str:
        return f"{PREFIX}:llm:{bot}:{day}"

    @staticmethod
    def source_key(source: str, day: str) -> str:
        return f"{PREFIX}:sources:{source}:{day}"

    @staticmethod
    def conversion_key(kind: ConversionKind, day: str) -> str:
        return f"{PREFIX}:{kind.value}:{day}"

    @staticmethod
    def session_key(session_id: str) -> str:
        return f"{PREFIX}:session:{session_id}"

    async def increment_page_view(self, path: str, day: str) -> int:
        return int(self.redis.incr(self.views_key(day, path)))

    async def increment_bot_visit(self, bot: str, day: str) -> int:
        return int(self.redis.incr(self.bot_key(bot, day)))

    async def increment_traffic_source(self, source: str, day: str) -> int:
        return int(self.redis.incr(self.source_key(source, day)))

    async def increment_conversion(self, kind: ConversionKind, day: str) -> int:
        return int(self.redis.incr(self.conversion_key(kind, day)))

    async def get_session(self, session_id: str) -> VisitorSession | None:
        return self._load(self.session_key(session_id), VisitorSession)

    async def save_session(self, session_id: str, session: VisitorSession) -> None:
        self._store(self.session_key(session_id), session, ttl_seconds=self.session_ttl_seconds)

    async def read_day(self, day: date | str) -> DayCounters:
        """Collect every counter for a single date.

        Keys are pattern-scanned per dimension and read in sorted key order,
        so repeated reads enumerate counters identically.
        """
        day = day.isoformat() if isinstance(day, date) else day
        counters = DayCounters(day=day)

        views_prefix = f"{PREFIX}:views:{day}:"
        for key, value in self._scan(f"{views_prefix}*"):
            path = key[len(views_prefix):]
            counters.views[path] = counters.views.get(path, 0) + value

        bot_prefix, suffix = f"{PREFIX}:llm:", f":{day}"
        for key, value in self._scan(f"{bot_prefix}*{suffix}"):
            bot = key[len(bot_prefix):-len(suffix)]
            counters.bots[bot] = counters.bots.get(bot, 0) + value

        source_prefix = f"{PREFIX}:sources:"
        for key, value in self._scan(f"{source_prefix}*{suffix}"):
            source = key[len(source_prefix):-len(suffix)]
            counters.sources[source] = counters.sources.get(source, 0) + value

        counters.contacts = self._read_int(self.conversion_key(ConversionKind.CONTACT, day))
        counters.appointments = self._read_int(
            self.conversion_key(ConversionKind.APPOINTMENT, day)
        )
        return counters

    def _scan(self, pattern: str) -> list[tuple[str, int]]:
        keys = sorted(set(self.redis.scan_iter(match=pattern, count=500)))
        if not keys:
            return []
        values = self.redis.mget(keys)
        return [(key, _to_int(value)) for key, value in zip(keys, values, strict=True)]

    def _read_int(self, key: str) -> int:
        return _to_int(self.redis.get(key))


def _to_int(value: str | None) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0
