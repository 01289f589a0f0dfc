from datetime import datetime, timedelta, timezone


class Clock:
    """Supplies the current time as naive UTC and formats it for display.

    display_offset_hours is added to stored timestamps before they are
    rendered (e.g. -3 for Brasilia time). Stored values are never shifted.
    """

    def __init__(self, display_offset_hours: int = 0):
        self.display_offset = timedelta(hours=display_offset_hours)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def format_time(self, ts: datetime) -> str:
        return (ts + self.display_offset).strftime('%H:%M:%S')

    def format_datetime(self, ts: datetime) -> str:
        return (ts + self.display_offset).strftime('%d/%m/%Y %H:%M:%S')
