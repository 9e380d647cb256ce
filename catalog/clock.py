from datetime import datetime, timezone

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class SystemClock:
    """Wall-clock time source used for loan and return timestamps."""

    def now_iso(self) -> str:
        return datetime.now(timezone.utc).strftime(ISO_FORMAT)
