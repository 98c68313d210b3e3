from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """DB保存用の現在時刻 (UTC, tzinfoなし)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """タイムゾーン付き日時をUTCのnaive datetimeに揃える。naiveはUTCとみなす"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
