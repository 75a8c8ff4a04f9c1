"""
Utilidades para manejo de fechas y horas.
"""
from datetime import datetime, timezone
from typing import Any, Optional


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""

    @staticmethod
    def now_utc() -> datetime:
        """
        Obtiene la fecha y hora actual en UTC.

        Returns:
            datetime: Fecha y hora actual en UTC
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """
        Normaliza datetime a UTC (aware).

        SQLite devuelve datetimes naive aunque la columna sea timezone=True;
        normalizamos para comparar/ordenar de forma consistente.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def from_iso_string(iso_string: Any) -> Optional[datetime]:
        """
        Convierte un string ISO 8601 (acepta sufijo 'Z') a datetime UTC.

        Args:
            iso_string: String en formato ISO 8601

        Returns:
            Optional[datetime]: Objeto datetime o None si hay error
        """
        if not isinstance(iso_string, str) or not iso_string.strip():
            return None
        try:
            dt = datetime.fromisoformat(iso_string.strip().replace("Z", "+00:00"))
        except (ValueError, TypeError):
            return None
        return DateTimeUtils.ensure_utc(dt)

    @staticmethod
    def from_epoch(value: Any) -> Optional[datetime]:
        """
        Convierte un epoch (segundos o milisegundos, numero o string) a datetime UTC.

        Valores mayores a 10^11 se interpretan como milisegundos.
        """
        try:
            seconds = float(str(value).strip())
        except (ValueError, TypeError):
            return None
        if seconds != seconds:  # NaN
            return None
        if seconds > 100_000_000_000:
            seconds = seconds / 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
