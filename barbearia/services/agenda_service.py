from __future__ import annotations

from datetime import date, datetime, time, timedelta


def parse_data_hora(value: str | datetime | None) -> datetime:
    """Parse an ISO-8601 value into a naive local datetime.

    - Accepts datetime instances (returned as-is when naive).
    - Accepts full ISO strings, with or without offset; a trailing 'Z' is
      treated as UTC.
    - Timezone-aware values are converted to the server's local time and
      stripped of tzinfo, since agendamentos are stored as local wall time.
    """
    if value is None:
        raise ValueError("value is None")

    if isinstance(value, datetime):
        dt = value
    else:
        value = str(value).strip()
        if not value:
            raise ValueError("empty datetime value")
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        dt = datetime.fromisoformat(value)

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def parse_data(value: str | date | None) -> date:
    """Parse 'YYYY-MM-DD' (or a date/datetime) into a date."""
    if value is None:
        raise ValueError("value is None")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = str(value).strip()
    if not value:
        raise ValueError("empty date value")
    # Aceita também timestamps completos, descartando o horário
    return date.fromisoformat(value[:10])


def format_dt_iso(dt: datetime | None) -> str | None:
    """Format a naive local datetime as 'YYYY-MM-DDTHH:MM:SS'."""
    if dt is None:
        return None
    return dt.replace(microsecond=0).isoformat()


def gerar_grade_horarios(
    dia: date,
    abertura: int = 8,
    fechamento: int = 18,
    intervalo_minutos: int = 30,
) -> list[datetime]:
    """Retorna os horários de início da grade do dia, em [abertura, fechamento)."""
    inicio = datetime.combine(dia, time(hour=abertura))
    fim = datetime.combine(dia, time(hour=fechamento))
    passo = timedelta(minutes=intervalo_minutos)
    slots: list[datetime] = []
    atual = inicio
    while atual < fim:
        slots.append(atual)
        atual += passo
    return slots
