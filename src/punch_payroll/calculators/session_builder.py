"""Pairs a worker's IN/OUT punches into work sessions."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable

from punch_payroll.calculators.types import AnomalyKind, Punch, PunchKind, WorkSession, as_utc

_ONE_MS = timedelta(milliseconds=1)


class SessionBuilder:
    """Turns a punch stream into an ordered list of work sessions.

    The builder does not filter by date; callers select the window. Input
    order is not trusted: punches are sorted by timestamp (stable, so equal
    timestamps keep their given order) before pairing.

    Pairing rules, scanning with at most one open session:
    - IN, nothing open: open a session.
    - IN, session open: close the open one as MISSING_OUT (0 ms), open anew.
    - OUT, session open: close it, duration = OUT - IN, valid.
    - OUT, nothing open: emit an OUT-only session as MISSING_IN (0 ms).
    - End of stream with a session open: close it as MISSING_OUT.

    Every punch ends up in exactly one session.
    """

    @staticmethod
    def sort_punches(punches: Iterable[Punch]) -> list[Punch]:
        """Sort punches ascending by instant."""
        return sorted(punches, key=lambda p: as_utc(p.timestamp))

    @classmethod
    def build(cls, punches: Iterable[Punch]) -> list[WorkSession]:
        sessions: list[WorkSession] = []
        open_in: Punch | None = None

        for punch in cls.sort_punches(punches):
            kind = PunchKind(punch.kind)

            if kind is PunchKind.IN:
                if open_in is not None:
                    sessions.append(cls._abandoned(open_in))
                open_in = punch

            elif open_in is not None:
                sessions.append(cls._closed(open_in, punch))
                open_in = None

            else:
                sessions.append(
                    WorkSession(
                        in_event=None,
                        out_event=punch,
                        duration_ms=0,
                        valid=False,
                        anomaly=AnomalyKind.MISSING_IN,
                    )
                )

        if open_in is not None:
            sessions.append(cls._abandoned(open_in))

        return sessions

    @staticmethod
    def _closed(in_event: Punch, out_event: Punch) -> WorkSession:
        elapsed = as_utc(out_event.timestamp) - as_utc(in_event.timestamp)
        duration_ms = max(0, elapsed // _ONE_MS)
        return WorkSession(
            in_event=in_event,
            out_event=out_event,
            duration_ms=duration_ms,
            valid=True,
        )

    @staticmethod
    def _abandoned(in_event: Punch) -> WorkSession:
        return WorkSession(
            in_event=in_event,
            out_event=None,
            duration_ms=0,
            valid=False,
            anomaly=AnomalyKind.MISSING_OUT,
        )
