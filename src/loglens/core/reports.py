"""JSON-facing report models returned by the adapters."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .models import ClassificationResult, ScanResult
from .scanning import count_summary, format_status
from .tailing import Appended, TailEvent, TailFailed, Truncated


class LineRangeModel(BaseModel):
    line: int = Field(ge=0, description="0-based line index.")
    start: int = Field(ge=0, description="First character column.")
    end: int = Field(ge=0, description="End character column (exclusive).")


class ClassificationReport(BaseModel):
    levels: list[str] = Field(
        default_factory=list,
        description="Every matched level, most severe first (a line may match several).",
    )
    primary: str | None = Field(default=None, description="Most severe matched level, used for counting.")

    @classmethod
    def from_result(cls, result: ClassificationResult) -> ClassificationReport:
        return cls(
            levels=[level.value for level in result.levels],
            primary=result.primary.value if result.primary is not None else None,
        )


class ScanReport(BaseModel):
    counts: dict[str, int] = Field(description="Lines per primary level.")
    ranges: dict[str, list[LineRangeModel]] = Field(description="Decoration ranges per level.")
    status: str = Field(description="Status bar text, e.g. 'E:1 W:0 I:2'.")
    tooltip: str

    @classmethod
    def from_result(cls, result: ScanResult) -> ScanReport:
        status, tooltip = format_status(result.counts)
        return cls(
            counts=count_summary(result.counts),
            ranges={
                level.value: [LineRangeModel(line=r.line, start=r.start, end=r.end) for r in spans]
                for level, spans in result.ranges.items()
            },
            status=status,
            tooltip=tooltip,
        )


class TailEventReport(BaseModel):
    kind: Literal["appended", "truncated", "failed"]
    path: str
    text: str | None = Field(default=None, description="Appended content (utf-8, invalid bytes replaced).")
    size: int | None = Field(default=None, description="Appended byte count, or new size after truncation.")
    error: str | None = None

    @classmethod
    def from_event(cls, event: TailEvent) -> TailEventReport:
        if isinstance(event, Appended):
            return cls(
                kind="appended",
                path=event.path,
                text=event.data.decode("utf-8", errors="replace"),
                size=len(event.data),
            )
        if isinstance(event, Truncated):
            return cls(kind="truncated", path=event.path, size=event.size)
        if isinstance(event, TailFailed):
            return cls(kind="failed", path=event.path, error=str(event.error))
        raise TypeError(f"Unknown tail event: {event!r}")
