from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

PLACEHOLDER = "—"

COLOR_SUCCESS = 0x2ECC71
COLOR_WARNING = 0xF1C40F
COLOR_FAILURE = 0xE74C3C


class ReportField(BaseModel):
    name: str
    value: str
    inline: bool = False


class Report(BaseModel):
    kind: str
    title: str
    description: str = ""
    fields: list[ReportField] = Field(default_factory=list)
    footer: str | None = None
    color: int | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def add_field(self, name: str, value: object | None, inline: bool = True) -> "Report":
        text = "" if value is None else str(value)
        self.fields.append(ReportField(name=name, value=text or PLACEHOLDER, inline=inline))
        return self

    def to_embed(self) -> dict:
        embed: dict = {
            "title": self.title,
            "description": self.description,
            "fields": [field.model_dump() for field in self.fields],
            "timestamp": self.timestamp.isoformat(),
        }
        if self.color is not None:
            embed["color"] = self.color
        if self.footer:
            embed["footer"] = {"text": self.footer}
        return embed

    def as_text(self) -> str:
        lines = [self.description] if self.description else []
        lines.extend(f"{field.name}: {field.value}" for field in self.fields)
        return "\n".join(lines)
