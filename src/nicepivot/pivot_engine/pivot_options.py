"""Configuration for the pivot builder.

PivotOptions collects the field names and labels the builder would
otherwise hard-code, so a deployment with different column names or a new
row-field sentinel changes data, not code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from nicepivot.pivot_engine.field_resolver import SYNONYMS
from nicepivot.pivot_engine.sentinels import ROW_SENTINELS, UNKNOWN_LABEL


@dataclass(frozen=True)
class PivotOptions:
    """Options for build_pivot_table().

    Attributes:
        filter_field: Discriminator field compared against categorical_filter
            ("Symptom" vs "Problem" records share one table).
        mention_field: Field holding the optional mention identifier.
        strip_prefix: Literal prefix removed from row labels.
        unknown_label: Row sentinel for row fields without an entry in row_sentinels.
        row_sentinels: Row field -> sentinel label for missing row values.
        synonyms: Alias table passed to the field resolver.
    """
    filter_field: str = "symp_prob"
    mention_field: str = "mention_id"
    strip_prefix: str = "Problem:"
    unknown_label: str = UNKNOWN_LABEL
    row_sentinels: dict[str, str] = field(default_factory=lambda: dict(ROW_SENTINELS))
    synonyms: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(SYNONYMS))

    def __post_init__(self) -> None:
        for name in ("filter_field", "mention_field", "unknown_label"):
            if not getattr(self, name):
                raise ValueError(f"PivotOptions.{name} must be a non-empty string")

    def sentinel_for(self, row_field: str) -> str:
        """Sentinel label for a missing value of row_field."""
        return self.row_sentinels.get(row_field, self.unknown_label)

    def to_dict(self) -> dict[str, Any]:
        """Serialize PivotOptions to a JSON-friendly dictionary."""
        return {
            "filter_field": self.filter_field,
            "mention_field": self.mention_field,
            "strip_prefix": self.strip_prefix,
            "unknown_label": self.unknown_label,
            "row_sentinels": dict(self.row_sentinels),
            "synonyms": {k: list(v) for k, v in self.synonyms.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PivotOptions":
        """Deserialize PivotOptions; missing keys take their defaults.

        Raises:
            ValueError: If data contains keys PivotOptions does not know.
        """
        known = {"filter_field", "mention_field", "strip_prefix", "unknown_label", "row_sentinels", "synonyms"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown PivotOptions keys: {sorted(unknown)}")
        kwargs: dict[str, Any] = {}
        for key in ("filter_field", "mention_field", "strip_prefix", "unknown_label"):
            if key in data:
                kwargs[key] = str(data[key])
        if "row_sentinels" in data:
            kwargs["row_sentinels"] = {str(k): str(v) for k, v in data["row_sentinels"].items()}
        if "synonyms" in data:
            kwargs["synonyms"] = {str(k): tuple(str(a) for a in v) for k, v in data["synonyms"].items()}
        return cls(**kwargs)
