"""Named, versioned label-to-number tables for ordinal survey answers.

Survey answers such as sleep duration are stored as text. Correlation and
scoring need them as numbers, so each conversion lives in one table here
instead of an inline lookup at the call site. Bump
`ORDINAL_MAPPINGS_VERSION` whenever a table changes, together with the
preprocessing artifact version.
"""

from __future__ import annotations

from typing import Final

import polars as pl
from pydantic import BaseModel, ConfigDict, Field

ORDINAL_MAPPINGS_VERSION: Final[str] = "v1"

_LABEL_STRIP_CHARS: Final[str] = " '\""  # The source CSV wraps some labels in single quotes.


class OrdinalMapping(BaseModel):
    """Maps the text labels of one survey column to ordered numbers.

    Labels are matched after trimming whitespace and surrounding quotes.
    Labels missing from the table (e.g. "Others") encode as null.

    Attributes:
        name (str): Column the table applies to.
        version (str): Table version.
        values (dict[str, float]): Label to number.

    Examples:
        >>> SLEEP_DURATION.encode("'5-6 hours'")
        5.5
        >>> SLEEP_DURATION.encode("Others") is None
        True
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    version: str = Field(default=ORDINAL_MAPPINGS_VERSION)
    values: dict[str, float] = Field(min_length=1)

    def encode(self, label: str | None) -> float | None:
        """Return the number for one label, or None when it is unknown.

        Args:
            label (str | None): Raw label.

        Returns:
            float | None: The mapped number.
        """
        if label is None:
            return None
        return self.values.get(label.strip(_LABEL_STRIP_CHARS))

    def to_expr(self, column: str) -> pl.Expr:
        """Build a Polars expression that encodes `column` with this table.

        Args:
            column (str): Name of a String column.

        Returns:
            pl.Expr: Float64 expression, null for unknown labels.
        """
        return (
            pl.col(column)
            .cast(pl.String)
            .str.strip_chars(_LABEL_STRIP_CHARS)
            .replace_strict(self.values, default=None, return_dtype=pl.Float64)
        )


SLEEP_DURATION: Final[OrdinalMapping] = OrdinalMapping(
    name="Sleep Duration",
    values={
        "Less than 5 hours": 4.5,
        "5-6 hours": 5.5,
        "7-8 hours": 7.5,
        "More than 8 hours": 9.0,
    },
)

DIETARY_HABITS: Final[OrdinalMapping] = OrdinalMapping(
    name="Dietary Habits",
    values={"Unhealthy": 0.0, "Moderate": 1.0, "Healthy": 2.0},
)

YES_NO: Final[OrdinalMapping] = OrdinalMapping(
    name="Yes/No",
    values={"No": 0.0, "Yes": 1.0},
)

# Columns whose text answers can be converted for correlation analysis.
ORDINAL_COLUMNS: Final[dict[str, OrdinalMapping]] = {
    "Sleep Duration": SLEEP_DURATION,
    "Dietary Habits": DIETARY_HABITS,
    "Have you ever had suicidal thoughts ?": YES_NO,
    "Family History of Mental Illness": YES_NO,
}
