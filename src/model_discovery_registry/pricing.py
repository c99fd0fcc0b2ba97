"""Pricing data structures for model cards."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ModelPricing:
    """Token pricing for a model, in USD per million tokens.

    - input_per_million / output_per_million: prompt and completion costs;
      None when the provider publishes only one side
    - cache_read_per_million / cache_write_per_million: prompt caching costs,
      when the provider publishes them
    """

    input_per_million: Optional[float] = None
    output_per_million: Optional[float] = None
    cache_read_per_million: Optional[float] = None
    cache_write_per_million: Optional[float] = None

    def __post_init__(self) -> None:  # noqa: D401
        """Basic validation ensuring non-negative costs."""
        for label, value in (
            ("Input", self.input_per_million),
            ("Output", self.output_per_million),
            ("Cache read", self.cache_read_per_million),
            ("Cache write", self.cache_write_per_million),
        ):
            if value is not None and value < 0:
                raise ValueError(f"{label} cost must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary, omitting unknown cache costs."""
        data: Dict[str, Any] = {
            "input_per_million": self.input_per_million,
            "output_per_million": self.output_per_million,
        }
        if self.cache_read_per_million is not None:
            data["cache_read_per_million"] = self.cache_read_per_million
        if self.cache_write_per_million is not None:
            data["cache_write_per_million"] = self.cache_write_per_million
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelPricing":
        """Build pricing from a dictionary produced by :meth:`to_dict`."""

        def _number(key: str) -> Optional[float]:
            value = data.get(key)
            return float(value) if value is not None else None

        return cls(
            input_per_million=_number("input_per_million"),
            output_per_million=_number("output_per_million"),
            cache_read_per_million=_number("cache_read_per_million"),
            cache_write_per_million=_number("cache_write_per_million"),
        )
