from pydantic import BaseModel, Field
from typing import List, Optional
import statistics


class ProductCreate(BaseModel):
    product_name: str = Field(..., min_length=1, description="Product name (not indexed)")
    serial_number: str = Field(..., min_length=1, description="Serial number (unique, indexed)")
    category: Optional[str] = Field(None, description="Free-text category")
    price: float = Field(default=0.0, description="Unit price")


class LookupTiming(BaseModel):
    """One timed single-row lookup"""
    column: str = Field(..., description="Column the lookup filtered on")
    value: str = Field(..., description="Value looked up")
    indexed: bool = Field(..., description="Whether the column carries an index")
    found: bool
    duration_ns: int = Field(..., ge=0)

    @property
    def duration_ms(self) -> float:
        return self.duration_ns / 1_000_000


class LookupStats(BaseModel):
    column: str
    indexed: bool
    samples: List[int] = Field(default_factory=list, description="Durations in nanoseconds")
    min_ns: int
    max_ns: int
    mean_ns: float
    median_ns: float

    @classmethod
    def from_timings(cls, timings: List[LookupTiming]) -> "LookupStats":
        if not timings:
            raise ValueError("At least one timing is required")
        samples = [t.duration_ns for t in timings]
        return cls(
            column=timings[0].column,
            indexed=timings[0].indexed,
            samples=samples,
            min_ns=min(samples),
            max_ns=max(samples),
            mean_ns=statistics.mean(samples),
            median_ns=statistics.median(samples),
        )


class BenchmarkReport(BaseModel):
    dialect: str = Field(..., description="SQLAlchemy dialect name, e.g. postgresql or sqlite")
    record_count: int
    product_name: str = Field(..., description="Name of the sampled product")
    serial_number: str = Field(..., description="Serial number of the sampled product")
    non_indexed: LookupStats
    indexed: LookupStats

    @property
    def speedup(self) -> Optional[float]:
        """Mean non-indexed time over mean indexed time"""
        if self.indexed.mean_ns == 0:
            return None
        return self.non_indexed.mean_ns / self.indexed.mean_ns

    @property
    def indexed_not_slower(self) -> bool:
        return self.indexed.mean_ns <= self.non_indexed.mean_ns
