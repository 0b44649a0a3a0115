# Package exports - these allow cleaner imports like:
# from indexbench.schemas import ProductCreate, BenchmarkReport
from indexbench.schemas.product import (
    ProductCreate,
    LookupTiming,
    LookupStats,
    BenchmarkReport,
)
