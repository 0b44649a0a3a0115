from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import time

from indexbench.models.product import Product
from indexbench.repositories.product_repository import ProductRepository, LOOKUP_COLUMNS
from indexbench.schemas.product import BenchmarkReport, LookupStats, LookupTiming
from indexbench.services.seed_service import SeedService

logger = logging.getLogger(__name__)

WARM_UP_VALUES = {
    "product_name": "some-non-existing-warm-up-name-to-avoid-cache",
    "serial_number": "some-non-existing-warm-up-serial-to-avoid-cache",
}


class BenchmarkService:
    """Times single-row lookups on the indexed and the non-indexed column"""

    def __init__(self, db: Session, seed_service: Optional[SeedService] = None):
        self.db = db
        self.repository = ProductRepository(db)
        self.seed_service = seed_service or SeedService(db)

    def time_lookup(self, column: str, value: str) -> LookupTiming:
        """Time one lookup after clearing the session and warming up the connection"""
        indexed = LOOKUP_COLUMNS.get(column)
        if indexed is None:
            raise ValueError(f"Unknown lookup column '{column}'")

        # Drop cached instances so the lookup must hit the database
        self.db.expunge_all()
        self.repository.find_by(column, WARM_UP_VALUES[column])

        start_time = time.perf_counter_ns()
        product = self.repository.find_by(column, value)
        end_time = time.perf_counter_ns()

        timing = LookupTiming(
            column=column,
            value=value,
            indexed=indexed,
            found=product is not None,
            duration_ns=end_time - start_time,
        )
        label = "indexed" if indexed else "not indexed"
        logger.info(
            f"[{self.repository.dialect} - {label}] {column} '{value}' lookup: "
            f"{timing.duration_ms:.3f} ms ({timing.duration_ns} ns)"
        )
        return timing

    def _time_repeated(self, column: str, value: str, repeats: int) -> List[LookupTiming]:
        timings = [self.time_lookup(column, value) for _ in range(repeats)]
        if not all(t.found for t in timings):
            raise LookupError(f"Product with {column} '{value}' not found")
        return timings

    def compare(self, product: Product, repeats: int = 1) -> BenchmarkReport:
        """Look the product up by name and by serial number and aggregate the timings"""
        if repeats < 1:
            raise ValueError("repeats must be positive")

        product_name = product.product_name
        serial_number = product.serial_number

        non_indexed = self._time_repeated("product_name", product_name, repeats)
        indexed = self._time_repeated("serial_number", serial_number, repeats)

        report = BenchmarkReport(
            dialect=self.repository.dialect,
            record_count=self.repository.count(),
            product_name=product_name,
            serial_number=serial_number,
            non_indexed=LookupStats.from_timings(non_indexed),
            indexed=LookupStats.from_timings(indexed),
        )
        speedup = report.speedup
        logger.info(
            f"Mean lookup over {report.record_count} rows: "
            f"not indexed {report.non_indexed.mean_ns / 1_000_000:.3f} ms, "
            f"indexed {report.indexed.mean_ns / 1_000_000:.3f} ms"
            + (f" ({speedup:.1f}x)" if speedup is not None else "")
        )
        return report

    def run(
        self,
        count: int,
        repeats: int = 1,
        batch_size: int = 1000,
        reset: bool = False
    ) -> Optional[BenchmarkReport]:
        """Seed the table, sample a product, and compare the two lookups"""
        if reset:
            self.repository.delete_all()
        if count > 0:
            self.seed_service.seed(count, batch_size=batch_size)

        product = self.seed_service.pick_random_product()
        if product is None:
            logger.warning("Could not select a target product, skipping the benchmark")
            return None
        return self.compare(product, repeats=repeats)
