# Package exports - these allow cleaner imports like:
# from indexbench.models import Product
# Used by alembic/env.py and create_schema to populate Base.metadata
from indexbench.models.product import Product
