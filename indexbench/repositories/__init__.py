from indexbench.repositories.product_repository import ProductRepository, LOOKUP_COLUMNS
