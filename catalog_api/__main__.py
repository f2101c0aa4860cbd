"""Run the Product Catalog API with ``python -m catalog_api``."""

from catalog_api.main import run

run()
