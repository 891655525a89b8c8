"""po_agent.tools.show_products

Lists the qualified products from the catalog. No model call involved.
"""

from __future__ import annotations

from po_agent.contracts.tool_base import ProductRepository
from po_agent.json_utils import dumps
from po_agent.kernel import Kernel, kernel_function


class ShowProductsTool:
    name = "ShowQualifiedProductsTool"

    def __init__(self, product_repository: ProductRepository, logger):
        self.products = product_repository
        self.logger = logger

    @kernel_function("Returns a JSON array of all qualified products with all their details.")
    def show_all_qualified_products(self, kernel: Kernel) -> str:
        self.logger.info("Processing request to show all qualified products")
        products = self.products.get_all()
        if not products:
            self.logger.warning("No products found in repository.")
            return dumps({"status": "error", "message": "No products found."})
        return dumps([p.to_dict() for p in products])
