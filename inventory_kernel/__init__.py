"""
Inventory Kernel - catalog, issue ledger and document stores for clinic stock.

The kernel owns the domain types, the typed exception hierarchy, structured
logging, the document store protocol with its in-memory and SQL
implementations, and the catalog and ledger services that write through it.

Layering:
    inventory_kernel      <- no imports from the packages below
    inventory_engines     <- pure functions over kernel domain types
    inventory_services    <- wires stores, engines and settings together
    inventory_ingestion   <- bulk import into the catalog
    inventory_config      <- YAML settings; the kernel never imports it
"""

__version__ = "0.1.0"
