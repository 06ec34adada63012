from asmr_catalog.core.api.contracts.catalog import CatalogAPIClient
from asmr_catalog.core.api.contracts.translation import TranslationTransport

__all__ = [
    "CatalogAPIClient",
    "TranslationTransport",
]
