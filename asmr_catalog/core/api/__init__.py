from asmr_catalog.core.api.base import BaseAPIClient, APIError
from asmr_catalog.core.api.asmr_one import AsmrOneClient, SortOrder, SortType
from asmr_catalog.core.api.google_translate import GoogleTranslateClient

__all__ = [
    "BaseAPIClient",
    "APIError",
    "AsmrOneClient",
    "SortOrder",
    "SortType",
    "GoogleTranslateClient",
]
