# =============================================================================
# catalog_client/ - Superhero Catalog Client
# =============================================================================
# Code for applications consuming the API:
# - api.py: Async httpx client for the /resources endpoints
# - store.py: Client-side state (list page + selected superhero)
# - config.py: Client settings (API URL, page size, timeout)
# =============================================================================

from catalog_client.api import SuperheroApiClient, SuperheroApiError
from catalog_client.config import ClientSettings, get_client_settings
from catalog_client.store import RequestStatus, SuperheroState, SuperheroStore

__all__ = [
    "ClientSettings",
    "RequestStatus",
    "SuperheroApiClient",
    "SuperheroApiError",
    "SuperheroState",
    "SuperheroStore",
    "get_client_settings",
]
