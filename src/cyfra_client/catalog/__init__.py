from cyfra_client.catalog.dates import DateDiscoveryClient
from cyfra_client.catalog.debounce import Debouncer
from cyfra_client.catalog.filters import FilterState
from cyfra_client.catalog.tiles import TileCatalogClient, reconcile_selection

__all__ = [
    "DateDiscoveryClient",
    "Debouncer",
    "FilterState",
    "TileCatalogClient",
    "reconcile_selection",
]
