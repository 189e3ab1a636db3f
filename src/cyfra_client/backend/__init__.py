from cyfra_client.backend.base import BackendBase, BackendResponse
from cyfra_client.backend.http import HttpBackend

__all__ = ["BackendBase", "BackendResponse", "HttpBackend"]
