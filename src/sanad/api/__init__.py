from .client import ApiClient
from .envelope import EnvelopeShape, ResponseEnvelope, unwrap_collection, unwrap_record
from .tokens import TokenStore, clean_token

__all__ = [
    "ApiClient",
    "EnvelopeShape",
    "ResponseEnvelope",
    "TokenStore",
    "clean_token",
    "unwrap_collection",
    "unwrap_record",
]
