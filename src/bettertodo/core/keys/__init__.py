from .schemas import AvailableApiKeys, KeyProvider, MaskedApiKeys, UserApiKeys
from .store import ApiKeyStore, InvalidApiKey, mask_api_key

__all__ = [
    "ApiKeyStore",
    "AvailableApiKeys",
    "InvalidApiKey",
    "KeyProvider",
    "MaskedApiKeys",
    "UserApiKeys",
    "mask_api_key",
]
