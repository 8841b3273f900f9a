from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from bettertodo.core.keys import ApiKeyStore, InvalidApiKey, KeyProvider, MaskedApiKeys

from .auth import get_current_user_id
from .deps import get_api_key_store
from .schemas import PauseApiKeyRequest, SetApiKeyRequest

router = APIRouter()


@router.get("", response_model=MaskedApiKeys)
def get_api_keys(
    user_id: str = Depends(get_current_user_id),
    store: ApiKeyStore = Depends(get_api_key_store),
) -> MaskedApiKeys:
    return store.get_masked(user_id)


@router.put("/{provider}")
def set_api_key(
    provider: KeyProvider,
    request: SetApiKeyRequest,
    user_id: str = Depends(get_current_user_id),
    store: ApiKeyStore = Depends(get_api_key_store),
) -> dict[str, bool]:
    try:
        store.set_api_key(user_id, provider, request.key)
    except InvalidApiKey as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True}


@router.post("/{provider}/pause")
def pause_api_key(
    provider: KeyProvider,
    request: PauseApiKeyRequest,
    user_id: str = Depends(get_current_user_id),
    store: ApiKeyStore = Depends(get_api_key_store),
) -> dict[str, bool]:
    store.set_paused(user_id, provider, request.paused)
    return {"ok": True}


@router.delete("/{provider}")
def delete_api_key(
    provider: KeyProvider,
    user_id: str = Depends(get_current_user_id),
    store: ApiKeyStore = Depends(get_api_key_store),
) -> dict[str, bool]:
    store.delete_api_key(user_id, provider)
    return {"ok": True}
