from __future__ import annotations

from pathlib import Path

from bettertodo.core.config import state_dir as default_state_dir
from bettertodo.core.storage.jsonl import JsonlTable

from .schemas import AvailableApiKeys, KeyProvider, MaskedApiKeys, UserApiKeys

_MIN_KEY_LENGTH = 10


class InvalidApiKey(ValueError):
    pass


def mask_api_key(key: str | None) -> str | None:
    if not key:
        return None
    if len(key) <= 8:
        return "****"
    return f"{key[:7]}...{key[-4:]}"


class ApiKeyStore:
    def __init__(self, state_dir: Path | None = None) -> None:
        self.state_dir = state_dir or default_state_dir()
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.table = JsonlTable(self.state_dir / "api_keys.jsonl", UserApiKeys)

    def get(self, user_id: str) -> UserApiKeys | None:
        for record in self.table.load_all():
            if record.user_id == user_id:
                return record
        return None

    def get_masked(self, user_id: str) -> MaskedApiKeys:
        record = self.get(user_id)
        if record is None:
            return MaskedApiKeys()
        return MaskedApiKeys(
            anthropic_key=mask_api_key(record.anthropic_key),
            openai_key=mask_api_key(record.openai_key),
            has_anthropic_key=bool(record.anthropic_key),
            has_openai_key=bool(record.openai_key),
            anthropic_paused=record.anthropic_paused,
            openai_paused=record.openai_paused,
        )

    def get_available_api_keys(self, user_id: str) -> AvailableApiKeys:
        record = self.get(user_id)
        if record is None:
            return AvailableApiKeys()
        anthropic_available = bool(record.anthropic_key) and not record.anthropic_paused
        openai_available = bool(record.openai_key) and not record.openai_paused
        return AvailableApiKeys(
            anthropic_available=anthropic_available,
            anthropic_key=record.anthropic_key if anthropic_available else None,
            openai_available=openai_available,
            openai_key=record.openai_key if openai_available else None,
        )

    def set_api_key(self, user_id: str, provider: KeyProvider, key: str) -> None:
        trimmed = key.strip()
        if len(trimmed) < _MIN_KEY_LENGTH:
            raise InvalidApiKey("Invalid API key format")

        with self.table.locked():
            records = self.table.load_all()
            record = next((item for item in records if item.user_id == user_id), None)
            if record is None:
                record = UserApiKeys(user_id=user_id)
                records.append(record)
            if provider == "anthropic":
                record.anthropic_key = trimmed
                record.anthropic_paused = False
            else:
                record.openai_key = trimmed
                record.openai_paused = False
            self.table.rewrite(records)

    def set_paused(self, user_id: str, provider: KeyProvider, paused: bool) -> None:
        with self.table.locked():
            records = self.table.load_all()
            record = next((item for item in records if item.user_id == user_id), None)
            if record is None:
                return
            if provider == "anthropic":
                if not record.anthropic_key or record.anthropic_paused == paused:
                    return
                record.anthropic_paused = paused
            else:
                if not record.openai_key or record.openai_paused == paused:
                    return
                record.openai_paused = paused
            self.table.rewrite(records)

    def delete_api_key(self, user_id: str, provider: KeyProvider) -> None:
        with self.table.locked():
            records = self.table.load_all()
            record = next((item for item in records if item.user_id == user_id), None)
            if record is None:
                return
            if provider == "anthropic":
                record.anthropic_key = None
                record.anthropic_paused = False
            else:
                record.openai_key = None
                record.openai_paused = False
            if not record.anthropic_key and not record.openai_key:
                records = [item for item in records if item.user_id != user_id]
            self.table.rewrite(records)
