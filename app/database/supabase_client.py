from typing import Dict, Optional

from supabase import create_client, Client
from app.config.settings import settings

ANON = "anon"
SERVICE = "service"


class SupabaseClient:
    """
    Process-wide Supabase clients, created on first use.

    The anon-key client talks to Supabase Auth. Table access uses the
    service_role key, which bypasses row level security, so every table
    operation must go through the access policies.
    """

    _clients: Dict[str, Client] = {}

    @classmethod
    def _key_for(cls, role: str) -> Optional[str]:
        if role == SERVICE:
            return settings.supabase_service_role_key
        return settings.supabase_key

    @classmethod
    def client_for(cls, role: str) -> Client:
        if role not in cls._clients:
            key = cls._key_for(role)
            if not key:
                # No service key configured: table access shares the anon client
                return cls.client_for(ANON)
            cls._clients[role] = create_client(settings.supabase_url, key)
        return cls._clients[role]

    @classmethod
    def get_client(cls) -> Client:
        return cls.client_for(ANON)

    @classmethod
    def get_service_client(cls) -> Client:
        return cls.client_for(SERVICE)

    @classmethod
    def reset_client(cls):
        cls._clients.clear()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
