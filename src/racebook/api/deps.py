"""Service wiring for route handlers. Tests override these with fakes."""

from fastapi import Depends

from racebook.services.accounts import AccountService
from racebook.store.bets import BetStore
from racebook.store.supabase_client import SupabaseClient


def get_supabase_client() -> SupabaseClient:
    return SupabaseClient.from_settings()


def get_bet_store(client: SupabaseClient = Depends(get_supabase_client)) -> BetStore:
    return BetStore(client)


def get_account_service(
    client: SupabaseClient = Depends(get_supabase_client),
) -> AccountService:
    return AccountService(client)
