from src.modules.identity.supabase import (
    IdentityProviderError,
    IdentityUser,
    SupabaseAuthClient,
)

__all__ = ["IdentityProviderError", "IdentityUser", "SupabaseAuthClient"]
