"""Configuration module for the visa eligibility service."""

from .settings import Settings, SupabaseSettings, get_settings, get_supabase_settings

__all__ = [
    "Settings",
    "SupabaseSettings",
    "get_settings",
    "get_supabase_settings",
]
