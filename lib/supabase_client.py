# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module owns the single Supabase client shared by the record store
# (PostgREST table) and the media store (Storage bucket).
#
# Timeouts for both sides are configured here once, so every store call
# either finishes or raises httpx.TimeoutException, which the adapters turn
# into StoreTimeout / MediaUploadTimeout.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client = SupabaseClient.get_client()
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import Client, ClientOptions, create_client

from app.config import get_settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error while setting up the Supabase client.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Singleton holder for the Supabase client.

    All methods are class methods for easy access without instantiation.

    Example:
        client = SupabaseClient.get_client()
        client.table("superheroes").select("*").limit(5).execute()
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            settings = get_settings()
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY,
                    options=ClientOptions(
                        postgrest_client_timeout=settings.STORE_TIMEOUT_SECONDS,
                        storage_client_timeout=int(settings.MEDIA_TIMEOUT_SECONDS),
                    ),
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                ) from e
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used by tests and after config changes)."""
        cls._instance = None

    @staticmethod
    def is_valid_uuid(value: str | UUID) -> bool:
        """Check whether a record id can be sent to a uuid column."""
        if isinstance(value, UUID):
            return True
        try:
            UUID(str(value))
        except ValueError:
            return False
        return True

    @staticmethod
    def is_no_rows_error(error: Exception) -> bool:
        """True if a PostgREST error means 'no row matched'."""
        return NO_ROWS_CODE in str(error)
