# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Superhero Catalog API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_superhero_service.py: Lifecycle rules against in-memory stores
# - test_supabase_stores.py: Supabase adapters against a mocked client
# - test_routes.py: HTTP status codes and payloads via TestClient
# - test_client_store.py: Async API client and client-side state
#
# Run tests with: poetry run pytest
# =============================================================================
