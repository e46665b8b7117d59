# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the superhero lifecycle logic:
# - models/: Pydantic schemas for data validation
# - services/: Record store, media store and the SuperheroService that
#   keeps the two consistent
#
# Routers never talk to Supabase directly; they go through SuperheroService.
# =============================================================================
