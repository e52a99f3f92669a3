# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the logic behind the HTTP layer:
# - models/: Pydantic schemas for user documents
# - services/: One datastore call per user operation
# =============================================================================
