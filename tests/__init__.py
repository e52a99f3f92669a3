# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Users API:
# - test_config.py: Settings defaults and validation
# - test_models.py: User schema validation and serialization
# - test_user_service.py: Service operations against an in-memory collection
# - test_middleware.py: Origin policy and rate limiter units
# - test_users_api.py: HTTP behavior of the user routes and request gates
# - test_health.py: Health endpoints and MongoDB connection handling
#
# Run tests with: pytest
# =============================================================================
