"""
DentalRef - Test Suite
======================

Tests for the DentalRef scoring engine and entity store.

Structure:
    tests/
    ├── conftest.py                      - Shared fixtures
    ├── unit/                            - Unit tests (fast, no file I/O)
    │   ├── test_keywords.py             - Keyword extraction
    │   ├── test_attribute_scorer.py     - Property ladders
    │   ├── test_criteria_rules.py       - Criteria matcher rule table
    │   ├── test_ranking.py              - Ranking and recommendation helpers
    │   ├── test_comparison.py           - Comparison matrix
    │   ├── test_relevance.py            - Procedure relevance linking
    │   ├── test_cache.py                - TTL cache
    │   ├── test_models.py               - Pydantic records and result views
    │   ├── test_config.py               - Engine config and settings
    │   └── test_logging_config.py       - Structured logging
    └── integration/                     - Integration tests
        ├── test_repositories.py         - JSON-backed repositories
        └── test_recommendation_pipeline.py - Store + engine end to end

Running Tests:
    # All tests
    pytest

    # Unit tests only
    pytest tests/unit/

    # Specific test file
    pytest tests/unit/test_criteria_rules.py

Markers:
    @pytest.mark.unit        - Fast unit tests
    @pytest.mark.integration - Tests that read JSON datasets
"""
