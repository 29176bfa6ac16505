"""
Tests for storage layer.

Test Structure:

- **backends/**: Tests for backend implementations (SQLModel on in-memory SQLite)

Run all storage tests:
    pytest tests/storage/ -v
"""
