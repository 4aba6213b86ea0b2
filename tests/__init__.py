"""WithYou Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - capture/: Capture parser and date/time detection
  - tasks/: "I'm stuck" chooser
  - devices/: Preference store, backend client, runtime facts, registrar

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/devices/
"""
