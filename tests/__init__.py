"""
STIG Checklist Test Suite

Test Organization:
- test_core/ - Core infrastructure tests (constants, config, logging, deps)
- test_xml/ - XML processing tests (schema, sanitizer, tree codec, utils)
- test_model/ - Assessment, annotation and vocabulary tests
- test_processor/ - Normalizer, Projector and statistics tests
- test_io/ - File operations tests
- test_ui/ - Command-line interface tests
- test_integration/ - End-to-end conversion tests

Requirements:
- Python 3.9+
- pytest (for running tests)
- pytest-cov (for coverage reports)

Running Tests:
    # All tests
    python -m pytest tests/ -v

    # With coverage
    python -m pytest tests/ -v --cov=stig_checklist --cov-report=html
"""
