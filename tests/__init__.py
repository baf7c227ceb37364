"""
tests

Test suite for the hslcard2api project.

Subpackages:
    - hsl_decoder: Tests for the card decoding library
    - card_daemon: Tests for the FastAPI service
    - integration: End-to-end tests through the full application
"""
