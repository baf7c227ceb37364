"""
tests.integration

Integration tests that exercise the API, the decoder and the bundled layouts
together.
"""
