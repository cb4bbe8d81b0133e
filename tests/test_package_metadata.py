"""Tests for top-level package metadata."""

import nodeset_toolkit


def test_version_matches_pyproject():
    assert nodeset_toolkit.__version__ == "0.3.0"


def test_copyright_names_license():
    assert "Polyform Noncommercial License 1.0.0" in nodeset_toolkit.__copyright__
