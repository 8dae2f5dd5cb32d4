#!/usr/bin/env python3
"""Tests for Priority enum."""

from telemetry import Priority


class TestPriority:
    """Tests for Priority enum ordering."""

    def test_urgency_ordering(self):
        """Lower value = more urgent."""
        assert Priority.HIGH.value < Priority.MEDIUM.value
        assert Priority.MEDIUM.value < Priority.LOW.value

    def test_label(self):
        assert Priority.HIGH.label == "high"
        assert Priority["LOW"] == Priority.LOW
