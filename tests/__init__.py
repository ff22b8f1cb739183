"""Tests for neo-access."""
