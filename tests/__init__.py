"""Tests - Unit tests for the primitives and proving packages."""
