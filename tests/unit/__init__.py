"""Unit tests for isolated streaming stages and configuration."""
