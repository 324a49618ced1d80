"""Overhead: detect aircraft entering a radius around a reference point."""
