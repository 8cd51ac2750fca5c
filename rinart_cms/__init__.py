"""RINART studio site content backend."""
