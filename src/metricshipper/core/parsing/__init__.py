"""Parsers turning input data into metric records."""
