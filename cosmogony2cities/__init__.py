"""Load the cities of a cosmogony dataset into a PostGIS table."""

__version__ = "0.1.0"
