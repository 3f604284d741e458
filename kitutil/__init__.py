"""Small systems utilities: codecs, bit masks, counters, identifiers and logs."""

__version__ = "0.1.0"