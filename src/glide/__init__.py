"""glide: growth line extraction for mother machine time-lapse stacks."""

__version__ = "0.1.0"
