"""Image conversion, resource header generation and a Unifile build driver for retro C projects."""

__version__ = "0.1.0"