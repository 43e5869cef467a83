"""UK Capital Gains Tax calculator: Section 104 pooling and the 30-day rule."""

__version__ = "0.1.0"
