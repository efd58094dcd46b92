"""Smart Laundry: reservation tracking for shared washers and dryers."""

__version__ = "1.0.0"
