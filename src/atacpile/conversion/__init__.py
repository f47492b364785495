"""Fragment to cut-site / footprint conversion."""

from atacpile.conversion.fragment_converter import convert, convert_fragment_list

__all__ = ["convert", "convert_fragment_list"]
