"""Building blocks of a small scripting-language runtime: instruction encoding,
string interning, value tags, number conversion and arithmetic, message
formatting, an operating-system library and a module loader."""

__version__ = "0.1.0"
__all__ = ["opcodes", "strings", "values", "numbers", "formatting", "oslib", "loader"]