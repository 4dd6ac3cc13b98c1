"""
Error types and error formatting for the Monkey parser and interpreter
Parse errors are accumulated as messages; runtime errors stop the current evaluation
"""

from typing import List, Optional


PARSE_ERROR_BANNER = "Woops! We ran into some monkey business here!"


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def format_parse_errors(errors: List[str]) -> str:
    """Format accumulated parse errors for display"""
    lines = [PARSE_ERROR_BANNER, " parser errors:"]
    lines.extend(f"\t{error}" for error in errors)
    return "\n".join(lines)


def format_runtime_error(message: str, source_line: Optional[str] = None) -> str:
    """Format a runtime error, optionally with the offending source line"""
    error_msg = f"Error: {message}"
    if source_line:
        error_msg += f"\n  Source: {source_line.strip()}"
    return error_msg


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class MonkeyParseError(Exception):
    """Raised when a caller asks for a program that has parse errors"""
    def __init__(self, errors: List[str], filename: str = "<input>"):
        self.errors = list(errors)
        self.filename = filename
        super().__init__(format_parse_errors(self.errors))

    def __str__(self) -> str:
        return format_parse_errors(self.errors)


class MonkeyRuntimeError(Exception):
    """Evaluation failure: the first error anywhere in the evaluated tree"""
    def __init__(self, message: str, source_line: Optional[str] = None):
        self.message = message
        self.source_line = source_line
        super().__init__(message)

    def __str__(self) -> str:
        return self.message
