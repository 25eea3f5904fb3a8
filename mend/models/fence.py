from dataclasses import dataclass


@dataclass
class FenceToken:
    """A run of 3+ backticks or tildes opening a line."""
    start: int      # absolute index of first fence char
    char: str       # '`' or '~'
    length: int     # run length (>=3)
    info: str       # first token after the fence, lowercased ('diff', 'patch', ...)
    trailing: str   # rest of the line after the run, stripped
    line_no: int    # 1-based line of the fence
    line_end: int   # abs index of the '\n' ending the fence's line (or len(text))
