from typing import List

DELIM = " "


def tokenize(line: str) -> List[str]:
    """
    Splits a raw command line into tokens.

    Tokens are separated by spaces; runs of spaces collapse and a trailing
    line terminator is dropped. Quotes and other characters are not special.
    """
    return [token for token in line.strip("\r\n").split(DELIM) if token]
