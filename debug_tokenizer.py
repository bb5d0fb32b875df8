#!/usr/bin/env python3
"""Debug script to inspect how the tokenizer walks through an input."""

import sys
from pathlib import Path

from htmllex import Tokenizer, TokenizerOpts


def debug_input(html, **opts):
    print(f"Input: {html!r}")
    print("\nTrace:")
    tokenizer = Tokenizer(html, TokenizerOpts(debug=True, **opts))
    tokens = tokenizer.run()

    print("\nTokens:")
    for token in tokens:
        print(f"  {token!r}")

    if not tokens or not tokens[-1].is_terminal:
        print("\n!!! Run halted without a terminal token !!!")
    print(f"\nFinal state: {tokenizer.state.name}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python debug_tokenizer.py <html | @file>")
        print("Example: python debug_tokenizer.py '<a href=\"x\">link</a>'")
        sys.exit(1)

    arg = sys.argv[1]
    if arg.startswith("@"):
        arg = Path(arg[1:]).read_text(encoding="utf-8")
    debug_input(arg)
