"""Print the tokens of a small markup document, one per line."""

import argparse
import sys

from .tokenizer import LexError, Tokenizer, TokenizerOpts
from .tokens import TokenKind

DEMO_HTML = '<div id="main">Hello</div>'


def build_parser():
    parser = argparse.ArgumentParser(prog="htmllex", description="Tokenize HTML-like markup")
    parser.add_argument("html", nargs="?", help=f"Markup to tokenize (default: {DEMO_HTML!r})")
    parser.add_argument("--file", "-f", help="Read markup from a file instead ('-' for stdin)")
    parser.add_argument("--stream", action="store_true", help="Pull tokens lazily instead of collecting a list")
    parser.add_argument("--debug", action="store_true", help="Print state transitions while tokenizing")
    parser.add_argument("--strict", action="store_true", help="Raise on the first lexical error")
    parser.add_argument(
        "--resume-after-self-closing",
        action="store_true",
        help="Continue after '/>' instead of stopping at the self-closing slash",
    )
    parser.add_argument(
        "--reject-unterminated-values",
        action="store_true",
        help="Treat end of input inside a quoted attribute value as an error",
    )
    parser.add_argument(
        "--emit-trailing-text",
        action="store_true",
        help="Emit text that is not followed by a tag before end of input",
    )
    return parser


def _tokenize(source, args):
    opts = TokenizerOpts(
        debug=args.debug,
        strict=args.strict,
        resume_after_self_closing=args.resume_after_self_closing,
        reject_unterminated_values=args.reject_unterminated_values,
        emit_trailing_text=args.emit_trailing_text,
    )
    tokenizer = Tokenizer(source, opts)
    last = None
    try:
        if args.stream:
            for token in tokenizer:
                print(token)
                last = token
        else:
            tokens = tokenizer.run()
            for token in tokens:
                print(token)
            last = tokens[-1] if tokens else None
    except LexError as exc:
        if not args.stream:
            for token in tokenizer.tokens:
                print(token)
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    if last is not None and last.kind == TokenKind.ERROR:
        return 1
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.file == "-":
        return _tokenize(sys.stdin, args)
    if args.file:
        with open(args.file, encoding="utf-8") as fp:
            return _tokenize(fp, args)
    return _tokenize(args.html if args.html is not None else DEMO_HTML, args)


if __name__ == "__main__":
    sys.exit(main())
