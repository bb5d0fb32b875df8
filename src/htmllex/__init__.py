from .buffer import CharSource, SourceError
from .tokenizer import LexError, State, Tokenizer, TokenizerOpts, iter_tokens, tokenize
from .tokens import Token, TokenKind

__all__ = [
    "CharSource",
    "LexError",
    "SourceError",
    "State",
    "Token",
    "TokenKind",
    "Tokenizer",
    "TokenizerOpts",
    "iter_tokens",
    "tokenize",
]
