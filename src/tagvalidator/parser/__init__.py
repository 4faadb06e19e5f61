"""Markup tokenization with closing-tag reconciliation."""

from tagvalidator.parser.positions import LineIndex
from tagvalidator.parser.reconciler import ExclusionIndex, reconcile
from tagvalidator.parser.tokenizer import MarkupScanner, ScanResult, TokenizerAdapter, tokenize

__all__ = [
    "ExclusionIndex",
    "LineIndex",
    "MarkupScanner",
    "ScanResult",
    "TokenizerAdapter",
    "reconcile",
    "tokenize",
]
