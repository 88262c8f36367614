"""spaCy integration for nlp-corpora."""

from nlpcorpora.nlp.pipeline import get_tokenizer, text_to_doc, tokenize

__all__ = ["get_tokenizer", "text_to_doc", "tokenize"]
