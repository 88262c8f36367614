"""Mixin for locating corpora on disk.

Readers for well-known corpora declare where the corpus conventionally
lives, so ``read_corpus("brown")`` works without a path once the corpus is
installed.
"""

from __future__ import annotations

import os
from pathlib import Path

# Environment variable overriding the base data directory
DATA_ENV_VAR = "NLP_CORPORA_DATA"


def data_home() -> Path:
    """Return the base directory corpora are looked up in.

    ``$NLP_CORPORA_DATA`` if set, else ``~/nlp_data``.
    """
    if env_path := os.environ.get(DATA_ENV_VAR):
        return Path(env_path)
    return Path.home() / "nlp_data"


class CorpusLocationMixin:
    """Mixin providing default corpus locations for readers.

    Subclasses must define these class attributes:
        ENV_VAR: Environment variable name for a custom corpus path.
        DEFAULT_SUBDIR: Subdirectory (or file) name under ``data_home()``.
        _FILE_CHECK_PATTERN: Glob pattern verifying a corpus directory is
            populated (e.g., "**/*.mrg").

    Example:
        class MyCorpusReader(CorpusLocationMixin, BaseCorpusReader):
            ENV_VAR = "MY_CORPUS_ROOT"
            DEFAULT_SUBDIR = "my_corpus"
            _FILE_CHECK_PATTERN = "**/*.txt"
    """

    # Subclasses must override these
    ENV_VAR: str
    DEFAULT_SUBDIR: str
    _FILE_CHECK_PATTERN: str = "**/*"

    @classmethod
    def default_root(cls) -> Path:
        """Return the default corpus location.

        Checks in order:
        1. Environment variable specified by ENV_VAR
        2. data_home() / DEFAULT_SUBDIR

        Returns:
            Path to the default corpus location.
        """
        if env_path := os.environ.get(cls.ENV_VAR):
            return Path(env_path)
        return data_home() / cls.DEFAULT_SUBDIR

    @classmethod
    def _get_default_root(cls) -> Path:
        """Get the corpus root, verifying it exists.

        A root that is a file (e.g. a single archive) is accepted as is; a
        directory must contain at least one file matching
        _FILE_CHECK_PATTERN.

        Raises:
            FileNotFoundError: If the corpus is not found.
        """
        root = cls.default_root()

        if root.is_file():
            return root
        if root.is_dir() and any(root.glob(cls._FILE_CHECK_PATTERN)):
            return root

        raise FileNotFoundError(
            f"{cls.__name__} corpus not found at {root}. "
            f"Set {cls.ENV_VAR} environment variable or pass a path explicitly."
        )
