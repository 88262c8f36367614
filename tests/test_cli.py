"""Tests for the corpus listing command."""

import importlib.util
from pathlib import Path

import pytest


@pytest.fixture(scope="module")
def corpus_list():
    """The corpus_list script, loaded as a module."""
    path = Path(__file__).parents[1] / "cli" / "corpus_list.py"
    spec = importlib.util.spec_from_file_location("corpus_list", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestCorpusList:
    """Tests for argument handling and output of corpus_list."""

    def test_lists_texts(self, corpus_list, brown_dir, tmp_path):
        """One header row plus one row per text."""
        output = tmp_path / "out.tsv"
        code = corpus_list.main(
            ["--format", "brown", "--root", str(brown_dir), "--quiet", "-o", str(output)]
        )
        assert code == 0
        lines = output.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "name\tkind\ttokens\tpreview"
        assert len(lines) == 3

    def test_limit(self, corpus_list, brown_dir, tmp_path):
        """--limit stops the listing after that many texts."""
        output = tmp_path / "out.tsv"
        code = corpus_list.main(
            ["--format", "brown", "--root", str(brown_dir), "--limit", "1", "--quiet", "-o", str(output)]
        )
        assert code == 0
        assert len(output.read_text(encoding="utf-8").splitlines()) == 2

    @pytest.mark.parametrize("value", ["0", "-3", "many"])
    def test_limit_must_be_positive(self, corpus_list, brown_dir, value, capsys):
        """A limit below one is rejected before anything is read."""
        with pytest.raises(SystemExit) as info:
            corpus_list.parse_args(["--format", "brown", "--root", str(brown_dir), "--limit", value])
        assert info.value.code == 2
        assert "--limit" in capsys.readouterr().err

    def test_unsupported_option_reports_error(self, corpus_list, brown_dir, capsys):
        """An option the format does not take is an error exit, not a traceback."""
        code = corpus_list.main(
            ["--format", "brown", "--root", str(brown_dir), "--skip-malformed", "--quiet"]
        )
        assert code == 1
        assert "Invalid options for format 'brown'" in capsys.readouterr().err
