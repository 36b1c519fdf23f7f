"""Tests for candidate providers.

Functions under test in traitforge/combinations/candidates.py.
"""

import logging

from traitforge.combinations.candidates import (
    DirectoryCandidateProvider,
    StaticCandidateProvider,
    total_combinations,
)


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")


class TestDirectoryCandidateProvider:
    """Test directory listing, filtering and caching."""

    def test_lists_sorted_files(self, tmp_path):
        _touch(tmp_path / "hat" / "b.png")
        _touch(tmp_path / "hat" / "a#10.png")
        provider = DirectoryCandidateProvider(tmp_path)
        assert provider.list_options("hat") == ["a#10.png", "b.png"]

    def test_skips_dotfiles_and_directories(self, tmp_path):
        _touch(tmp_path / "hat" / "a.png")
        _touch(tmp_path / "hat" / ".DS_Store")
        (tmp_path / "hat" / "nested").mkdir()
        provider = DirectoryCandidateProvider(tmp_path)
        assert provider.list_options("hat") == ["a.png"]

    def test_missing_folder_returns_empty_and_logs(self, tmp_path, caplog):
        provider = DirectoryCandidateProvider(tmp_path)
        with caplog.at_level(logging.ERROR):
            assert provider.list_options("missing") == []
        assert "Error reading trait folder" in caplog.text

    def test_cache_reads_once(self, tmp_path):
        _touch(tmp_path / "hat" / "a.png")
        provider = DirectoryCandidateProvider(tmp_path, cache=True)
        assert provider.list_options("hat") == ["a.png"]
        _touch(tmp_path / "hat" / "b.png")
        assert provider.list_options("hat") == ["a.png"]
        provider.clear_cache()
        assert provider.list_options("hat") == ["a.png", "b.png"]

    def test_uncached_rereads(self, tmp_path):
        _touch(tmp_path / "hat" / "a.png")
        provider = DirectoryCandidateProvider(tmp_path, cache=False)
        assert provider.list_options("hat") == ["a.png"]
        _touch(tmp_path / "hat" / "b.png")
        assert provider.list_options("hat") == ["a.png", "b.png"]

    def test_returned_list_is_a_copy(self, tmp_path):
        _touch(tmp_path / "hat" / "a.png")
        provider = DirectoryCandidateProvider(tmp_path)
        provider.list_options("hat").append("bogus.png")
        assert provider.list_options("hat") == ["a.png"]


class TestStaticCandidateProvider:
    def test_lists_options(self):
        provider = StaticCandidateProvider({"hat": ["a.png", "b.png"]})
        assert provider.list_options("hat") == ["a.png", "b.png"]

    def test_unknown_layer_is_empty(self, caplog):
        provider = StaticCandidateProvider({"hat": ["a.png"]})
        with caplog.at_level(logging.ERROR):
            assert provider.list_options("eyes") == []
        assert "Unknown layer" in caplog.text


class TestTotalCombinations:
    def test_product_of_layer_sizes(self):
        provider = StaticCandidateProvider(
            {"bg": ["1", "2", "3"], "eyes": ["a", "b"], "hat": ["x", "y", "z", "w"]}
        )
        assert total_combinations(provider, ["bg", "eyes", "hat"]) == 24

    def test_empty_layer_gives_zero(self):
        provider = StaticCandidateProvider({"bg": ["1", "2"], "hat": []})
        assert total_combinations(provider, ["bg", "hat"]) == 0

    def test_keep_filters_options(self):
        provider = StaticCandidateProvider(
            {"bg": ["1", "2"], "hat": ["a#0.png", "b.png", "c#5.png"]}
        )
        assert total_combinations(provider, ["bg", "hat"], keep=lambda o: "#0" not in o) == 4
