"""
Tests for game name normalization.
"""

import pytest

from yam_library.normalizer import (
    normalize,
    clean_game_name,
    comparison_key,
    directory_name,
    extract_thread_id,
    extract_version,
    is_mod,
)


class TestNormalize:
    """Test removal of non-letter characters"""

    def test_keeps_letters_and_spaces(self):
        assert normalize("Hello World") == "Hello World"

    def test_drops_symbols_and_digits(self):
        assert normalize("Cyberpunk 2077™: Phantom!") == "Cyberpunk  Phantom"

    def test_allowed_chars_are_kept(self):
        assert normalize("Part 2: v1.0", "0123456789.") == "Part 2 v1.0"

    def test_trims_result(self):
        assert normalize("  ...Game...  ") == "Game"

    def test_non_latin_letters_are_kept(self):
        assert normalize("Été à Paris!") == "Été à Paris"

    @pytest.mark.parametrize("raw", [
        "The Witcher 3: Wild Hunt",
        "  [MOD] Some Game [v.1.0] ",
        "DOOM Eternal®",
        "Baldur's Gate 3",
        "",
        "!!!",
        "Ünïcödé — test",
    ])
    @pytest.mark.parametrize("allowed", ["", "-[].0123456789", "'!"])
    def test_idempotent(self, raw, allowed):
        once = normalize(raw, allowed)
        assert normalize(once, allowed) == once


class TestCleanGameName:
    """Test removal of tags and special characters from game names"""

    def test_removes_mod_and_version_tags(self):
        assert clean_game_name("Some Game [MOD][v.1.0]") == "Some Game"

    def test_removes_reserved_chars(self):
        assert clean_game_name("Title: Part 2") == "Title Part 2"

    def test_keeps_digits_and_dashes(self):
        assert clean_game_name("Half-Life 2") == "Half-Life 2"

    def test_keeps_dots_outside_tags(self):
        assert clean_game_name("Mr. Game 1.5") == "Mr. Game 1.5"

    def test_tags_are_non_greedy(self):
        assert clean_game_name("[Dev] Name [v.2]") == "Name"

    def test_idempotent(self):
        once = clean_game_name("Title: Part 2 [v.2] [MOD]")
        assert clean_game_name(once) == once


class TestExtractVersion:
    def test_version_tag(self):
        assert extract_version("MyGame [v.1.2.3.4]") == "1.2.3.4"

    def test_no_tag(self):
        assert extract_version("MyGame") == "Unknown"

    def test_uppercase_prefix_keeps_original_casing(self):
        assert extract_version("MyGame [V.Beta-RC1]") == "Beta-RC1"

    def test_first_tag_wins(self):
        assert extract_version("MyGame [MOD] [v.0.5] [v.0.6]") == "0.5"

    def test_unterminated_tag(self):
        assert extract_version("MyGame [v.1.2") == "Unknown"


class TestExtractThreadId:
    def test_thread_url(self):
        assert extract_thread_id("https://site.example/threads/cool-game.12345/") == 12345

    def test_first_dotted_number(self):
        assert extract_thread_id("https://site.example/threads/game-v0.5.777/") == 5

    def test_no_id(self):
        assert extract_thread_id("https://site.example/threads/cool-game/") is None


class TestHelpers:
    def test_is_mod(self):
        assert is_mod("Some Game [mod]")
        assert not is_mod("Some Game [v.1]")

    def test_directory_name_posix(self):
        assert directory_name("/games/Title: Part 2 [v.2]/") == "Title: Part 2 [v.2]"

    def test_directory_name_windows(self):
        assert directory_name("D:\\Games\\Some Game [v.1.0]") == "Some Game [v.1.0]"

    def test_comparison_key_matches_tagged_directory(self):
        assert comparison_key("Title: Part 2") == comparison_key("Title: Part 2 [v.2]")
        assert comparison_key("Title: Part 2") == "TITLE PART 2"
