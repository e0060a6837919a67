from studytracker.services.color_service import (
    BASE_PALETTE, ELLIPSIS, FALLBACK_COLOR, STUDY_TYPE_COLORS,
    adjust_lightness, assign_colors, color_at, derive_color, generate_palette,
    hex_to_hsl, hsl_to_hex, study_type_color, truncate_label,
)


class TestHsl:
    def test_primary_colors(self):
        assert hex_to_hsl("#ff0000") == (0.0, 100.0, 50.0)
        assert hsl_to_hex(120, 100, 50) == "#00ff00"

    def test_short_hex(self):
        assert hex_to_hsl("#fff")[2] == 100.0

    def test_lightness_is_clamped(self):
        assert adjust_lightness("#ffffff", 30) == "#ffffff"
        assert adjust_lightness("#000000", -30) == "#000000"

    def test_lighten_and_darken(self):
        _, _, base_l = hex_to_hsl(BASE_PALETTE[0])
        assert hex_to_hsl(adjust_lightness(BASE_PALETTE[0], 15))[2] > base_l
        assert hex_to_hsl(adjust_lightness(BASE_PALETTE[0], -15))[2] < base_l


class TestPalette:
    def test_exact_length(self):
        for count in (0, 1, 10, 11, 37):
            assert len(generate_palette(count)) == count

    def test_base_palette_comes_first(self):
        assert generate_palette(len(BASE_PALETTE)) == BASE_PALETTE

    def test_deterministic(self):
        assert generate_palette(25) == generate_palette(25)
        assert color_at(13) == color_at(13)

    def test_passes_alternate_lighter_and_darker(self):
        size = len(BASE_PALETTE)
        _, _, base_l = hex_to_hsl(BASE_PALETTE[2])
        assert hex_to_hsl(color_at(size + 2))[2] > base_l
        assert hex_to_hsl(color_at(2 * size + 2))[2] < base_l

    def test_extended_colors_differ_from_base(self):
        palette = generate_palette(20)
        assert palette[10:] != palette[:10]

    def test_empty_base_falls_back(self):
        assert color_at(3, base=[]) == FALLBACK_COLOR


class TestDeriveColor:
    def test_position_decides_color(self):
        ids = ["x", "y", "z"]
        assert derive_color("y", ids) == BASE_PALETTE[1]
        assert assign_colors(ids) == {"x": BASE_PALETTE[0], "y": BASE_PALETTE[1], "z": BASE_PALETTE[2]}

    def test_missing_id(self):
        assert derive_color("nope", ["x"]) == FALLBACK_COLOR

    def test_study_type_colors(self):
        assert study_type_color("coding") == STUDY_TYPE_COLORS["coding"]
        assert study_type_color("bogus") == FALLBACK_COLOR


class TestTruncateLabel:
    def test_short_name_untouched(self):
        assert truncate_label("Algebra") == "Algebra"
        assert truncate_label("x" * 18) == "x" * 18

    def test_long_name(self):
        label = truncate_label("Machine Learning Specialization")
        assert len(label) <= 18
        assert label.endswith(ELLIPSIS)
        assert label.startswith("Machine Learning")

    def test_trailing_space_trimmed(self):
        assert truncate_label("abcd efgh", max_length=6) == "abcd" + ELLIPSIS

    def test_edge_lengths(self):
        assert truncate_label("abc", max_length=0) == ""
        assert truncate_label("abc", max_length=1) == ELLIPSIS
        assert truncate_label(None) == ""
