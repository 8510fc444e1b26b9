"""Tests for the style catalog."""

import pytest

from services.style_catalog import QUALITY_QUALIFIERS, StyleCatalog, StyleId, TintMatrix


class TestResolve:
    @pytest.mark.parametrize("name", ["Neon Glow", "neon glow", "NEON_GLOW", "neon-glow", " NeonGlow "])
    def test_lenient_lookup(self, catalog, name):
        assert catalog.resolve(name).style_id is StyleId.NEON_GLOW

    @pytest.mark.parametrize("name", [None, "", "Sepia", "???"])
    def test_unknown_falls_back_to_default(self, catalog, name):
        assert catalog.resolve(name).style_id is StyleId.DARK_GOLD
        assert catalog.is_known(name) is False

    def test_custom_default(self):
        catalog = StyleCatalog(default_style="Cosmic Purple")
        assert catalog.resolve("nope").style_id is StyleId.COSMIC_PURPLE

    def test_misconfigured_default_uses_dark_gold(self):
        catalog = StyleCatalog(default_style="does not exist")
        assert catalog.default_style is StyleId.DARK_GOLD

    def test_every_style_has_a_profile(self, catalog):
        assert {p.style_id for p in catalog.styles()} == set(StyleId)


class TestPrompts:
    def test_base_prompt_names_style(self, catalog):
        prompt = catalog.base_prompt("Cyberpunk Blue")
        assert "Anubis" in prompt
        assert "Cyberpunk Blue aesthetic" in prompt

    def test_base_prompt_appends_user_text(self, catalog):
        prompt = catalog.base_prompt("Dark Gold", "  wearing sunglasses ")
        assert prompt.endswith(" wearing sunglasses")

    def test_blank_user_text_ignored(self, catalog):
        assert catalog.base_prompt("Dark Gold", "   ") == catalog.base_prompt("Dark Gold")

    def test_prompt_for_adds_fragment_and_qualifiers(self, catalog):
        prompt = catalog.prompt_for("Neon Glow", "A portrait")
        profile = catalog.resolve("Neon Glow")
        assert prompt == f"A portrait {profile.prompt_fragment}. {QUALITY_QUALIFIERS}"


class TestProfiles:
    def test_accent_hex(self, catalog):
        assert catalog.resolve("Dark Gold").accent_hex == "#ffd700"

    def test_from_brightness_rows(self):
        tint = TintMatrix.from_brightness((3.0, 1.5, 0.0), (0.0, 0.0, 0.0))
        assert tint.matrix[0] == (1.0, 1.0, 1.0)
        assert tint.matrix[1] == (0.5, 0.5, 0.5)

    def test_per_channel_is_diagonal(self):
        tint = TintMatrix.per_channel((1.2, 0.8, 1.4), (1.0, 2.0, 3.0))
        assert tint.matrix == ((1.2, 0.0, 0.0), (0.0, 0.8, 0.0), (0.0, 0.0, 1.4))
        assert tint.offset == (1.0, 2.0, 3.0)

    def test_neon_glow_tint(self, catalog):
        tint = catalog.resolve("Neon Glow").tint
        assert tint.matrix == ((1.2, 0.0, 0.0), (0.0, 1.1, 0.0), (0.0, 0.0, 1.4))
        assert tint.offset == (0.0, 40.0, 60.0)
