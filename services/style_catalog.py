"""
Style catalog: prompt fragments and local-pipeline parameters per avatar style.

Unknown or missing style names never fail; they resolve to the default style.
"""
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

RGB = Tuple[int, int, int]
Matrix3 = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]

QUALITY_QUALIFIERS = "High quality, detailed digital art, professional avatar, 1:1 aspect ratio"

BASE_PROMPT_TEMPLATE = (
    "Transform this into an ancient Egyptian Anubis-themed avatar with {label} aesthetic. "
    "Include pharaoh headdress, Egyptian jewelry, and mystical elements."
)


class StyleId(str, Enum):
    NEON_GLOW = "Neon Glow"
    DARK_GOLD = "Dark Gold"
    CYBERPUNK_BLUE = "Cyberpunk Blue"
    COSMIC_PURPLE = "Cosmic Purple"


@dataclass(frozen=True)
class TintMatrix:
    """
    Linear colour transform: out[c] = clamp(0, 255, sum_k matrix[c][k] * in[k] + offset[c]).
    A diagonal matrix is a plain per-channel scale.
    """
    matrix: Matrix3
    offset: Tuple[float, float, float]

    @classmethod
    def per_channel(cls, scales: Tuple[float, float, float], offsets: Tuple[float, float, float]) -> "TintMatrix":
        r, g, b = scales
        return cls(matrix=((r, 0.0, 0.0), (0.0, g, 0.0), (0.0, 0.0, b)), offset=offsets)

    @classmethod
    def from_brightness(cls, scales: Tuple[float, float, float], offsets: Tuple[float, float, float]) -> "TintMatrix":
        """Every output channel is driven by the mean of the input channels."""
        rows = tuple((s / 3.0, s / 3.0, s / 3.0) for s in scales)
        return cls(matrix=rows, offset=offsets)


@dataclass(frozen=True)
class StyleProfile:
    style_id: StyleId
    prompt_fragment: str
    tint: TintMatrix
    accent_color: RGB
    frame_enabled: bool = True

    @property
    def label(self) -> str:
        return self.style_id.value

    @property
    def accent_hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(*self.accent_color)


_PROFILES = {
    StyleId.NEON_GLOW: StyleProfile(
        style_id=StyleId.NEON_GLOW,
        prompt_fragment="with vibrant neon colors, glowing effects, electric atmosphere, cyberpunk lighting",
        tint=TintMatrix.per_channel((1.2, 1.1, 1.4), (0.0, 40.0, 60.0)),
        accent_color=(255, 0, 255),
    ),
    StyleId.DARK_GOLD: StyleProfile(
        style_id=StyleId.DARK_GOLD,
        prompt_fragment="with rich golden tones, dark shadows, luxurious metallic textures, ancient Egyptian opulence",
        tint=TintMatrix.from_brightness((1.3, 1.1, 0.6), (50.0, 30.0, 10.0)),
        accent_color=(255, 215, 0),
    ),
    StyleId.CYBERPUNK_BLUE: StyleProfile(
        style_id=StyleId.CYBERPUNK_BLUE,
        prompt_fragment="with electric blue accents, futuristic elements, digital matrix effects, sci-fi atmosphere",
        tint=TintMatrix.per_channel((0.7, 0.9, 1.5), (20.0, 30.0, 70.0)),
        accent_color=(0, 255, 255),
    ),
    StyleId.COSMIC_PURPLE: StyleProfile(
        style_id=StyleId.COSMIC_PURPLE,
        prompt_fragment="with deep purple cosmic themes, space nebula backgrounds, mystical starry effects",
        tint=TintMatrix.per_channel((1.2, 0.8, 1.4), (40.0, 10.0, 60.0)),
        accent_color=(138, 43, 226),
    ),
}


def _normalize(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", name.lower())


class StyleCatalog:
    def __init__(self, default_style: str = StyleId.DARK_GOLD.value):
        self._profiles: Mapping[StyleId, StyleProfile] = MappingProxyType(dict(_PROFILES))
        self._by_key = {_normalize(sid.value): sid for sid in self._profiles}
        self._by_key.update({_normalize(sid.name): sid for sid in self._profiles})
        # A misconfigured default must not break resolution either.
        self.default_style = self._lookup(default_style) or StyleId.DARK_GOLD

    def _lookup(self, style: Optional[str]) -> Optional[StyleId]:
        if not style:
            return None
        return self._by_key.get(_normalize(str(style)))

    def styles(self) -> Tuple[StyleProfile, ...]:
        return tuple(self._profiles.values())

    def is_known(self, style: Optional[str]) -> bool:
        return self._lookup(style) is not None

    def resolve(self, style: Optional[str]) -> StyleProfile:
        return self._profiles[self._lookup(style) or self.default_style]

    def base_prompt(self, style: Optional[str], extra: Optional[str] = None) -> str:
        prompt = BASE_PROMPT_TEMPLATE.format(label=self.resolve(style).label)
        if extra and extra.strip():
            prompt = f"{prompt} {extra.strip()}"
        return prompt

    def prompt_for(self, style: Optional[str], base_prompt: str) -> str:
        profile = self.resolve(style)
        return f"{base_prompt.strip()} {profile.prompt_fragment}. {QUALITY_QUALIFIERS}"
