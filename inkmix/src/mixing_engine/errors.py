from __future__ import annotations


class MixingEngineError(ValueError):
    pass


class InvalidHex(MixingEngineError):
    pass


class InvalidRgb(MixingEngineError):
    pass


class InvalidHsl(MixingEngineError):
    pass


class EmptyPalette(MixingEngineError):
    pass


class InsufficientPalette(MixingEngineError):
    pass


class InsufficientChromaticPalette(MixingEngineError):
    pass


class PaletteTooLarge(MixingEngineError):
    pass


class ColorNotFound(MixingEngineError, LookupError):
    def __init__(self, color_id: str) -> None:
        super().__init__(f"color not found: {color_id}")
        self.color_id = color_id


class ZeroWeightMixture(MixingEngineError):
    pass


class ConfigError(MixingEngineError):
    pass


class PaletteValidationError(MixingEngineError):
    pass
