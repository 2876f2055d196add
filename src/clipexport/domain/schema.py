"""Pydantic schema for encoding settings coming from untrusted input.

EncodingSettingsModel parses JSON request bodies, the [export] config
section, and CLI options into the frozen EncodingSettings dataclass.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from clipexport.domain.enums import AudioMode, Preset, ProcessingMode, Resolution
from clipexport.domain.models import (
    AUDIO_BITRATE_MAX_KBPS,
    AUDIO_BITRATE_MIN_KBPS,
    CRF_MAX,
    CRF_MIN,
    FPS_MAX,
    EncodingSettings,
)

# Short names accepted in addition to the enum wire values
_MODE_ALIASES = {
    "precise": ProcessingMode.PRECISE.value,
    "copy": ProcessingMode.COPY_FAST.value,
    "fast_seek": ProcessingMode.FAST_SEEK.value,
}

# Fields where an explicit null is a value (clears the base) rather than "unset"
_NULLABLE_FIELDS = frozenset({"fps"})


class EncodingSettingsModel(BaseModel):
    """Pydantic model for encoding settings."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    processing_mode: ProcessingMode = ProcessingMode.COPY_FAST
    resolution: Resolution = Resolution.SOURCE
    preset: Preset = Preset.ULTRAFAST
    crf: int = Field(default=20, ge=CRF_MIN, le=CRF_MAX)
    audio_mode: AudioMode = Field(
        default=AudioMode.AAC,
        validation_alias=AliasChoices("audio_mode", "audio_codec"),
    )
    audio_bitrate_kbps: int = Field(
        default=128, ge=AUDIO_BITRATE_MIN_KBPS, le=AUDIO_BITRATE_MAX_KBPS
    )
    fps: float | None = Field(default=None, gt=0, le=FPS_MAX, allow_inf_nan=False)

    @field_validator("processing_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        """Accept short aliases and any casing for processing mode."""
        if isinstance(v, str):
            key = v.strip().casefold().replace("-", "_")
            return _MODE_ALIASES.get(key, key)
        return v

    @field_validator("resolution", "preset", "audio_mode", mode="before")
    @classmethod
    def casefold_choice(cls, v: Any) -> Any:
        """Casefold string enum values for case-insensitive matching."""
        if isinstance(v, str):
            return v.strip().casefold()
        return v

    def to_settings(self) -> EncodingSettings:
        """Convert to the domain dataclass."""
        return EncodingSettings(
            processing_mode=self.processing_mode,
            resolution=self.resolution,
            preset=self.preset,
            crf=self.crf,
            audio_mode=self.audio_mode,
            audio_bitrate_kbps=self.audio_bitrate_kbps,
            fps=self.fps,
        )


def parse_encoding_settings(
    data: dict[str, Any] | None,
    base: EncodingSettings | None = None,
) -> EncodingSettings:
    """Parse a settings mapping, filling gaps from a base.

    Args:
        data: Raw settings mapping (None means "use base").
        base: Settings supplying values for keys absent from data. A None
            value also falls back to base, except for fps where None
            clears the frame rate override.

    Returns:
        Validated EncodingSettings.

    Raises:
        ValueError: With a readable message if any value is invalid.
    """
    merged: dict[str, Any] = base.to_dict() if base is not None else {}
    if data:
        merged.update(
            {
                ("audio_mode" if key == "audio_codec" else key): value
                for key, value in data.items()
                if value is not None or key in _NULLABLE_FIELDS
            }
        )
    try:
        return EncodingSettingsModel.model_validate(merged).to_settings()
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValueError(f"Invalid encoding settings: {details}") from e
