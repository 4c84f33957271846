"""Scale normalization of raw criterion scores."""

from __future__ import annotations

from ..schemas import ScaleType

NORMALIZED_MIN = 0.0
NORMALIZED_MAX = 100.0


class ScaleNormalizer:
    """Convert a raw per-criterion score into the common 0-100 scale.

    Raw scores outside the declared scale are not rejected here: a 0 on a
    1-5 scale comes out as -25. Callers that need bounded values use
    :meth:`clamp`.
    """

    _SCALE_BOUNDS: dict[ScaleType, tuple[float, float]] = {
        ScaleType.RATING_1_5: (1.0, 5.0),
        ScaleType.RATING_1_10: (1.0, 10.0),
    }

    def normalize(self, score: float, scale_type: ScaleType | str | None) -> float:
        scale = self._resolve_scale(scale_type)
        bounds = self._SCALE_BOUNDS.get(scale)
        if bounds is None:
            return float(score)
        low, high = bounds
        return (float(score) - low) / (high - low) * NORMALIZED_MAX

    @staticmethod
    def clamp(value: float) -> float:
        return max(NORMALIZED_MIN, min(NORMALIZED_MAX, value))

    @staticmethod
    def _resolve_scale(scale_type: ScaleType | str | None) -> ScaleType:
        if isinstance(scale_type, ScaleType):
            return scale_type
        if not scale_type:
            return ScaleType.RATING_1_5
        try:
            return ScaleType(scale_type)
        except ValueError:
            return ScaleType.ALREADY_NORMALIZED
