"""
Rate extraction for season and career stat lines.

Turns a raw stat line from a provider bundle into a typed record with
per-plate-appearance rates. Missing counts are defaulted to zero here,
once, so nothing downstream has to guard against absent fields.

Usage:
    record = SeasonRateRecord.from_dict({'walks': 80, 'atBats': 500,
                                         'hitByPitches': 5, 'sacrificeFlies': 5})
    record.plate_appearances  # 590
    record.walk_rate          # 0.1356
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


def safe_rate(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 for a zero or negative denominator."""
    if not denominator or denominator <= 0:
        return 0.0
    return numerator / denominator


def _count(raw: Dict[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None:
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class SeasonRateRecord:
    """Counting stats for one season (or one split) with derived rates."""
    plate_appearances: int
    walks: int
    hit_by_pitches: int
    strikeouts: int
    at_bats: int
    sacrifice_flies: int = 0

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> 'SeasonRateRecord':
        """
        Parse a camelCase stat line.

        Plate appearances are taken as supplied when positive, otherwise
        rebuilt as at-bats + walks + HBP + sacrifice flies.
        """
        raw = raw or {}
        at_bats = _count(raw, 'atBats')
        walks = _count(raw, 'walks')
        hit_by_pitches = _count(raw, 'hitByPitches')
        sacrifice_flies = _count(raw, 'sacrificeFlies')

        plate_appearances = _count(raw, 'plateAppearances')
        if plate_appearances == 0:
            plate_appearances = at_bats + walks + hit_by_pitches + sacrifice_flies

        return cls(
            plate_appearances=plate_appearances,
            walks=walks,
            hit_by_pitches=hit_by_pitches,
            strikeouts=_count(raw, 'strikeouts'),
            at_bats=at_bats,
            sacrifice_flies=sacrifice_flies,
        )

    @property
    def walk_rate(self) -> float:
        return safe_rate(self.walks, self.plate_appearances)

    @property
    def hbp_rate(self) -> float:
        return safe_rate(self.hit_by_pitches, self.plate_appearances)

    @property
    def strikeout_rate(self) -> float:
        return safe_rate(self.strikeouts, self.plate_appearances)

    @property
    def bb_to_k(self) -> float:
        return self.walks / max(self.strikeouts, 1)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update({
            'walk_rate': self.walk_rate,
            'hbp_rate': self.hbp_rate,
            'strikeout_rate': self.strikeout_rate,
            'bb_to_k': self.bb_to_k,
        })
        return data


def extract_rates(raw: Optional[Dict[str, Any]]) -> Dict[str, float]:
    """Convenience wrapper returning just the four derived rates."""
    record = SeasonRateRecord.from_dict(raw)
    return {
        'walk_rate': record.walk_rate,
        'hbp_rate': record.hbp_rate,
        'strikeout_rate': record.strikeout_rate,
        'bb_to_k': record.bb_to_k,
    }
