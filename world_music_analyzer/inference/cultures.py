"""Static table of musical traditions used for similarity scoring.

Each record carries explicit descriptor tags instead of free text so the
scorer never has to search prose for keywords. Tags in use:

- rhythm: steady, regular, complex, polyrhythmic, free, cyclic
- scale: pentatonic, major, minor, modal, microtonal
- instrument: bright, warm, percussive, plucked, bowed, wind, drone, vocal
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Tuple, Union

from ..core import ConfigurationError


@dataclass(frozen=True)
class CultureCharacteristics:
    """Descriptors a tradition is matched on."""

    tempo_range_bpm: Tuple[float, float]
    rhythm_tags: FrozenSet[str] = frozenset()
    scale_tags: FrozenSet[str] = frozenset()
    instrument_tags: FrozenSet[str] = frozenset()

    @property
    def tempo_midpoint(self) -> float:
        low, high = self.tempo_range_bpm
        return (low + high) / 2.0


@dataclass(frozen=True)
class CultureRecord:
    """A named musical tradition."""

    id: str
    name: str
    region: str
    characteristics: CultureCharacteristics
    description: str = ""


def _record(id, name, region, tempo, rhythm, scales, instruments, description):
    return CultureRecord(
        id=id,
        name=name,
        region=region,
        characteristics=CultureCharacteristics(
            tempo_range_bpm=tempo,
            rhythm_tags=frozenset(rhythm),
            scale_tags=frozenset(scales),
            instrument_tags=frozenset(instruments),
        ),
        description=description,
    )


DEFAULT_CULTURES: Tuple[CultureRecord, ...] = (
    _record(
        "chinese-traditional", "Chinese Traditional", "East Asia",
        (60, 100), ["steady", "regular"], ["pentatonic"],
        ["plucked", "bowed", "wind", "bright"],
        "Guqin, erhu and pipa music built on pentatonic melodies.",
    ),
    _record(
        "indian-classical", "Indian Classical", "South Asia",
        (40, 160), ["complex", "cyclic"], ["modal", "microtonal"],
        ["plucked", "drone", "percussive", "warm"],
        "Raga melody over tala rhythmic cycles, accompanied by tabla and tanpura.",
    ),
    _record(
        "west-african", "West African", "West Africa",
        (100, 140), ["polyrhythmic", "complex"], ["pentatonic", "major"],
        ["percussive", "plucked", "bright"],
        "Interlocking drum ensembles, kora and balafon.",
    ),
    _record(
        "middle-eastern", "Middle Eastern", "Middle East",
        (70, 120), ["complex", "cyclic"], ["modal", "microtonal", "minor"],
        ["plucked", "percussive", "wind", "warm"],
        "Maqam-based melody on oud and ney with iqa' rhythmic modes.",
    ),
    _record(
        "latin-american", "Latin American", "Latin America",
        (90, 140), ["polyrhythmic", "steady"], ["major", "minor"],
        ["percussive", "plucked", "bright"],
        "Clave-driven rhythms from son, salsa and samba traditions.",
    ),
    _record(
        "japanese-traditional", "Japanese Traditional", "East Asia",
        (50, 90), ["free"], ["pentatonic", "minor"],
        ["plucked", "wind", "warm"],
        "Koto, shakuhachi and shamisen music with spacious phrasing.",
    ),
    _record(
        "european-folk", "European Folk", "Europe",
        (90, 130), ["steady", "regular"], ["major", "minor", "modal"],
        ["bowed", "wind", "plucked", "bright"],
        "Dance tunes and ballads on fiddle, accordion and pipes.",
    ),
    _record(
        "aboriginal-australian", "Aboriginal Australian", "Australia",
        (60, 110), ["steady", "regular"], [],
        ["drone", "wind", "percussive", "warm"],
        "Didgeridoo drones with clapsticks and song cycles.",
    ),
    _record(
        "indonesian-gamelan", "Indonesian Gamelan", "Southeast Asia",
        (60, 120), ["cyclic", "regular", "complex"], ["pentatonic"],
        ["percussive", "bright"],
        "Bronze metallophone and gong orchestras with interlocking parts.",
    ),
    _record(
        "central-african", "Central African", "Sub-Saharan Africa",
        (100, 150), ["polyrhythmic", "complex"], ["pentatonic"],
        ["plucked", "percussive", "vocal", "bright"],
        "Mbira and polyphonic vocal music built on cyclic patterns.",
    ),
    _record(
        "flamenco", "Flamenco", "Mediterranean",
        (80, 200), ["complex", "polyrhythmic"], ["minor", "modal"],
        ["plucked", "percussive", "vocal", "bright"],
        "Guitar, cante and palmas in compás cycles of 12 beats.",
    ),
    _record(
        "celtic", "Celtic", "Europe",
        (100, 180), ["steady", "regular"], ["major", "modal", "pentatonic"],
        ["bowed", "wind", "plucked", "bright"],
        "Reels, jigs and airs on fiddle, whistle and harp.",
    ),
)


def get_culture(culture_id: str, cultures: Iterable[CultureRecord] = DEFAULT_CULTURES) -> CultureRecord:
    """Look up a record by id."""
    for culture in cultures:
        if culture.id == culture_id:
            return culture
    raise KeyError(f"Unknown culture: {culture_id}")


def cultures_by_region(region: str, cultures: Iterable[CultureRecord] = DEFAULT_CULTURES) -> List[CultureRecord]:
    """All records whose region matches (case-insensitive)."""
    region = region.lower()
    return [c for c in cultures if c.region.lower() == region]


def load_culture_table(path: Union[str, Path]) -> Tuple[CultureRecord, ...]:
    """
    Load a culture table from a JSON file.

    The file holds a list of objects::

        {"id": "...", "name": "...", "region": "...", "description": "...",
         "tempo": [low, high], "rhythm": [...], "scales": [...],
         "instruments": [...]}

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the content is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Culture table not found: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Culture table is not valid JSON: {e}") from e

    if not isinstance(raw, list):
        raise ConfigurationError("Culture table must be a JSON list")

    records = []
    seen = set()
    for index, entry in enumerate(raw):
        record = _parse_record(entry, index)
        if record.id in seen:
            raise ConfigurationError(f"Duplicate culture id: {record.id}")
        seen.add(record.id)
        records.append(record)
    return tuple(records)


def _parse_record(entry, index: int) -> CultureRecord:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Culture #{index} must be an object")

    missing = [key for key in ("id", "name", "region", "tempo") if key not in entry]
    if missing:
        raise ConfigurationError(f"Culture #{index} is missing {', '.join(missing)}")

    tempo = entry["tempo"]
    try:
        low, high = (float(t) for t in tempo)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Culture #{index} tempo must be [low, high]") from e
    if low <= 0 or high < low:
        raise ConfigurationError(f"Culture #{index} has invalid tempo range {tempo}")

    def tags(key):
        value = entry.get(key, [])
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigurationError(f"Culture #{index} field '{key}' must be a list of strings")
        return [v.lower() for v in value]

    return _record(
        str(entry["id"]),
        str(entry["name"]),
        str(entry["region"]),
        (low, high),
        tags("rhythm"),
        tags("scales"),
        tags("instruments"),
        str(entry.get("description", "")),
    )
