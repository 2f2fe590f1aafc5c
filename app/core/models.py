# File: core/models.py

from dataclasses import dataclass, field, asdict, replace
from typing import List, Dict, Any, Optional, Mapping, Tuple

# Urutan enumerasi tetap: menentukan tie-break di find_best_parameter
PARAMETER_FIELDS: Tuple[str, ...] = ("eye", "gills", "slime", "flesh", "odor", "texture")

PARAMETER_LABELS: Dict[str, str] = {
    "eye": "Mata",
    "gills": "Insang",
    "slime": "Lendir",
    "flesh": "Daging",
    "odor": "Bau",
    "texture": "Tekstur",
}

CATEGORY_EXCELLENT = "Sangat Baik"
CATEGORY_GOOD = "Baik"
CATEGORY_FAIR = "Sedang"
CATEGORY_SPOILED = "Busuk"
CATEGORY_INVALID = "Invalid"

CATEGORY_ORDER: Tuple[str, ...] = (CATEGORY_EXCELLENT, CATEGORY_GOOD, CATEGORY_FAIR, CATEGORY_SPOILED)

# Nilai yang dikecualikan oleh SNI 2729-2013
EXCLUDED_VALUE = 4

# Alias kolom CSV / label tampilan -> nama atribut ScoredSample
FIELD_ALIASES: Dict[str, str] = {
    **{f: f for f in PARAMETER_FIELDS},
    **{label.lower(): f for f, label in PARAMETER_LABELS.items()},
    "id": "id",
    "score": "score",
    "skor": "score",
    "category": "category",
    "kategori": "category",
    "timestamp": "timestamp",
    "fish_name": "fish_name",
    "fishname": "fish_name",
    "ai_response": "ai_response",
    "airesponse": "ai_response",
}


def resolve_field(name: str) -> Optional[str]:
    """Terjemahkan nama kolom/label (case-insensitive) ke nama atribut, atau None."""
    if not isinstance(name, str):
        return None
    return FIELD_ALIASES.get(name.strip().lower())


@dataclass
class ParameterRecord:
    """Enam parameter organoleptik visual untuk satu sampel ikan (skala 1-9)."""
    eye: Optional[int] = None
    gills: Optional[int] = None
    slime: Optional[int] = None
    flesh: Optional[int] = None
    odor: Optional[int] = None
    texture: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ParameterRecord":
        """Buat record dari dict dengan key nama field atau label (Mata, Insang, ...)."""
        values: Dict[str, Any] = {}
        for key, value in data.items():
            attr = resolve_field(key)
            if attr in PARAMETER_FIELDS:
                values[attr] = value
        return cls(**values)

    def present_values(self) -> List[Tuple[str, int]]:
        return [(f, getattr(self, f)) for f in PARAMETER_FIELDS if getattr(self, f) is not None]

    def to_dict(self, labels: bool = False) -> Dict[str, Optional[int]]:
        if labels:
            return {PARAMETER_LABELS[f]: getattr(self, f) for f in PARAMETER_FIELDS}
        return {f: getattr(self, f) for f in PARAMETER_FIELDS}


@dataclass(frozen=True)
class ScoredSample:
    """Hasil scoring satu sampel. Tidak pernah dimutasi setelah dibuat."""
    id: str
    eye: Optional[int]
    gills: Optional[int]
    slime: Optional[int]
    flesh: Optional[int]
    odor: Optional[int]
    texture: Optional[int]
    score: float
    category: str
    timestamp: str
    fish_name: Optional[str] = None
    ai_response: Optional[str] = None
    extras: Dict[str, str] = field(default_factory=dict)

    @property
    def parameters(self) -> ParameterRecord:
        return ParameterRecord(**{f: getattr(self, f) for f in PARAMETER_FIELDS})

    @property
    def is_valid(self) -> bool:
        return self.category != CATEGORY_INVALID

    def get_field(self, name: str) -> Any:
        """Ambil nilai field berdasarkan nama atribut atau alias kolom CSV.

        Raises:
            ValueError: jika nama field tidak dikenal.
        """
        attr = resolve_field(name)
        if attr is None:
            raise ValueError(f"Field '{name}' tidak dikenal.")
        return getattr(self, attr)

    def with_fish_name(self, fish_name: Optional[str]) -> "ScoredSample":
        return replace(self, fish_name=fish_name.strip() if fish_name else None)

    def to_dict(self) -> Dict[str, Any]:
        """Format JSON-serializable untuk penyimpanan history."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoredSample":
        return cls(
            id=str(data.get("id", "")),
            eye=data.get("eye"),
            gills=data.get("gills"),
            slime=data.get("slime"),
            flesh=data.get("flesh"),
            odor=data.get("odor"),
            texture=data.get("texture"),
            score=float(data.get("score", 0.0)),
            category=data.get("category", CATEGORY_INVALID),
            timestamp=data.get("timestamp", ""),
            fish_name=data.get("fish_name"),
            ai_response=data.get("ai_response"),
            extras=dict(data.get("extras") or {}),
        )

    def to_row(self) -> Dict[str, Any]:
        """Convert ke format dict untuk tabel UI (label Indonesia)."""
        row: Dict[str, Any] = {"ID": self.id, "Ikan": self.fish_name or "-"}
        for f in PARAMETER_FIELDS:
            row[PARAMETER_LABELS[f]] = getattr(self, f)
        row["Skor"] = self.score
        row["Kategori"] = self.category
        row["Waktu"] = self.timestamp[:19].replace("T", " ")
        return row


@dataclass(frozen=True)
class BestParameter:
    """Parameter dengan rata-rata nilai tertinggi dalam satu koleksi sampel."""
    parameter: str
    score: float


@dataclass
class BatchSummary:
    """Statistik agregat untuk satu koleksi sampel."""
    results_count: int
    valid_count: int
    avg_score: float
    category_counts: Dict[str, int]
    dominant_category: str
    best_parameter: BestParameter
    parameter_averages: Dict[str, float]
    fish_names: List[str] = field(default_factory=list)

    @property
    def has_results(self) -> bool:
        return self.results_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
