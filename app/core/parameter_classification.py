"""Klasifikasi parameter SNI 2729-2013 berdasarkan kemampuan analisis dari foto.

Hanya Mata, Insang dan Lendir yang bisa dinilai secara visual. Daging, Bau
dan Tekstur memerlukan pemeriksaan fisik sehingga nilainya hanya estimasi.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .freshness import round2
from .models import ParameterRecord, resolve_field

TYPE_VISUAL = "visual"
TYPE_NON_VISUAL = "non-visual"

VISUAL_FIELDS = ("eye", "gills", "slime")

# Skor dasar confidence per tipe parameter dan kualitas foto
BASE_CONFIDENCE: Dict[str, Dict[str, float]] = {
    TYPE_VISUAL: {"high": 0.9, "medium": 0.8, "low": 0.6},
    TYPE_NON_VISUAL: {"high": 0.2, "medium": 0.15, "low": 0.1},
}


@dataclass(frozen=True)
class ParameterClassification:
    name: str
    type: str
    reliability: str
    analysis_method: str
    description: str
    visual_indicators: List[str] = field(default_factory=list)
    limitations: List[str] = field(default_factory=list)


PARAMETER_CLASSIFICATIONS: Dict[str, ParameterClassification] = {
    "eye": ParameterClassification(
        name="Mata",
        type=TYPE_VISUAL,
        reliability="high",
        analysis_method="direct",
        description="Dapat dianalisis langsung dari foto dengan akurasi tinggi",
        visual_indicators=["Kejernihan kornea", "Bentuk mata (cembung/cekung)", "Warna pupil"],
        limitations=["Kualitas foto mempengaruhi akurasi", "Sudut pengambilan gambar"],
    ),
    "gills": ParameterClassification(
        name="Insang",
        type=TYPE_VISUAL,
        reliability="high",
        analysis_method="direct",
        description="Dapat dianalisis langsung dari warna dan kondisi visual",
        visual_indicators=["Warna (merah cerah/pucat)", "Tekstur permukaan", "Kelembaban visual"],
        limitations=["Perlu foto yang jelas pada area insang", "Pencahayaan mempengaruhi persepsi warna"],
    ),
    "slime": ParameterClassification(
        name="Lendir",
        type=TYPE_VISUAL,
        reliability="medium",
        analysis_method="inference",
        description="Dapat diestimasikan dari indikator visual permukaan tubuh",
        visual_indicators=["Kilap permukaan", "Tekstur visual", "Refleksi cahaya"],
        limitations=["Sulit membedakan antara air dan lendir alami", "Interpretasi subjektif"],
    ),
    "flesh": ParameterClassification(
        name="Daging",
        type=TYPE_NON_VISUAL,
        reliability="low",
        analysis_method="estimation",
        description="TIDAK dapat dianalisis dari foto - elastisitas memerlukan sentuhan fisik",
        visual_indicators=["Bentuk tubuh", "Tonus otot visual"],
        limitations=[
            "Tidak dapat menilai elastisitas",
            "Tidak dapat menilai kekenyalan",
            "Estimasi berdasarkan penampakan luar saja",
        ],
    ),
    "odor": ParameterClassification(
        name="Bau",
        type=TYPE_NON_VISUAL,
        reliability="impossible",
        analysis_method="impossible",
        description="TIDAK MUNGKIN dianalisis dari foto - memerlukan indra penciuman",
        visual_indicators=["Kondisi mata dan insang sebagai indikator tidak langsung"],
        limitations=[
            "Tidak dapat mencium aroma dari foto",
            "Estimasi berdasarkan korelasi visual sangat tidak akurat",
        ],
    ),
    "texture": ParameterClassification(
        name="Tekstur",
        type=TYPE_NON_VISUAL,
        reliability="low",
        analysis_method="estimation",
        description="TIDAK dapat dianalisis dari foto - tekstur memerlukan sentuhan fisik",
        visual_indicators=["Penampakan permukaan kulit"],
        limitations=[
            "Tidak dapat menilai kekasaran/kehalusan aktual",
            "Tekstur visual tidak sama dengan tekstur fisik",
            "Estimasi berdasarkan penampakan saja",
        ],
    ),
}


def get_parameter_reliability(name: str) -> ParameterClassification:
    """Klasifikasi untuk nama field atau label (mis. 'eye' atau 'Mata').

    Nama yang tidak dikenal mendapat klasifikasi fallback (visual, medium).
    """
    attr = resolve_field(name)
    if attr in PARAMETER_CLASSIFICATIONS:
        return PARAMETER_CLASSIFICATIONS[attr]
    return ParameterClassification(
        name=name,
        type=TYPE_VISUAL,
        reliability="medium",
        analysis_method="direct",
        description="Parameter tidak terdefinisi dalam SNI 2729-2013",
    )


def get_confidence_score(name: str, visual_quality: str) -> float:
    """Confidence (0-1) untuk satu parameter pada kualitas foto tertentu.

    Raises:
        ValueError: jika visual_quality bukan high/medium/low.
    """
    classification = get_parameter_reliability(name)
    scores = BASE_CONFIDENCE[classification.type]
    if visual_quality not in scores:
        raise ValueError(
            f"Kualitas visual '{visual_quality}' tidak dikenal. Pilihan: {', '.join(scores)}"
        )
    return scores[visual_quality]


def visual_score(record: ParameterRecord) -> float:
    """Rata-rata parameter yang dapat dinilai dari foto (Mata, Insang, Lendir)."""
    values: List[int] = [
        getattr(record, f) for f in VISUAL_FIELDS if getattr(record, f) is not None
    ]
    if not values:
        return 0.0
    return round2(sum(values) / len(values))


def non_visual_fields(record: Optional[ParameterRecord] = None) -> List[str]:
    """Label parameter non-visual, opsional hanya yang terisi pada record."""
    return [
        c.name for f, c in PARAMETER_CLASSIFICATIONS.items()
        if c.type == TYPE_NON_VISUAL and (record is None or getattr(record, f) is not None)
    ]
