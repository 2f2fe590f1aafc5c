"""Fasilitas penjelasan hasil analisis kesegaran.

Lookup murni dari kategori/skor ke:
- token warna badge (Streamlit) dan warna hex (grafik/PDF)
- status, rekomendasi, dan penjelasan detail
- deteksi nilai 4 (dikecualikan SNI 2729-2013)
- penjelasan HOW: bagaimana skor sebuah sampel dihitung
"""

from typing import Dict, List, Optional

from .models import (
    PARAMETER_FIELDS, PARAMETER_LABELS, EXCLUDED_VALUE,
    CATEGORY_EXCELLENT, CATEGORY_GOOD, CATEGORY_FAIR, CATEGORY_SPOILED, CATEGORY_INVALID,
    ScoredSample, BatchSummary,
)

# "Prima" adalah nama lama untuk kategori tertinggi
_CATEGORY_ALIASES = {"Prima": CATEGORY_EXCELLENT}

BADGE_COLORS: Dict[str, str] = {
    CATEGORY_EXCELLENT: "blue",
    CATEGORY_GOOD: "green",
    CATEGORY_FAIR: "orange",
    CATEGORY_SPOILED: "red",
}

CATEGORY_HEX: Dict[str, str] = {
    CATEGORY_EXCELLENT: "#2196F3",
    CATEGORY_GOOD: "#4CAF50",
    CATEGORY_FAIR: "#FF9800",
    CATEGORY_SPOILED: "#F44336",
    CATEGORY_INVALID: "#9E9E9E",
}

RECOMMENDATIONS: Dict[str, str] = {
    CATEGORY_EXCELLENT: "Ikan dalam kondisi sangat baik, layak untuk dikonsumsi dan dijual.",
    CATEGORY_GOOD: "Ikan dalam kondisi baik, masih layak untuk dikonsumsi.",
    CATEGORY_FAIR: "Ikan dalam kondisi sedang, disarankan untuk segera diolah.",
    CATEGORY_SPOILED: "Ikan dalam kondisi buruk, tidak layak untuk dikonsumsi.",
}

DETAILED_EXPLANATIONS: Dict[str, str] = {
    CATEGORY_EXCELLENT: (
        "Berdasarkan analisis parameter visual, ikan ini menunjukkan ciri-ciri kesegaran optimal. "
        "Mata jernih dan menonjol, insang berwarna merah cerah, tekstur daging elastis dan padat, "
        "serta tidak ada tanda-tanda pembusukan. Ikan ini sangat aman untuk dikonsumsi dan memiliki "
        "nilai gizi yang tinggi."
    ),
    CATEGORY_GOOD: (
        "Ikan ini masih dalam kondisi segar dengan sebagian besar parameter menunjukkan kualitas yang baik. "
        "Meskipun ada beberapa parameter yang sedikit menurun, secara keseluruhan ikan masih layak konsumsi "
        "dan aman untuk diolah menjadi berbagai hidangan."
    ),
    CATEGORY_FAIR: (
        "Ikan menunjukkan tanda-tanda penurunan kesegaran dengan beberapa parameter berada di batas toleransi. "
        "Disarankan untuk segera mengolah atau mengonsumsi ikan ini. Pastikan memasak dengan suhu yang cukup "
        "tinggi untuk memastikan keamanan pangan."
    ),
    CATEGORY_SPOILED: (
        "Ikan menunjukkan tanda-tanda pembusukan yang jelas dengan multiple parameter di bawah standar keamanan. "
        "Mata cekung dan keruh, insang pucat atau kehitaman, tekstur daging lunak, dan kemungkinan berbau tidak "
        "sedap. Ikan ini tidak aman untuk dikonsumsi dan sebaiknya dibuang."
    ),
}


def _canonical(category: str) -> str:
    return _CATEGORY_ALIASES.get(category, category)


# ============== LOOKUP HELPERS ==============

def get_badge_color(category: str) -> str:
    """Token warna Streamlit (blue/green/orange/red/gray) untuk badge kategori."""
    return BADGE_COLORS.get(_canonical(category), "gray")


def get_category_hex(category: str) -> str:
    return CATEGORY_HEX.get(_canonical(category), CATEGORY_HEX[CATEGORY_INVALID])


def get_freshness_status(score: float) -> str:
    if score >= 8:
        return "Very Fresh"
    elif score >= 6:
        return "Fresh"
    elif score >= 4:
        return "Acceptable"
    return "Spoiled"


def get_recommendation(category: str) -> str:
    return RECOMMENDATIONS.get(_canonical(category), "Status tidak diketahui.")


def get_detailed_explanation(category: str) -> str:
    return DETAILED_EXPLANATIONS.get(
        _canonical(category),
        "Tidak dapat memberikan penjelasan untuk kategori yang tidak dikenal."
    )


# ============== NILAI TIDAK SESUAI SNI ==============

def get_invalid_parameters(sample: ScoredSample) -> List[str]:
    """Label parameter yang bernilai 4, urut sesuai enumerasi."""
    return [
        PARAMETER_LABELS[f]
        for f in PARAMETER_FIELDS
        if getattr(sample, f, None) == EXCLUDED_VALUE
    ]


def has_invalid_values(sample: ScoredSample) -> bool:
    return bool(get_invalid_parameters(sample))


# ============== HOW EXPLANATION ==============

def explain_score(sample: ScoredSample) -> str:
    """Jelaskan bagaimana skor dan kategori sebuah sampel diperoleh (markdown)."""
    present = [(PARAMETER_LABELS[f], v) for f, v in sample.parameters.present_values()]
    if not present:
        return "Tidak ada parameter yang diisi, sehingga sampel dikategorikan **Invalid**."

    values = " + ".join(str(v) for _, v in present)
    lines = [
        f"**Bagaimana skor {sample.score} diperoleh?**",
        "",
        *[f"- {label}: {value}" for label, value in present],
        "",
        f"Skor = ({values}) / {len(present)} = **{sample.score}**",
        f"Kategori: **{sample.category}** ({get_freshness_status(sample.score)})",
    ]

    invalid = get_invalid_parameters(sample)
    if invalid:
        lines.append("")
        lines.append(
            f"⚠️ Nilai 4 pada {', '.join(invalid)} tidak termasuk dalam standar SNI."
        )
    return "\n".join(lines)


def build_share_text(summary: BatchSummary, fish_name: Optional[str] = None) -> str:
    """Ringkasan teks untuk dibagikan (mis. ke WhatsApp)."""
    best = summary.best_parameter
    return (
        f"Hasil analisis kualitas ikan {fish_name or 'Tidak Diketahui'}: \n"
        f"{summary.dominant_category} dengan skor rata-rata {summary.avg_score:g}/9.\n"
        f"Parameter terbaik: {best.parameter} ({best.score:g}/9).\n"
        f"{summary.results_count} sampel dianalisis.\n"
        f"\n"
        f"Analisis oleh VisionFish.io"
    )
