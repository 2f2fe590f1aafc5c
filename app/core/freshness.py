"""Freshness Scoring.

Modul ini berisi logika inti penilaian kesegaran ikan berdasarkan
enam parameter organoleptik (SNI 2729-2013):
- calculate_freshness: ParameterRecord -> ScoredSample (skor + kategori)
- find_best_parameter: parameter dengan rata-rata tertinggi
- summarize_samples: statistik agregat untuk satu batch sampel
- rescore_sample: edit satu parameter lalu hitung ulang skor

Semua fungsi murni. Clock dan pembuat ID bisa di-inject agar hasil
deterministik saat testing.
"""

from __future__ import annotations

import os
import string
import time
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .models import (
    PARAMETER_FIELDS, PARAMETER_LABELS, EXCLUDED_VALUE,
    CATEGORY_EXCELLENT, CATEGORY_GOOD, CATEGORY_FAIR, CATEGORY_SPOILED, CATEGORY_INVALID,
    ParameterRecord, ScoredSample, BestParameter, BatchSummary, resolve_field,
)

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]

_ID_ALPHABET = string.digits + string.ascii_lowercase


def round2(value: float) -> float:
    """Bulatkan ke 2 desimal, half-up pada nilai biner eksak."""
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_sample_id() -> str:
    """ID unik per proses: sample_<epoch-ms>_<9 karakter base36 acak>."""
    suffix = "".join(_ID_ALPHABET[b % 36] for b in os.urandom(9))
    return f"sample_{int(time.time() * 1000)}_{suffix}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def categorize(score: float) -> str:
    """Petakan skor ke kategori; batas bawah tiap band inklusif."""
    if score >= 8:
        return CATEGORY_EXCELLENT
    elif score >= 6:
        return CATEGORY_GOOD
    elif score >= 4:
        return CATEGORY_FAIR
    return CATEGORY_SPOILED


def calculate_freshness(
    parameters: Union[ParameterRecord, Mapping[str, Any]],
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
    fish_name: Optional[str] = None,
    ai_response: Optional[str] = None,
    sample_id: Optional[str] = None,
    extras: Optional[Dict[str, str]] = None,
) -> ScoredSample:
    """Hitung skor kesegaran dari satu ParameterRecord.

    Skor = rata-rata semua parameter yang terisi (seperti format Excel:
    jumlah / banyaknya parameter), dibulatkan 2 desimal. Jika tidak ada
    parameter yang terisi, hasilnya sentinel skor 0 dengan kategori Invalid.
    Nilai di luar rentang 1-9 tidak divalidasi di sini.

    Args:
        parameters: ParameterRecord atau dict (key field/label).
        clock: Sumber waktu (default: UTC sekarang).
        id_factory: Pembuat ID sampel (default: generate_sample_id).
        fish_name: Nama ikan (opsional, diteruskan apa adanya).
        ai_response: Respons AI mentah (opsional, diteruskan apa adanya).
        sample_id: Pakai ID ini alih-alih membuat yang baru.
        extras: Kolom tambahan dari CSV (opsional).

    Returns:
        ScoredSample baru.
    """
    if not isinstance(parameters, ParameterRecord):
        parameters = ParameterRecord.from_mapping(parameters)

    present = [value for _, value in parameters.present_values()]
    if present:
        score = round2(sum(present) / len(present))
        category = categorize(score)
    else:
        score = 0.0
        category = CATEGORY_INVALID

    now = (clock or _utc_now)()
    return ScoredSample(
        id=sample_id or (id_factory or generate_sample_id)(),
        **parameters.to_dict(),
        score=score,
        category=category,
        timestamp=now.isoformat(),
        fish_name=fish_name,
        ai_response=ai_response,
        extras=dict(extras or {}),
    )


def find_best_parameter(samples: Iterable[ScoredSample]) -> BestParameter:
    """Cari parameter dengan rata-rata nilai tertinggi.

    Tie-break: parameter yang lebih dulu dalam urutan
    Mata, Insang, Lendir, Daging, Bau, Tekstur.
    """
    parameter_scores: Dict[str, List[float]] = {f: [] for f in PARAMETER_FIELDS}

    for sample in samples:
        for f in PARAMETER_FIELDS:
            value = getattr(sample, f, None)
            if _is_number(value):
                parameter_scores[f].append(value)

    best_parameter = ""
    best_average = 0.0
    for f in PARAMETER_FIELDS:
        scores = parameter_scores[f]
        if not scores:
            continue
        average = sum(scores) / len(scores)
        if average > best_average:
            best_average = average
            best_parameter = PARAMETER_LABELS[f]

    return BestParameter(parameter=best_parameter, score=round2(best_average))


def rescore_sample(sample: ScoredSample, field_name: str, value: int) -> ScoredSample:
    """Ganti satu parameter lalu hitung ulang skor dan kategori.

    ID, timestamp, nama ikan dan kolom tambahan dipertahankan.

    Raises:
        ValueError: jika field bukan parameter atau nilai bukan integer 1-9.
    """
    attr = resolve_field(field_name)
    if attr not in PARAMETER_FIELDS:
        raise ValueError(f"'{field_name}' bukan parameter kesegaran.")
    if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 9:
        raise ValueError(f"Nilai {value!r} tidak valid, harus integer 1-9.")

    updated = sample.parameters.to_dict()
    updated[attr] = value
    rescored = calculate_freshness(
        ParameterRecord(**updated),
        sample_id=sample.id,
        fish_name=sample.fish_name,
        ai_response=sample.ai_response,
        extras=sample.extras,
    )
    return replace(rescored, timestamp=sample.timestamp)


def ensure_unique_ids(
    samples: Iterable[ScoredSample],
    existing_ids: Iterable[str] = (),
    id_factory: Optional[IdFactory] = None,
) -> List[ScoredSample]:
    """Beri ID baru pada sampel yang ID-nya sudah dipakai.

    Dipakai saat menggabungkan hasil import ke sesi; sampel pertama dengan
    suatu ID tetap memakai ID tersebut.
    """
    make_id = id_factory or generate_sample_id
    taken = set(existing_ids)
    unique: List[ScoredSample] = []
    for sample in samples:
        if sample.id in taken:
            new_id = make_id()
            while new_id in taken:
                new_id = make_id()
            sample = replace(sample, id=new_id)
        taken.add(sample.id)
        unique.append(sample)
    return unique


def _mask_excluded(sample: ScoredSample) -> ScoredSample:
    masked = {f: None for f in PARAMETER_FIELDS if getattr(sample, f) == EXCLUDED_VALUE}
    return replace(sample, **masked) if masked else sample


def summarize_samples(samples: Iterable[ScoredSample]) -> BatchSummary:
    """Hitung statistik agregat untuk ringkasan hasil analisis.

    Nilai 4 (tidak sesuai SNI) diabaikan dalam perhitungan dan sampel
    Invalid tidak ikut dihitung kecuali di results_count.
    """
    all_samples = list(samples)
    valid = [_mask_excluded(s) for s in all_samples if s.is_valid]

    avg_score = round2(sum(s.score for s in valid) / len(valid)) if valid else 0.0

    category_counts: Dict[str, int] = {}
    for s in valid:
        category_counts[s.category] = category_counts.get(s.category, 0) + 1

    dominant_category = ""
    best_count = 0
    for category, count in category_counts.items():
        if count > best_count:
            dominant_category, best_count = category, count

    parameter_averages: Dict[str, float] = {}
    for f in PARAMETER_FIELDS:
        values = [getattr(s, f) for s in valid if _is_number(getattr(s, f))]
        parameter_averages[PARAMETER_LABELS[f]] = sum(values) / len(values) if values else 0.0

    fish_names: List[str] = []
    for s in all_samples:
        if s.fish_name and s.fish_name not in fish_names:
            fish_names.append(s.fish_name)

    return BatchSummary(
        results_count=len(all_samples),
        valid_count=len(valid),
        avg_score=avg_score,
        category_counts=category_counts,
        dominant_category=dominant_category,
        best_parameter=find_best_parameter(valid) if valid else BestParameter("", 0.0),
        parameter_averages=parameter_averages,
        fish_names=fish_names,
    )


def validate_parameters(
    record: ParameterRecord, minimum: int = 1, maximum: int = 9
) -> List[Tuple[str, Any]]:
    """Daftar (label, nilai) untuk parameter di luar rentang. Hanya untuk peringatan UI."""
    return [
        (PARAMETER_LABELS[f], value)
        for f, value in record.present_values()
        if not _is_number(value) or not minimum <= value <= maximum
    ]


QUICK_FILL_PRESETS: Dict[str, ParameterRecord] = {
    "Prima": ParameterRecord(9, 9, 9, 9, 9, 9),
    "Baik": ParameterRecord(8, 7, 8, 8, 7, 8),
    "Sedang": ParameterRecord(6, 5, 6, 5, 6, 5),
    "Busuk": ParameterRecord(2, 1, 2, 3, 1, 2),
    "Reset": ParameterRecord(),
}
