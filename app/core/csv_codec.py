"""CSV Codec untuk koleksi ScoredSample.

Format:
- Baris pertama adalah header: id,Mata,Insang,Lendir,Daging,Bau,Tekstur,Skor,Kategori,timestamp
  (+ fishName / aiResponse / kolom tambahan bila ada)
- Satu baris per sampel, nilai kosong untuk parameter yang tidak terisi

Saat decode, Skor dan Kategori di file tidak dipercaya: keenam parameter
selalu dihitung ulang lewat calculate_freshness.
"""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .freshness import Clock, IdFactory, calculate_freshness
from .models import (
    PARAMETER_FIELDS, PARAMETER_LABELS, ParameterRecord, ScoredSample, resolve_field,
)

POLICY_DROP = "drop"
POLICY_REJECT = "reject"
POLICY_FILL_DEFAULT = "fill_default"
INCOMPLETE_ROW_POLICIES = (POLICY_DROP, POLICY_REJECT, POLICY_FILL_DEFAULT)

BASE_COLUMNS: List[str] = (
    ["id"] + [PARAMETER_LABELS[f] for f in PARAMETER_FIELDS] + ["Skor", "Kategori", "timestamp"]
)
OPTIONAL_COLUMNS = {"fish_name": "fishName", "ai_response": "aiResponse"}

TEMPLATE_CSV = "Mata,Insang,Lendir,Daging,Bau,Tekstur\n8,7,8,9,8,8\n7,6,7,8,6,7\n"

_LEADING_INT = re.compile(r"^[+-]?\d+")


class CsvCodecError(ValueError):
    """CSV tidak bisa di-encode/di-decode sesuai aturan yang diminta."""


@dataclass
class CsvImportResult:
    """Hasil decode CSV beserta diagnostik baris yang dibuang/dikoreksi."""
    samples: List[ScoredSample] = field(default_factory=list)
    total_rows: int = 0
    dropped_rows: int = 0
    dropped_lines: List[int] = field(default_factory=list)
    corrected_rows: int = 0


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_csv(samples: Sequence[ScoredSample]) -> str:
    """Serialisasi koleksi sampel ke teks CSV.

    Raises:
        CsvCodecError: jika koleksi kosong (header diturunkan dari data).
    """
    if not samples:
        raise CsvCodecError("Tidak ada data analisis untuk diekspor.")

    optional = [attr for attr in OPTIONAL_COLUMNS if any(getattr(s, attr) for s in samples)]
    extra_columns: List[str] = []
    for s in samples:
        for key in s.extras:
            if key not in extra_columns:
                extra_columns.append(key)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(BASE_COLUMNS + [OPTIONAL_COLUMNS[a] for a in optional] + extra_columns)

    for s in samples:
        row = [s.id] + [getattr(s, f) for f in PARAMETER_FIELDS] + [s.score, s.category, s.timestamp]
        row += [getattr(s, a) for a in optional]
        row += [s.extras.get(key) for key in extra_columns]
        writer.writerow([_format_value(v) for v in row])

    return buffer.getvalue().rstrip("\n")


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Parsing integer di awal string ('7.9' -> 7, '' / 'x' -> None)."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(0)) if match else None


def _parse_float(value: Optional[str]) -> Optional[float]:
    try:
        return float(value) if value else None
    except ValueError:
        return None


def import_csv(
    text: str,
    on_incomplete_row: str = POLICY_DROP,
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
) -> CsvImportResult:
    """Decode teks CSV menjadi sampel yang sudah dihitung ulang.

    Args:
        text: Isi file CSV.
        on_incomplete_row: 'drop' (buang diam-diam), 'reject' (raise) atau
            'fill_default' (parameter kosong dibiarkan None).
        clock: Sumber waktu untuk timestamp baru.
        id_factory: Pembuat ID untuk baris tanpa kolom id.

    Returns:
        CsvImportResult dengan sampel dan jumlah baris yang dibuang.

    Raises:
        ValueError: jika policy tidak dikenal.
        CsvCodecError: jika policy 'reject' dan ada baris tidak lengkap.
    """
    if on_incomplete_row not in INCOMPLETE_ROW_POLICIES:
        raise ValueError(
            f"Policy '{on_incomplete_row}' tidak dikenal. Pilihan: {', '.join(INCOMPLETE_ROW_POLICIES)}"
        )

    result = CsvImportResult()
    text = (text or "").lstrip("\ufeff")
    if not text.strip():
        return result

    # Hanya whitespace di akhir yang dibuang agar nomor baris sesuai file asli
    reader = csv.reader(io.StringIO(text.rstrip()))
    headers = next((row for row in reader if any(v.strip() for v in row)), None)
    if headers is None:
        return result
    headers = [h.strip() for h in headers]
    columns = [resolve_field(h) for h in headers]

    for values in reader:
        line_number = reader.line_num
        if not any(v.strip() for v in values):
            continue
        result.total_rows += 1

        params: Dict[str, Optional[int]] = {}
        passthrough: Dict[str, str] = {}
        extras: Dict[str, str] = {}
        stored_score: Optional[float] = None
        stored_category: Optional[str] = None

        for index, header in enumerate(headers):
            value = values[index].strip() if index < len(values) else None
            attr = columns[index]
            if attr in PARAMETER_FIELDS:
                params[attr] = _parse_int(value)
            elif attr == "score":
                stored_score = _parse_float(value)
            elif attr == "category":
                stored_category = value or None
            elif attr is not None:
                if value:
                    passthrough[attr] = value
            elif value is not None:
                extras[header] = value

        complete = all(params.get(f) is not None for f in PARAMETER_FIELDS)
        if not complete:
            if on_incomplete_row == POLICY_REJECT:
                raise CsvCodecError(f"Baris {line_number}: parameter tidak lengkap.")
            if on_incomplete_row == POLICY_DROP:
                result.dropped_rows += 1
                result.dropped_lines.append(line_number)
                continue

        sample = calculate_freshness(
            ParameterRecord(**params),
            clock=clock,
            id_factory=id_factory,
            sample_id=passthrough.get("id"),
            fish_name=passthrough.get("fish_name"),
            ai_response=passthrough.get("ai_response"),
            extras=extras,
        )
        if (stored_score is not None and stored_score != sample.score) or (
            stored_category is not None and stored_category != sample.category
        ):
            result.corrected_rows += 1
        result.samples.append(sample)

    return result


def from_csv(
    text: str,
    on_incomplete_row: str = POLICY_DROP,
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
) -> List[ScoredSample]:
    """Decode teks CSV; hanya mengembalikan daftar sampel."""
    return import_csv(text, on_incomplete_row, clock=clock, id_factory=id_factory).samples


def csv_template() -> str:
    return TEMPLATE_CSV


def export_filename(fish_name: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Nama file unduhan, mis. visionfish_analisis_ikan_Ikan_Nila_20250101_120000.csv."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    if fish_name and fish_name.strip():
        slug = re.sub(r"\s+", "_", fish_name.strip())
        return f"visionfish_analisis_ikan_{slug}_{stamp}.csv"
    return f"visionfish_analisis_ikan_{stamp}.csv"
