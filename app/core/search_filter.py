"""Modul Sort & Filter untuk koleksi hasil analisis kesegaran.

Menyediakan fungsi untuk tabel hasil di UI:
- Sorting berdasarkan field apa pun (nulls first saat ascending, last saat descending)
- Filter sampel yang mengandung nilai 4 (tidak sesuai SNI)
- Filter berdasarkan kategori dan pencarian teks (ID / nama ikan)
- Paginasi

Semua fungsi mengembalikan list baru dan tidak memodifikasi input.
"""

from __future__ import annotations

import math
import re
from functools import cmp_to_key
from typing import Any, List, Optional, Sequence, Tuple

from .explanation import has_invalid_values
from .models import ScoredSample, resolve_field


def _normalize_text(text: str) -> str:
    """Normalisasi teks untuk pencarian: lowercase, hapus karakter khusus."""
    if not text:
        return ""
    text = text.lower().replace("_", " ").replace("-", " ")
    text = re.sub(r"[^a-z0-9\s]", "", text)
    return " ".join(text.split())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare(a: Any, b: Any, ascending: bool) -> int:
    if a is None and b is None:
        return 0
    if a is None:
        return -1 if ascending else 1
    if b is None:
        return 1 if ascending else -1

    if isinstance(a, str) and isinstance(b, str):
        result = (a > b) - (a < b)
    elif _is_number(a) and _is_number(b):
        result = (a > b) - (a < b)
    else:
        # Tipe tidak cocok / tidak didukung: dianggap sama
        return 0
    return result if ascending else -result


def sort_samples(
    samples: Sequence[ScoredSample],
    field: str,
    ascending: bool = True
) -> List[ScoredSample]:
    """Urutkan sampel berdasarkan field (nama atribut atau kolom CSV, mis. 'Skor').

    Raises:
        ValueError: jika field tidak dikenal.
    """
    attr = resolve_field(field)
    if attr is None:
        raise ValueError(f"Field '{field}' tidak dikenal.")

    return sorted(
        samples,
        key=cmp_to_key(lambda x, y: _compare(getattr(x, attr), getattr(y, attr), ascending))
    )


def filter_samples(
    samples: Sequence[ScoredSample],
    invalid_only: bool = False,
    categories: Optional[Sequence[str]] = None,
    query: Optional[str] = None
) -> List[ScoredSample]:
    """Filter sampel untuk tabel hasil."""
    normalized_query = _normalize_text(query or "")
    results = []

    for sample in samples:
        if invalid_only and not has_invalid_values(sample):
            continue

        if categories and sample.category not in categories:
            continue

        if normalized_query:
            haystack = _normalize_text(f"{sample.id} {sample.fish_name or ''}")
            if normalized_query not in haystack:
                continue

        results.append(sample)

    return results


def paginate(
    samples: Sequence[ScoredSample],
    page: int,
    per_page: int = 10
) -> Tuple[List[ScoredSample], int]:
    """Ambil satu halaman (1-based). Halaman di luar rentang di-clamp.

    Returns:
        Tuple (item di halaman tersebut, total halaman)
    """
    if per_page < 1:
        raise ValueError("per_page minimal 1.")

    total_pages = max(1, math.ceil(len(samples) / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return list(samples[start:start + per_page]), total_pages
