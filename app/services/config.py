# services/config.py

"""
Memuat konfigurasi aplikasi dari configs/app.yaml.

File YAML di-merge di atas DEFAULT_CONFIG sehingga key yang tidak ditulis
tetap punya nilai default. Jika file tidak ada, default dipakai apa adanya.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from core.csv_codec import INCOMPLETE_ROW_POLICIES, POLICY_DROP

CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "app.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {"name": "VisionFish – Analisis Kesegaran Ikan"},
    "scoring": {"rating_min": 1, "rating_max": 9},
    "csv": {"on_incomplete_row": POLICY_DROP},
    "storage": {"history_dir": "data/history"},
    "logging": {"log_file": "logs/visionfish.log", "level": "INFO"},
    "reports": {"output_dir": "reports"},
    "ui": {"results_per_page": 10},
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Baca konfigurasi YAML dan gabungkan dengan DEFAULT_CONFIG.

    Args:
        path: Path file YAML (default: configs/app.yaml di folder app).

    Returns:
        Dict konfigurasi lengkap.

    Raises:
        ValueError: jika isi file bukan mapping YAML.
    """
    config_path = Path(path) if path else CONFIG_PATH
    if not config_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(data, dict):
        raise ValueError(f"Konfigurasi '{config_path}' harus berupa mapping YAML.")

    return _deep_merge(DEFAULT_CONFIG, data)


def get_incomplete_row_policy(config: Dict[str, Any]) -> str:
    """Policy baris CSV tidak lengkap dari config, divalidasi."""
    policy = config.get("csv", {}).get("on_incomplete_row", POLICY_DROP)
    if policy not in INCOMPLETE_ROW_POLICIES:
        raise ValueError(
            f"csv.on_incomplete_row '{policy}' tidak dikenal. "
            f"Pilihan: {', '.join(INCOMPLETE_ROW_POLICIES)}"
        )
    return policy
