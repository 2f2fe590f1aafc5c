# services/logging_service.py

"""
Menyediakan layanan logging terpusat untuk aplikasi.

Modul ini mengkonfigurasi logger standar menggunakan library logging
bawaan Python dan menyediakan LoggingService untuk:
- Log hasil analisis kesegaran
- Log import/export CSV (termasuk baris yang dibuang/dikoreksi)
- Track distribusi kategori (in-memory statistics)

Penggunaan RotatingFileHandler memastikan file log tidak membengkak
tanpa batas.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
from typing import Dict, Any, Optional
from datetime import datetime

from core.csv_codec import CsvImportResult
from core.models import ScoredSample

LOG_DIR = "logs"
LOG_FILE = os.path.join(LOG_DIR, "visionfish.log")

def setup_logger(
    name: str = 'VisionFishLogger',
    log_file: str = LOG_FILE,
    level: int = logging.INFO
) -> logging.Logger:
    """
    Mengkonfigurasi dan mengembalikan instance logger.

    Mencegah penambahan handler duplikat jika fungsi ini dipanggil
    beberapa kali.

    Args:
        name (str): Nama logger.
        log_file (str): Path ke file log.
        level (int): Level logging (misalnya, logging.INFO, logging.DEBUG).

    Returns:
        logging.Logger: Instance logger yang sudah dikonfigurasi.
    """
    # Pastikan direktori log ada
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)

    # Cek untuk menghindari penambahan handler berulang kali
    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 5MB per file, dengan backup 5 file lama.
    handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5, encoding='utf-8')
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger


class LoggingService:
    """Service untuk logging dan statistics analisis kesegaran.

    Menyediakan fungsi untuk:
    - Log hasil analisis per sampel
    - Log import/export CSV
    - Track distribusi kategori (in-memory statistics)
    """

    def __init__(
        self,
        logger_name: str = 'VisionFishLogger',
        log_file: str = LOG_FILE,
        level: int = logging.INFO
    ):
        """Initialize LoggingService.

        Args:
            logger_name: Nama logger yang akan digunakan
            log_file: Path file log
            level: Level logging
        """
        self.log_file = log_file
        self.logger = setup_logger(logger_name, log_file, level)
        self._category_counts: Dict[str, int] = {}
        self._imports = 0
        self._exports = 0

    def log_analysis(
        self,
        sample: ScoredSample,
        user_info: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log satu hasil analisis dan update statistik kategori."""
        fish = f" [{sample.fish_name}]" if sample.fish_name else ""
        self.logger.info(
            f"Analysis{fish}: {sample.id} → "
            f"{sample.category} (Skor: {sample.score:.2f})"
        )

        self._category_counts[sample.category] = self._category_counts.get(sample.category, 0) + 1

        if user_info:
            self.logger.info(f"User info: {user_info}")

    def log_import(self, result: CsvImportResult, source: str = "upload") -> None:
        """Log hasil import CSV. Baris yang dibuang/dikoreksi dicatat sebagai warning."""
        self._imports += 1
        self.logger.info(
            f"CSV import from {source}: {len(result.samples)}/{result.total_rows} rows imported"
        )
        if result.dropped_rows:
            self.logger.warning(
                f"CSV import from {source}: {result.dropped_rows} incomplete rows dropped "
                f"(lines {', '.join(str(n) for n in result.dropped_lines)})"
            )
        if result.corrected_rows:
            self.logger.warning(
                f"CSV import from {source}: {result.corrected_rows} rows had stale Skor/Kategori, recomputed"
            )

    def log_export(self, path: str, count: int) -> None:
        """Log export file (CSV/TXT/PDF)."""
        self._exports += 1
        self.logger.info(f"Exported {count} samples to {path}")

    def log_error(self, error_msg: str, exception: Optional[Exception] = None) -> None:
        """Log error message.

        Args:
            error_msg: Error message
            exception: Exception object (optional)
        """
        if exception:
            self.logger.error(f"{error_msg}: {str(exception)}", exc_info=True)
        else:
            self.logger.error(error_msg)

    def log_info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(message)

    def log_warning(self, message: str) -> None:
        """Log warning message."""
        self.logger.warning(message)

    def get_statistics(self) -> Dict[str, Any]:
        """Dapatkan statistik penggunaan sistem.

        Returns:
            Dictionary berisi berbagai statistik
        """
        category_distribution = sorted(
            [{"category": c, "count": n} for c, n in self._category_counts.items()],
            key=lambda x: x['count'],
            reverse=True
        )

        return {
            "total_analyses": sum(self._category_counts.values()),
            "category_distribution": category_distribution,
            "total_imports": self._imports,
            "total_exports": self._exports,
            "log_file": self.log_file,
            "log_file_exists": os.path.exists(self.log_file),
            "log_file_size": os.path.getsize(self.log_file) if os.path.exists(self.log_file) else 0,
            "timestamp": datetime.now().isoformat()
        }

    def clear_statistics(self) -> None:
        """Reset statistik in-memory."""
        self._category_counts = {}
        self._imports = 0
        self._exports = 0
        self.logger.warning("Analysis statistics cleared!")
