# services/storage.py

"""
Menyediakan kelas abstraksi untuk operasi penyimpanan file dan riwayat analisis.

Modul ini berisi:
- JsonStorage: Kelas untuk baca/tulis file JSON umum
- StorageService: Kelas untuk mengelola riwayat sesi analisis kesegaran
  dan export/import CSV

Memisahkan logika I/O dari logika bisnis inti aplikasi.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence
from datetime import datetime

from core.csv_codec import (
    POLICY_DROP, CsvImportResult, csv_template, export_filename, import_csv, to_csv,
)
from core.freshness import round2, summarize_samples
from core.models import ScoredSample

logger = logging.getLogger('VisionFishLogger')


class JsonStorage:
    """Kelas untuk membaca dan menulis data ke file JSON."""

    def read(self, file_path: str) -> Optional[Any]:
        """
        Membaca dan mem-parsing data dari sebuah file JSON.

        Args:
            file_path (str): Path ke file JSON.

        Returns:
            Optional[Any]: Data yang di-parsing (bisa list atau dict),
                           atau None jika file tidak ditemukan atau terjadi error.
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            logger.info(f"File tidak ditemukan di '{file_path}'")
            return None
        except json.JSONDecodeError:
            logger.error(f"Gagal mem-parsing JSON dari '{file_path}'")
            return None
        except OSError as e:
            logger.error(f"Terjadi error saat membaca file '{file_path}': {e}")
            return None

    def write(self, file_path: str, data: Any) -> bool:
        """
        Menulis data ke sebuah file JSON.

        Jika direktori tidak ada, akan dibuat secara otomatis.

        Args:
            file_path (str): Path tujuan file JSON.
            data (Any): Data yang akan ditulis (harus JSON-serializable).

        Returns:
            bool: True jika berhasil, False jika gagal.
        """
        try:
            dir_name = os.path.dirname(file_path)
            if dir_name:
                os.makedirs(dir_name, exist_ok=True)

            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4, ensure_ascii=False)
            return True
        except TypeError as e:
            logger.error(f"Data tidak dapat diserialisasi ke JSON. Error: {e}")
            return False
        except OSError as e:
            logger.error(f"Terjadi error saat menulis ke file '{file_path}': {e}")
            return False


class StorageService:
    """Service untuk mengelola riwayat sesi analisis.

    Menyediakan fungsi untuk:
    - Simpan satu batch sampel sebagai sesi
    - Load, cari dan hapus riwayat sesi
    - Statistik agregat riwayat
    - Export/import CSV dan template CSV
    """

    def __init__(self, history_dir: str = "data/history"):
        """Initialize StorageService.

        Args:
            history_dir: Direktori untuk menyimpan history files
        """
        self.history_dir = history_dir
        self.history_file = os.path.join(history_dir, "analyses.json")
        self.json_storage = JsonStorage()

        os.makedirs(history_dir, exist_ok=True)

    def _read_history(self) -> List[Dict[str, Any]]:
        history = self.json_storage.read(self.history_file)
        if history is None:
            return []
        if not isinstance(history, list):
            logger.warning(f"File history '{self.history_file}' bukan list. Membuat file baru.")
            return []
        return history

    def _write_history(self, history: List[Dict[str, Any]]) -> None:
        if not self.json_storage.write(self.history_file, history):
            raise IOError("Gagal menulis ke file history.")

    def save_session(
        self,
        samples: Sequence[ScoredSample],
        fish_name: Optional[str] = None,
        user_info: Optional[Dict[str, Any]] = None
    ) -> str:
        """Menyimpan satu batch sampel ke file history utama.

        Returns:
            ID sesi yang baru dibuat

        Raises:
            ValueError: jika tidak ada sampel
            IOError: jika file history gagal ditulis
        """
        if not samples:
            raise ValueError("Tidak ada sampel untuk disimpan.")

        history = self._read_history()

        session_id = f"S_{datetime.now().strftime('%Y%m%d%H%M%S')}_{os.urandom(4).hex()}"
        summary = summarize_samples(samples)

        data_to_save = {
            "session_id": session_id,
            "timestamp": datetime.now().isoformat(),
            "fish_name": fish_name or None,
            "user_info": user_info or {},
            "samples": [s.to_dict() for s in samples],
            "summary": summary.to_dict(),
        }

        # Sesi terbaru di atas
        history.insert(0, data_to_save)
        self._write_history(history)
        return session_id

    def load_history(self, limit: Optional[int] = 20) -> List[Dict[str, Any]]:
        """Load riwayat sesi dari file.

        Args:
            limit: Batasi jumlah sesi yang dikembalikan (None = semua)

        Returns:
            List sesi, sorted by timestamp descending
        """
        history = self._read_history()
        history.sort(key=lambda x: x.get('timestamp', ''), reverse=True)

        if limit:
            history = history[:limit]

        return history

    def get_session_by_id(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Ambil detail sesi berdasarkan ID, atau None jika tidak ditemukan."""
        for session in self.load_history(limit=None):
            if session.get('session_id') == session_id:
                return session
        return None

    def delete_session(self, session_id: str) -> bool:
        """Hapus sesi dari history. Returns False jika ID tidak ditemukan."""
        history = self._read_history()
        remaining = [s for s in history if s.get('session_id') != session_id]
        if len(remaining) == len(history):
            return False
        self._write_history(remaining)
        return True

    @staticmethod
    def session_samples(session: Dict[str, Any]) -> List[ScoredSample]:
        """Rekonstruksi ScoredSample dari data sesi yang tersimpan."""
        return [ScoredSample.from_dict(s) for s in session.get('samples', [])]

    def search_sessions(
        self,
        history: List[Dict[str, Any]],
        query: Optional[str] = None,
        category_filter: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Search sesi dengan berbagai filter dari list history yang sudah di-load.

        Args:
            history: List sesi untuk dicari.
            query: Kata kunci untuk search di ID sesi atau nama ikan
            category_filter: Filter berdasarkan kategori dominan
            date_from: Filter dari tanggal (YYYY-MM-DD), inklusif
            date_to: Filter sampai tanggal (YYYY-MM-DD), inklusif

        Returns:
            List sesi yang lolos filter
        """
        results = []

        for session in history:
            if query:
                session_id = session.get('session_id', '').lower()
                fish_name = (session.get('fish_name') or '').lower()
                if query.lower() not in session_id and query.lower() not in fish_name:
                    continue

            if category_filter:
                dominant = session.get('summary', {}).get('dominant_category')
                if dominant != category_filter:
                    continue

            day = session.get('timestamp', '')[:10]
            if date_from and day < date_from:
                continue
            if date_to and day > date_to:
                continue

            results.append(session)

        return results

    def get_statistics(self, history: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Dapatkan statistik dari list riwayat sesi."""
        if not history:
            return {
                "total_sessions": 0,
                "total_samples": 0,
                "average_score": 0.0,
                "category_distribution": {},
                "top_fish": [],
                "first_session_timestamp": None,
                "last_session_timestamp": None,
            }

        category_distribution: Dict[str, int] = {}
        fish_count: Dict[str, int] = {}
        scores: List[float] = []
        total_samples = 0

        for session in history:
            samples = self.session_samples(session)
            total_samples += len(samples)
            for sample in samples:
                if not sample.is_valid:
                    continue
                scores.append(sample.score)
                category_distribution[sample.category] = category_distribution.get(sample.category, 0) + 1

            fish_name = session.get('fish_name')
            if fish_name:
                fish_count[fish_name] = fish_count.get(fish_name, 0) + 1

        top_fish = sorted(fish_count.items(), key=lambda x: x[1], reverse=True)[:5]

        # Timestamps sudah terurut descending dari load_history
        return {
            "total_sessions": len(history),
            "total_samples": total_samples,
            "average_score": round2(sum(scores) / len(scores)) if scores else 0.0,
            "category_distribution": category_distribution,
            "top_fish": [{"fish_name": name, "count": count} for name, count in top_fish],
            "first_session_timestamp": history[-1].get('timestamp'),
            "last_session_timestamp": history[0].get('timestamp'),
        }

    def export_to_csv(
        self,
        samples: Sequence[ScoredSample],
        output_path: Optional[str] = None,
        fish_name: Optional[str] = None
    ) -> str:
        """Export sampel ke file CSV.

        Args:
            samples: Sampel yang akan diekspor
            output_path: Path output file (auto-generate jika None)
            fish_name: Nama ikan untuk nama file otomatis

        Returns:
            Path ke file CSV yang dibuat

        Raises:
            CsvCodecError: jika tidak ada sampel
        """
        content = to_csv(samples)

        if output_path is None:
            output_path = os.path.join(self.history_dir, export_filename(fish_name))

        dir_name = os.path.dirname(output_path)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)

        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            f.write(content)

        return output_path

    def import_from_csv(
        self,
        file_path: str,
        on_incomplete_row: str = POLICY_DROP
    ) -> CsvImportResult:
        """Import sampel dari file CSV; skor dan kategori dihitung ulang."""
        with open(file_path, 'r', newline='', encoding='utf-8-sig') as f:
            text = f.read()
        return import_csv(text, on_incomplete_row=on_incomplete_row)

    def write_template(self, output_path: str) -> str:
        """Tulis template CSV kosong untuk input manual."""
        dir_name = os.path.dirname(output_path)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)
        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            f.write(csv_template())
        return output_path
