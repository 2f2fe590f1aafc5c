# services/reporting.py

"""
Service untuk generate laporan dari hasil analisis kesegaran.

Menyediakan fungsi untuk:
- Generate PDF reports
- Generate TXT reports
- Generate laporan dari sesi yang tersimpan di riwayat
"""

import os
from datetime import datetime
from typing import Dict, Any, Optional, Sequence

# Optional import for PDF generation
try:
    from fpdf import FPDF
    FPDF_AVAILABLE = True
except ImportError:
    FPDF_AVAILABLE = False
    FPDF = None

from core.explanation import (
    get_detailed_explanation, get_freshness_status, get_invalid_parameters, get_recommendation,
)
from core.freshness import summarize_samples
from core.models import PARAMETER_FIELDS, PARAMETER_LABELS, ScoredSample

_TABLE_HEADERS = ["ID"] + [PARAMETER_LABELS[f] for f in PARAMETER_FIELDS] + ["Skor", "Kategori"]


def _latin1(text: str) -> str:
    # Font inti PDF hanya mendukung latin-1
    return text.encode('latin-1', 'replace').decode('latin-1')


def _cell_value(value: Any) -> str:
    return "-" if value is None else str(value)


class ReportingService:
    """Kelas untuk menghasilkan laporan dari sekumpulan sampel hasil analisis."""

    def __init__(self, output_dir: str = "reports"):
        """Initialize ReportingService.

        Args:
            output_dir: Direktori untuk menyimpan reports
        """
        os.makedirs(output_dir, exist_ok=True)
        self.output_dir = output_dir

    def _generate_filename(self, extension: str) -> str:
        """Membuat nama file unik berdasarkan timestamp."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return os.path.join(self.output_dir, f"analisis_{timestamp}.{extension}")

    def generate_txt_report(
        self,
        samples: Sequence[ScoredSample],
        fish_name: Optional[str] = None
    ) -> str:
        """
        Membuat laporan TXT dari sekumpulan sampel.

        Args:
            samples: Sampel hasil analisis.
            fish_name: Nama ikan (opsional).

        Returns:
            str: Path ke file laporan yang telah dibuat.
        """
        filepath = self._generate_filename("txt")
        summary = summarize_samples(samples)

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write("=" * 40 + "\n")
            f.write("   LAPORAN ANALISIS KESEGARAN IKAN\n")
            f.write("=" * 40 + "\n")
            f.write(f"Tanggal: {datetime.now().strftime('%d-%m-%Y %H:%M:%S')}\n")
            f.write(f"Jenis Ikan: {fish_name or 'Tidak Diketahui'}\n")
            f.write(f"Jumlah Sampel: {summary.results_count} ({summary.valid_count} valid)\n\n")

            if not summary.valid_count:
                f.write("HASIL: Tidak ada sampel valid untuk dianalisis.\n")
                return filepath

            f.write(f"--- HASIL: {summary.dominant_category.upper()} ---\n")
            f.write(f"Skor Rata-rata: {summary.avg_score:.2f}/9 ({get_freshness_status(summary.avg_score)})\n")
            best = summary.best_parameter
            f.write(f"Parameter Terbaik: {best.parameter} ({best.score:.2f}/9)\n\n")

            f.write("Distribusi Kategori:\n")
            for category, count in summary.category_counts.items():
                f.write(f"  - {category}: {count}\n")
            f.write("\n")

            f.write(f"Rekomendasi:\n{get_recommendation(summary.dominant_category)}\n\n")
            f.write(f"Penjelasan:\n{get_detailed_explanation(summary.dominant_category)}\n\n")

            f.write("=" * 40 + "\n")
            f.write("--- DETAIL SAMPEL ---\n")
            f.write("=" * 40 + "\n\n")
            f.write(" | ".join(_TABLE_HEADERS) + "\n")
            for s in samples:
                values = [s.id] + [_cell_value(getattr(s, p)) for p in PARAMETER_FIELDS]
                values += [f"{s.score:.2f}", s.category]
                f.write(" | ".join(values) + "\n")

            flagged = [(s, get_invalid_parameters(s)) for s in samples]
            flagged = [(s, params) for s, params in flagged if params]
            if flagged:
                f.write("\nSampel dengan nilai 4 (tidak sesuai SNI 2729-2013):\n")
                for s, params in flagged:
                    f.write(f"  - {s.id}: {', '.join(params)}\n")

        return filepath

    def generate_pdf_report(
        self,
        samples: Sequence[ScoredSample],
        fish_name: Optional[str] = None
    ) -> str:
        """
        Membuat laporan PDF dari sekumpulan sampel.

        Returns:
            str: Path ke file laporan yang telah dibuat.

        Raises:
            ImportError: Jika fpdf2 tidak terinstall.
        """
        if not FPDF_AVAILABLE:
            raise ImportError("fpdf2 tidak terinstall. Install dengan: pip install fpdf2")

        filepath = self._generate_filename("pdf")
        summary = summarize_samples(samples)

        pdf = FPDF()
        pdf.add_page()
        pdf.set_font("Helvetica", 'B', 16)
        pdf.cell(0, 10, "Laporan Analisis Kesegaran Ikan", new_x="LMARGIN", new_y="NEXT", align='C')
        pdf.set_font("Helvetica", '', 10)
        pdf.cell(0, 5, f"Tanggal: {datetime.now().strftime('%d-%m-%Y %H:%M:%S')}",
                 new_x="LMARGIN", new_y="NEXT", align='C')
        pdf.ln(5)

        pdf.set_font("Helvetica", '', 11)
        pdf.cell(0, 6, _latin1(f"Jenis Ikan: {fish_name or 'Tidak Diketahui'}"), new_x="LMARGIN", new_y="NEXT")
        pdf.cell(0, 6, f"Jumlah Sampel: {summary.results_count} ({summary.valid_count} valid)",
                 new_x="LMARGIN", new_y="NEXT")
        pdf.ln(3)

        if not summary.valid_count:
            pdf.set_font("Helvetica", 'BI', 12)
            pdf.cell(0, 10, "Tidak ada sampel valid untuk dianalisis.", new_x="LMARGIN", new_y="NEXT")
            pdf.output(filepath)
            return filepath

        pdf.set_font("Helvetica", 'B', 14)
        pdf.cell(0, 10, f"Hasil: {summary.dominant_category}", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("Helvetica", 'B', 11)
        pdf.cell(0, 7, f"Skor Rata-rata: {summary.avg_score:.2f}/9", new_x="LMARGIN", new_y="NEXT")
        best = summary.best_parameter
        pdf.cell(0, 7, f"Parameter Terbaik: {best.parameter} ({best.score:.2f}/9)",
                 new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

        def write_section(title, content):
            if not content:
                return
            pdf.set_font("Helvetica", 'B', 11)
            pdf.cell(0, 8, title, new_x="LMARGIN", new_y="NEXT")
            pdf.set_font("Helvetica", '', 11)
            pdf.multi_cell(0, 5, _latin1(content))
            pdf.ln(4)

        write_section("Rekomendasi", get_recommendation(summary.dominant_category))
        write_section("Penjelasan", get_detailed_explanation(summary.dominant_category))

        # Tabel sampel
        widths = [40] + [17] * len(PARAMETER_FIELDS) + [16, 22]
        pdf.set_font("Helvetica", 'B', 9)
        for header, width in zip(_TABLE_HEADERS, widths):
            pdf.cell(width, 7, header, border=1, align='C')
        pdf.ln()
        pdf.set_font("Helvetica", '', 8)
        for s in samples:
            values = [s.id[-18:]] + [_cell_value(getattr(s, p)) for p in PARAMETER_FIELDS]
            values += [f"{s.score:.2f}", s.category]
            for value, width in zip(values, widths):
                pdf.cell(width, 6, _latin1(value), border=1, align='C')
            pdf.ln()

        flagged = [(s.id, get_invalid_parameters(s)) for s in samples]
        flagged = [(sid, params) for sid, params in flagged if params]
        if flagged:
            pdf.ln(4)
            write_section(
                "Sampel dengan nilai 4 (tidak sesuai SNI 2729-2013)",
                "\n".join(f"{sid}: {', '.join(params)}" for sid, params in flagged)
            )

        pdf.output(filepath)
        return filepath

    def generate_report_from_session(
        self,
        session_data: Dict[str, Any],
        format: str = "pdf"
    ) -> str:
        """Generate report dari sesi yang tersimpan di StorageService.

        Args:
            session_data: Dictionary sesi dari StorageService
            format: Format report ('pdf' atau 'txt')

        Returns:
            Path ke file report yang dibuat
        """
        samples = [ScoredSample.from_dict(s) for s in session_data.get('samples', [])]
        fish_name = session_data.get('fish_name')

        if format.lower() == "pdf":
            return self.generate_pdf_report(samples, fish_name)
        else:
            return self.generate_txt_report(samples, fish_name)
