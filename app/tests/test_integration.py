"""Integration Test - Menguji integrasi antar modul core dan services.

File ini menguji workflow lengkap end-to-end:
1. Import batch sampel dari CSV (csv_codec)
2. Edit, sort, filter dan paginasi hasil (freshness, search_filter)
3. Ringkasan batch dan teks share (freshness, explanation)
4. Simpan ke riwayat dan export (StorageService)
5. Generate report (ReportingService)
6. Log aktivitas (LoggingService)

Jalankan dengan: python tests/test_integration.py
"""

import logging
import os
import sys
import tempfile
import shutil
from pathlib import Path

# Tambahkan app/ ke Python path
app_dir = Path(__file__).parent.parent
sys.path.insert(0, str(app_dir))

from core.csv_codec import import_csv, to_csv, from_csv
from core.explanation import build_share_text, has_invalid_values
from core.freshness import calculate_freshness, rescore_sample, summarize_samples
from core.models import ParameterRecord
from core.search_filter import filter_samples, paginate, sort_samples
from services.config import get_incomplete_row_policy, load_config
from services.logging_service import LoggingService
from services.storage import StorageService
from services.reporting import ReportingService

BATCH_CSV = """id,Mata,Insang,Lendir,Daging,Bau,Tekstur,Skor,Kategori,timestamp,fishName
a1,9,9,8,9,9,8,1,Busuk,2024-01-01T00:00:00Z,Tongkol
a2,7,7,6,7,7,6,6.67,Baik,2024-01-01T00:00:00Z,Tongkol
a3,4,5,5,6,5,5,5,Sedang,2024-01-01T00:00:00Z,Tongkol
a4,3,,2,2,3,2,2.4,Busuk,2024-01-01T00:00:00Z,Tongkol
a5,2,2,1,2,1,2,1.67,Busuk,2024-01-01T00:00:00Z,Tongkol
"""


class TestFullWorkflow:
    """Test complete workflow dari input CSV sampai laporan."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.logger_name = 'IntegrationLogger_' + str(os.getpid())
        self.logger = LoggingService(
            logger_name=self.logger_name,
            log_file=os.path.join(self.temp_dir, "logs", "visionfish.log")
        )
        self.storage = StorageService(history_dir=os.path.join(self.temp_dir, "history"))
        self.reporter = ReportingService(output_dir=os.path.join(self.temp_dir, "reports"))

    def teardown_method(self):
        logger = logging.getLogger(self.logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_workflow_csv_import_with_logging(self):
        """Import CSV: baris tidak lengkap dibuang, skor basi dihitung ulang."""
        policy = get_incomplete_row_policy(load_config())
        result = import_csv(BATCH_CSV, on_incomplete_row=policy)
        self.logger.log_import(result, source="batch.csv")

        assert [s.id for s in result.samples] == ["a1", "a2", "a3", "a5"]
        assert result.dropped_lines == [5]
        assert result.samples[0].score == 8.67
        assert result.samples[0].category == "Sangat Baik"
        assert result.corrected_rows >= 1
        assert all(s.fish_name == "Tongkol" for s in result.samples)

        with open(self.logger.log_file, 'r', encoding='utf-8') as f:
            assert "incomplete rows dropped" in f.read()
        print(f"✓ Imported {len(result.samples)} samples, dropped {result.dropped_rows}")

    def test_workflow_edit_sort_filter(self):
        """Edit inline lalu tampilkan tabel terurut dan terfilter."""
        samples = from_csv(BATCH_CSV)
        invalid = filter_samples(samples, invalid_only=True)
        assert [s.id for s in invalid] == ["a3"]

        # Koreksi nilai 4 pada a3
        index = [s.id for s in samples].index("a3")
        samples[index] = rescore_sample(samples[index], "Mata", 5)
        assert not has_invalid_values(samples[index])
        assert filter_samples(samples, invalid_only=True) == []

        ordered = sort_samples(samples, "Skor", ascending=False)
        assert [s.id for s in ordered] == ["a1", "a2", "a3", "a5"]

        page, total_pages = paginate(ordered, 2, per_page=3)
        assert total_pages == 2
        assert [s.id for s in page] == ["a5"]
        print("✓ Edit → sort → paginate")

    def test_workflow_summary_and_share(self):
        samples = from_csv(BATCH_CSV)
        summary = summarize_samples(samples)

        assert summary.results_count == 4
        assert summary.best_parameter.parameter in ("Mata", "Insang", "Daging", "Bau")
        # nilai 4 pada a3 diabaikan untuk rata-rata Mata
        assert summary.parameter_averages["Mata"] == (9 + 7 + 2) / 3

        text = build_share_text(summary, "Tongkol")
        assert "Tongkol" in text and "4 sampel dianalisis." in text
        print(f"✓ Summary: {summary.dominant_category} ({summary.avg_score})")

    def test_workflow_storage_and_report(self):
        """Simpan sesi, export CSV, lalu buat laporan dari riwayat."""
        samples = from_csv(BATCH_CSV)
        for sample in samples:
            self.logger.log_analysis(sample)

        session_id = self.storage.save_session(samples, fish_name="Tongkol")
        session = self.storage.get_session_by_id(session_id)
        assert session is not None

        csv_path = self.storage.export_to_csv(self.storage.session_samples(session), fish_name="Tongkol")
        self.logger.log_export(csv_path, len(samples))
        with open(csv_path, 'r', encoding='utf-8') as f:
            assert from_csv(f.read())[0].id == "a1"

        report_path = self.reporter.generate_report_from_session(session, format="txt")
        with open(report_path, 'r', encoding='utf-8') as f:
            content = f.read()
        assert "Jenis Ikan: Tongkol" in content
        assert "a3: Mata" in content

        stats = self.logger.get_statistics()
        assert stats["total_analyses"] == 4
        assert stats["total_exports"] == 1
        print(f"✓ Session {session_id} stored and reported")


class TestModuleInteraction:
    """Test interaksi antar modul."""

    def test_manual_samples_round_trip_through_csv(self):
        samples = [
            calculate_freshness(ParameterRecord(9, 8, 9, 8, 9, 8), fish_name="Kakap"),
            calculate_freshness(ParameterRecord(5, 5, 5, 6, 6, 6), fish_name="Kakap"),
        ]
        decoded = from_csv(to_csv(samples))
        assert [s.parameters for s in decoded] == [s.parameters for s in samples]
        assert [s.category for s in decoded] == ["Sangat Baik", "Sedang"]
        print("✓ Manual samples survive CSV round trip")

    def test_reject_policy_from_config(self):
        config = {"csv": {"on_incomplete_row": "reject"}}
        policy = get_incomplete_row_policy(config)
        try:
            import_csv(BATCH_CSV, on_incomplete_row=policy)
            raised = False
        except ValueError:
            raised = True
        assert raised, "Policy reject harus menolak baris tidak lengkap"
        print("✓ Reject policy applied from config")


def run_all_tests():
    """Jalankan semua integration test."""
    print("=" * 60)
    print("Testing Integration")
    print("=" * 60)

    test_classes = [TestFullWorkflow, TestModuleInteraction]
    total_tests = 0
    passed_tests = 0
    failed_tests = []

    for test_class in test_classes:
        print(f"\n--- {test_class.__name__} ---")
        instance = test_class()

        test_methods = [m for m in dir(instance) if m.startswith('test_')]

        for method_name in test_methods:
            total_tests += 1
            if hasattr(instance, 'setup_method'):
                instance.setup_method()
            try:
                getattr(instance, method_name)()
                passed_tests += 1
            except AssertionError as e:
                failed_tests.append((test_class.__name__, method_name, str(e)))
                print(f"✗ {method_name} FAILED: {e}")
            except Exception as e:
                failed_tests.append((test_class.__name__, method_name, str(e)))
                print(f"✗ {method_name} ERROR: {e}")
            finally:
                if hasattr(instance, 'teardown_method'):
                    instance.teardown_method()

    print("\n" + "=" * 60)
    print("Test Summary")
    print("=" * 60)
    print(f"Total tests: {total_tests}")
    print(f"Passed: {passed_tests}")
    print(f"Failed: {len(failed_tests)}")

    if failed_tests:
        print("\nFailed tests:")
        for class_name, method_name, error in failed_tests:
            print(f"  - {class_name}.{method_name}: {error}")
        return False
    else:
        print("\n✅ All tests passed!")
        return True


if __name__ == '__main__':
    success = run_all_tests()
    sys.exit(0 if success else 1)
