"""Test untuk halaman Streamlit di pages/.

File ini menjalankan halaman Analisis Kesegaran dengan AppTest dan menguji:
- Panel edit tetap tampil untuk nilai hasil import di luar 1-9
- Edit/hapus memilih sampel berdasarkan posisi (ID boleh kembar)
- Tombol Simpan ke Riwayat aktif lagi setelah batch berubah

Jalankan dengan: python tests/test_pages.py
"""

import logging
import os
import sys
import tempfile
import shutil
from pathlib import Path

import streamlit as st
from streamlit.testing.v1 import AppTest

# Tambahkan app/ ke Python path
app_dir = Path(__file__).parent.parent
sys.path.insert(0, str(app_dir))

from core.csv_codec import from_csv
from core.freshness import calculate_freshness
from core.models import ParameterRecord

ANALYSIS_PAGE = str(app_dir / "pages" / "1_Analisis_Kesegaran.py")
SAVE_LABEL = "💾 Simpan ke Riwayat"


def edit_value_input(at):
    return next(n for n in at.number_input if n.label == "Nilai baru")


def save_button(at):
    return next(b for b in at.button if b.label == SAVE_LABEL)


class TestAnalysisPage:
    """Test suite untuk pages/1_Analisis_Kesegaran.py."""

    def setup_method(self):
        # Log dan riwayat ditulis relatif terhadap cwd
        self.old_cwd = os.getcwd()
        self.temp_dir = tempfile.mkdtemp()
        os.chdir(self.temp_dir)
        st.cache_resource.clear()

    def teardown_method(self):
        logger = logging.getLogger('VisionFishLogger')
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        st.cache_resource.clear()
        os.chdir(self.old_cwd)
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _page(self, samples, **state):
        at = AppTest.from_file(ANALYSIS_PAGE, default_timeout=30)
        at.session_state["samples"] = samples
        for key, value in state.items():
            at.session_state[key] = value
        return at.run()

    def test_edit_panel_accepts_out_of_range_import(self):
        samples = from_csv("Mata,Insang,Lendir,Daging,Bau,Tekstur\n12,8,8,8,8,8")
        at = self._page(samples)

        assert not at.exception, at.exception
        assert edit_value_input(at).value == 9
        print("✓ Edit panel clamps imported value 12 → 9")

    def test_edit_and_delete_select_by_position(self):
        samples = [
            calculate_freshness(ParameterRecord(9, 9, 9, 9, 9, 9), sample_id="dup"),
            calculate_freshness(ParameterRecord(6, 6, 6, 6, 6, 6), sample_id="dup"),
            calculate_freshness(ParameterRecord(2, 2, 2, 2, 2, 2), sample_id="dup"),
        ]
        at = self._page(samples)
        options = at.selectbox(key="edit_sample").options
        assert len(set(options)) == 3, options

        at.selectbox(key="edit_sample").select_index(2)
        at.run()
        edit_value_input(at).set_value(9)
        at.button(key="save_edit").click()
        at.run()
        assert not at.exception, at.exception
        assert [s.eye for s in at.session_state["samples"]] == [9, 6, 9]

        at.selectbox(key="edit_sample").select_index(1)
        at.button(key="delete_sample").click()
        at.run()
        assert not at.exception, at.exception
        assert [s.score for s in at.session_state["samples"]] == [9.0, 3.17]
        print("✓ Duplicate ids: edit/delete act on the selected position")

    def test_save_reenabled_after_batch_changes(self):
        samples = [calculate_freshness(ParameterRecord(8, 8, 8, 8, 8, 8))]
        at = self._page(samples, saved_session_id="S_20250101000000_abcdef12")
        assert save_button(at).disabled

        at.button(key="add_sample").click()
        at.run()
        assert not at.exception, at.exception
        assert len(at.session_state["samples"]) == 2
        assert "saved_session_id" not in at.session_state
        assert not save_button(at).disabled

        at.session_state["saved_session_id"] = "S_20250101000000_abcdef12"
        at.run()
        at.button(key="delete_sample").click()
        at.run()
        assert "saved_session_id" not in at.session_state
        print("✓ Save re-enabled after add and delete")


def run_all_tests():
    """Jalankan semua page test."""
    print("=" * 60)
    print("Testing Pages")
    print("=" * 60)

    test_classes = [TestAnalysisPage]
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
