import logging
import os
import streamlit as st

from ui.theming import page_header, pill, category_pill
from ui.components import (
    fish_name_input, preset_buttons, parameter_inputs, summary_metrics, parameter_average_bars,
    result_card, samples_dataframe, invalid_values_warning, score_explanation_expander,
    classification_table,
)

# Backend contracts
from core.csv_codec import CsvCodecError, csv_template, export_filename, import_csv, to_csv
from core.explanation import build_share_text
from core.freshness import (
    QUICK_FILL_PRESETS, calculate_freshness, ensure_unique_ids, rescore_sample, summarize_samples,
    validate_parameters,
)
from core.models import CATEGORY_ORDER, PARAMETER_FIELDS, PARAMETER_LABELS, ParameterRecord
from core.search_filter import filter_samples, paginate, sort_samples
from services.config import get_incomplete_row_policy, load_config
from services.storage import StorageService
from services.logging_service import LoggingService
from services.reporting import ReportingService

SORT_FIELDS = ["Waktu", "ID", "Skor", "Kategori"] + [PARAMETER_LABELS[f] for f in PARAMETER_FIELDS]
_SORT_ATTRS = {"Waktu": "timestamp", "ID": "id"}

# --- Backend Initialization ---
@st.cache_resource
def get_config():
    return load_config()

@st.cache_resource
def get_storage():
    return StorageService(history_dir=get_config()["storage"]["history_dir"])

@st.cache_resource
def get_logger():
    log_config = get_config()["logging"]
    return LoggingService(
        log_file=log_config["log_file"],
        level=getattr(logging, str(log_config["level"]).upper(), logging.INFO)
    )

@st.cache_resource
def get_reporter():
    return ReportingService(output_dir=get_config()["reports"]["output_dir"])

# --- UI Helper Functions ---
def init_state():
    if 'samples' not in st.session_state:
        st.session_state.samples = []
    if 'draft' not in st.session_state:
        st.session_state.draft = ParameterRecord()
    if 'page' not in st.session_state:
        st.session_state.page = 1

def apply_preset(name: str):
    st.session_state.draft = QUICK_FILL_PRESETS[name]
    # number_input menyimpan nilai sendiri di session state; hapus agar nilai preset terpakai
    for f in PARAMETER_FIELDS:
        st.session_state.pop(f"param_{f}", None)

def mark_samples_changed():
    # Batch berubah setelah disimpan, boleh disimpan lagi ke riwayat
    st.session_state.pop("saved_session_id", None)

def reset_analysis_state():
    st.session_state.samples = []
    st.session_state.page = 1
    mark_samples_changed()

def input_section(logger: LoggingService, fish_name: str):
    st.subheader("✍️ Input Manual")

    preset = preset_buttons()
    if preset:
        apply_preset(preset)
        st.rerun()

    record = parameter_inputs(st.session_state.draft)

    scoring = get_config()["scoring"]
    out_of_range = validate_parameters(record, scoring["rating_min"], scoring["rating_max"])
    if out_of_range:
        st.warning("Nilai di luar rentang: " + ", ".join(f"{label}={value}" for label, value in out_of_range))

    if st.button("➕ Tambah Sampel", type="primary", width="stretch", key="add_sample"):
        sample = calculate_freshness(record, fish_name=fish_name or None)
        st.session_state.samples.append(sample)
        mark_samples_changed()
        logger.log_analysis(sample)
        if not sample.is_valid:
            st.warning("Tidak ada parameter yang diisi, sampel dikategorikan Invalid.")
        st.rerun()

def csv_section(logger: LoggingService, fish_name: str):
    st.subheader("📄 Import / Export CSV")
    col1, col2, col3 = st.columns(3)

    with col1:
        uploaded = st.file_uploader("Upload CSV", type=["csv"])
        if uploaded is not None and st.button("📥 Import", width="stretch"):
            try:
                policy = get_incomplete_row_policy(get_config())
                result = import_csv(uploaded.getvalue().decode("utf-8-sig"), on_incomplete_row=policy)
                logger.log_import(result, source=uploaded.name)
                samples = [s.with_fish_name(fish_name) if fish_name and not s.fish_name else s for s in result.samples]
                samples = ensure_unique_ids(samples, existing_ids=[s.id for s in st.session_state.samples])
                st.session_state.samples.extend(samples)
                if samples:
                    mark_samples_changed()
                st.success(f"✅ {len(samples)} sampel diimport dari {result.total_rows} baris.")
                if result.dropped_rows:
                    st.warning(
                        f"⚠️ {result.dropped_rows} baris tidak lengkap dilewati "
                        f"(baris {', '.join(str(n) for n in result.dropped_lines)})."
                    )
                if result.corrected_rows:
                    st.info(f"ℹ️ Skor/Kategori pada {result.corrected_rows} baris dihitung ulang.")
            except (CsvCodecError, ValueError, UnicodeDecodeError) as e:
                logger.log_error("CSV import failed", e)
                st.error(f"❌ Gagal import CSV: {e}")

    with col2:
        st.download_button(
            label="⬇️ Template CSV",
            data=csv_template(),
            file_name="visionfish_template.csv",
            mime="text/csv",
            width="stretch"
        )

    with col3:
        if st.session_state.samples:
            filename = export_filename(fish_name)
            st.download_button(
                label="⬇️ Download Hasil CSV",
                data=to_csv(st.session_state.samples),
                file_name=filename,
                mime="text/csv",
                width="stretch",
                on_click=logger.log_export,
                args=(filename, len(st.session_state.samples))
            )

def results_table_section():
    st.subheader("📋 Tabel Hasil")
    per_page = int(get_config()["ui"]["results_per_page"])

    col1, col2, col3, col4 = st.columns([2, 1, 2, 2])
    with col1:
        sort_label = st.selectbox("Urutkan berdasarkan", SORT_FIELDS)
    with col2:
        ascending = st.toggle("Naik", value=True)
    with col3:
        categories = st.multiselect("Kategori", list(CATEGORY_ORDER) + ["Invalid"])
    with col4:
        query = st.text_input("Cari ID / nama ikan")
    invalid_only = st.checkbox("Hanya sampel dengan nilai 4 (tidak sesuai SNI)")

    shown = filter_samples(st.session_state.samples, invalid_only=invalid_only, categories=categories, query=query)
    shown = sort_samples(shown, _SORT_ATTRS.get(sort_label, sort_label), ascending=ascending)

    page_items, total_pages = paginate(shown, st.session_state.page, per_page)
    st.session_state.page = min(max(st.session_state.page, 1), total_pages)
    if not page_items:
        st.info("Tidak ada sampel yang cocok dengan filter.")
        return

    st.dataframe(samples_dataframe(page_items), width="stretch", hide_index=True)

    nav = st.columns([1, 2, 1])
    with nav[0]:
        if st.button("◀️ Sebelumnya", disabled=st.session_state.page <= 1):
            st.session_state.page -= 1
            st.rerun()
    with nav[1]:
        st.caption(f"Halaman {st.session_state.page} dari {total_pages} • {len(shown)} sampel")
    with nav[2]:
        if st.button("Berikutnya ▶️", disabled=st.session_state.page >= total_pages):
            st.session_state.page += 1
            st.rerun()

    for sample in page_items:
        score_explanation_expander(sample)

def edit_section(logger: LoggingService):
    with st.expander("✏️ Edit / Hapus Sampel"):
        samples = st.session_state.samples
        if st.session_state.get("edit_sample", 0) >= len(samples):
            st.session_state.pop("edit_sample", None)
        # Pilih berdasarkan posisi, ID sampel bisa kembar
        index = st.selectbox(
            "Sampel",
            range(len(samples)),
            format_func=lambda i: f"{i + 1}. {samples[i].id} ({samples[i].category})",
            key="edit_sample"
        )
        sample = samples[index]

        col1, col2 = st.columns(2)
        with col1:
            field_label = st.selectbox("Parameter", [PARAMETER_LABELS[f] for f in PARAMETER_FIELDS])
        with col2:
            current = sample.get_field(field_label) or 1
            # Nilai hasil import bisa di luar 1-9
            current = min(max(current, 1), 9)
            value = st.number_input("Nilai baru", min_value=1, max_value=9, value=current, step=1)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("💾 Simpan Perubahan", width="stretch", key="save_edit"):
                try:
                    samples[index] = rescore_sample(sample, field_label, int(value))
                    mark_samples_changed()
                    logger.log_info(f"Sample {sample.id} edited: {field_label}={int(value)}")
                    st.rerun()
                except ValueError as e:
                    st.error(f"❌ {e}")
        with col2:
            if st.button("🗑️ Hapus Sampel", width="stretch", key="delete_sample"):
                samples.pop(index)
                mark_samples_changed()
                logger.log_info(f"Sample {sample.id} deleted")
                st.rerun()

def summary_section(storage: StorageService, logger: LoggingService, reporter: ReportingService, fish_name: str):
    samples = st.session_state.samples
    summary = summarize_samples(samples)

    st.subheader("📊 Ringkasan")
    summary_metrics(summary)
    if summary.dominant_category:
        category_pill(summary.dominant_category)
    invalid_values_warning(samples)
    result_card(summary)

    with st.expander("Rata-rata per parameter"):
        parameter_average_bars(summary)

    with st.expander("📤 Bagikan hasil"):
        st.code(build_share_text(summary, fish_name or None), language="text")

    st.divider()
    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("💾 Simpan ke Riwayat", width="stretch", disabled="saved_session_id" in st.session_state):
            try:
                session_id = storage.save_session(samples, fish_name=fish_name or None)
                st.session_state.saved_session_id = session_id
                logger.log_info(f"Session saved: {session_id} ({len(samples)} samples)")
                st.success(f"✅ Tersimpan: `{session_id}`")
            except (IOError, ValueError) as e:
                logger.log_error("Failed to save session", e)
                st.error(f"Gagal menyimpan riwayat analisis: {e}")
    with col2:
        report_format = st.radio("Format laporan", ["TXT", "PDF"], horizontal=True, label_visibility="collapsed")
    with col3:
        if st.button(f"📄 Generate {report_format}", width="stretch"):
            try:
                if report_format == "TXT":
                    report_path = reporter.generate_txt_report(samples, fish_name or None)
                    mime, mode = "text/plain", "r"
                else:
                    report_path = reporter.generate_pdf_report(samples, fish_name or None)
                    mime, mode = "application/pdf", "rb"
                logger.log_export(report_path, len(samples))
                with open(report_path, mode, **({} if mode == "rb" else {"encoding": "utf-8"})) as f:
                    st.download_button(
                        label=f"⬇️ Download {report_format}",
                        data=f.read(),
                        file_name=os.path.basename(report_path),
                        mime=mime,
                        width="stretch"
                    )
            except ImportError:
                st.error("❌ fpdf2 tidak terinstall. Install: `pip install fpdf2`")
            except OSError as e:
                logger.log_error("Report generation failed", e)
                st.error(f"❌ Error generating report: {e}")

    if st.button("🔄 Analisis Baru", width="stretch"):
        reset_analysis_state()
        st.rerun()

# --- Main App Logic ---
def run():
    page_header("Analisis Kesegaran", "Nilai enam parameter organoleptik (skala 1-9) per sampel ikan.")
    pill("Standar: SNI 2729-2013 • Mata • Insang • Lendir • Daging • Bau • Tekstur")

    storage = get_storage()
    logger = get_logger()
    reporter = get_reporter()
    init_state()

    with st.sidebar:
        st.caption(f"Sampel dalam sesi: {len(st.session_state.samples)}")
        with st.expander("Klasifikasi parameter"):
            st.dataframe(classification_table(), hide_index=True)

    fish_name = fish_name_input(st.session_state.get("fish_name", ""))
    st.session_state.fish_name = fish_name

    input_section(logger, fish_name)
    st.divider()
    csv_section(logger, fish_name)

    if not st.session_state.samples:
        st.info("📭 Belum ada sampel. Tambahkan secara manual atau import CSV.")
        return

    st.divider()
    results_table_section()
    edit_section(logger)
    st.divider()
    summary_section(storage, logger, reporter, fish_name)

if __name__ == "__main__":
    run()
