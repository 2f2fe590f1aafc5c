import streamlit as st
import pandas as pd
from typing import List, Dict, Optional, Sequence

from core.explanation import (
    explain_score, get_badge_color, get_detailed_explanation, get_invalid_parameters, get_recommendation,
)
from core.freshness import QUICK_FILL_PRESETS
from core.models import PARAMETER_FIELDS, PARAMETER_LABELS, BatchSummary, ParameterRecord, ScoredSample
from core.parameter_classification import PARAMETER_CLASSIFICATIONS, visual_score

from ui.theming import score_bar

def fish_name_input(default: str = "") -> str:
    return st.text_input(
        "Jenis ikan (opsional)",
        value=default,
        placeholder="mis. Ikan Nila, Tongkol, Kakap Merah"
    )

def preset_buttons() -> Optional[str]:
    """Tombol isi cepat. Returns nama preset yang diklik, atau None."""
    cols = st.columns(len(QUICK_FILL_PRESETS))
    for col, name in zip(cols, QUICK_FILL_PRESETS):
        with col:
            if st.button(name, key=f"preset_{name}", width="stretch"):
                return name
    return None

def parameter_inputs(record: ParameterRecord, key_prefix: str = "param") -> ParameterRecord:
    """Input 1-9 untuk keenam parameter; kosongkan (0) untuk parameter yang tidak dinilai."""
    values: Dict[str, Optional[int]] = {}
    cols = st.columns(3)
    for i, f in enumerate(PARAMETER_FIELDS):
        classification = PARAMETER_CLASSIFICATIONS[f]
        with cols[i % 3]:
            value = st.number_input(
                PARAMETER_LABELS[f],
                min_value=0,
                max_value=9,
                value=getattr(record, f) or 0,
                step=1,
                key=f"{key_prefix}_{f}",
                help=f"{classification.description}. 0 = tidak dinilai."
            )
        values[f] = int(value) or None
    return ParameterRecord(**values)

def summary_metrics(summary: BatchSummary):
    cols = st.columns(4)
    with cols[0]:
        st.metric("Sampel", f"{summary.valid_count}/{summary.results_count}")
    with cols[1]:
        st.metric("Skor Rata-rata", f"{summary.avg_score:.2f}")
    with cols[2]:
        st.metric("Kategori Dominan", summary.dominant_category or "-")
    with cols[3]:
        best = summary.best_parameter
        st.metric("Parameter Terbaik", best.parameter or "-", f"{best.score:.2f}/9" if best.parameter else None)

def parameter_average_bars(summary: BatchSummary):
    for label, average in summary.parameter_averages.items():
        score_bar(label, average)

def result_card(summary: BatchSummary):
    if not summary.dominant_category:
        st.warning("Tidak ada sampel valid.")
        return
    color = get_badge_color(summary.dominant_category)
    st.markdown(f"**Hasil:** :{color}[{summary.dominant_category}]")
    st.info(f"**Rekomendasi:** {get_recommendation(summary.dominant_category)}")
    with st.expander("Penjelasan detail"):
        st.write(get_detailed_explanation(summary.dominant_category))

def samples_dataframe(samples: Sequence[ScoredSample]) -> pd.DataFrame:
    return pd.DataFrame([s.to_row() for s in samples])

def invalid_values_warning(samples: Sequence[ScoredSample]):
    flagged = [(s.id, get_invalid_parameters(s)) for s in samples]
    flagged = [(sid, params) for sid, params in flagged if params]
    if flagged:
        st.warning(
            f"⚠️ {len(flagged)} sampel mengandung nilai 4 yang tidak termasuk standar SNI 2729-2013 "
            "dan diabaikan dalam ringkasan."
        )

def score_explanation_expander(sample: ScoredSample):
    """Menampilkan bagaimana skor satu sampel dihitung."""
    with st.expander(f"Bagaimana skor {sample.id} dihitung?"):
        st.markdown(explain_score(sample))
        st.caption(f"Skor visual (Mata, Insang, Lendir): {visual_score(sample.parameters):.2f}")

def classification_table() -> pd.DataFrame:
    rows: List[Dict[str, str]] = []
    for c in PARAMETER_CLASSIFICATIONS.values():
        rows.append({
            "Parameter": c.name,
            "Tipe": c.type,
            "Reliabilitas": c.reliability,
            "Metode": c.analysis_method,
            "Keterangan": c.description,
        })
    return pd.DataFrame(rows)
