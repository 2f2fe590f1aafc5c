import streamlit as st

from services.config import load_config as _load_config

@st.cache_resource
def load_config():
    return _load_config()

CONFIG = load_config()

st.set_page_config(
    page_title=CONFIG["app"]["name"],
    page_icon="🐟",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Sidebar hanya untuk informasi, tidak ada navigasi manual
st.sidebar.title("🐟 " + CONFIG["app"]["name"])
st.sidebar.caption("Frontend GUI – Streamlit")

st.sidebar.divider()
st.sidebar.markdown("### ⚙️ Konfigurasi Sistem")
st.sidebar.info(f"**Skala Penilaian:** {CONFIG['scoring']['rating_min']} - {CONFIG['scoring']['rating_max']}")
st.sidebar.info(f"**Baris CSV tidak lengkap:** {CONFIG['csv']['on_incomplete_row'].upper()}")
st.sidebar.info(f"**Riwayat:** `{CONFIG['storage']['history_dir']}`")

st.sidebar.divider()
st.sidebar.markdown("### 📚 Tentang Sistem")
st.sidebar.markdown("""
**VisionFish**
Penilaian kesegaran ikan berdasarkan parameter organoleptik SNI 2729-2013.
""")

# Konten halaman utama
st.title("🐟 VisionFish – Analisis Kesegaran Ikan")
st.markdown("### Selamat Datang di Sistem Penilaian Kesegaran Ikan")

col1, col2 = st.columns([2, 1])

with col1:
    st.markdown("""
    Aplikasi ini membantu nelayan, pedagang dan konsumen menilai **kesegaran ikan**
    dari enam parameter organoleptik, masing-masing bernilai **1-9**.

    #### 🎯 Cara Kerja Sistem:
    1. **Isi nilai parameter** untuk setiap sampel (manual, preset, atau import CSV)
    2. Sistem menghitung **skor** = rata-rata parameter yang terisi
    3. Skor dipetakan ke **kategori** kesegaran
    4. Dapatkan **ringkasan batch**, parameter terbaik, dan laporan TXT/PDF
    """)

with col2:
    st.info("""
    **📊 Kategori Kesegaran**

    - 🔵 **Sangat Baik** (skor ≥ 8)
    - 🟢 **Baik** (skor ≥ 6)
    - 🟠 **Sedang** (skor ≥ 4)
    - 🔴 **Busuk** (skor < 4)
    """)

    st.success("✅ Sistem Aktif")

st.divider()

st.markdown("### 🚀 Fitur-Fitur Sistem")

feature_cols = st.columns(3)

with feature_cols[0]:
    st.markdown("#### 🔍 Analisis Kesegaran")
    st.markdown("""
    Input parameter per sampel, tabel hasil yang bisa diurutkan, difilter dan diedit.
    """)

with feature_cols[1]:
    st.markdown("#### 📄 Import / Export CSV")
    st.markdown("""
    Import batch sampel dari CSV (skor selalu dihitung ulang) dan unduh hasil analisis.
    """)

with feature_cols[2]:
    st.markdown("#### 📊 Riwayat & Laporan")
    st.markdown("""
    Simpan sesi analisis, lihat statistik, dan buat laporan TXT atau PDF.
    """)

st.divider()

st.markdown("### 🔬 Parameter yang Dinilai")

param_cols = st.columns(2)

with param_cols[0]:
    st.markdown("#### Dapat dinilai dari foto")
    st.markdown("""
    - **Mata**: kejernihan kornea, bentuk mata, warna pupil
    - **Insang**: warna merah cerah hingga coklat/abu
    - **Lendir**: kilap dan kejernihan permukaan
    """)

with param_cols[1]:
    st.markdown("#### Memerlukan pemeriksaan fisik")
    st.markdown("""
    - **Daging**: elastisitas dan kekenyalan
    - **Bau**: aroma segar hingga busuk
    - **Tekstur**: kekasaran/kehalusan permukaan
    """)

st.warning(
    "⚠️ Nilai **4** tidak termasuk dalam skala SNI 2729-2013. Sampel dengan nilai 4 ditandai "
    "dan nilai tersebut diabaikan dalam ringkasan."
)

st.divider()

st.markdown("---")
footer_cols = st.columns([2, 1])

with footer_cols[0]:
    st.caption("""
    **VisionFish** | Analisis Kesegaran Ikan berbasis SNI 2729-2013
    """)

with footer_cols[1]:
    st.caption("""
    💡 **Mulai analisis** dengan memilih menu **Analisis Kesegaran** di sidebar →
    """)
