import streamlit as st
import pandas as pd
from core.models import (
    AmpacityEntry, VoltageDropEntry, ConductorRun, ConduitFillEntry, ProtectionEntry, MotorEntry,
    TransformerEntry, Circuit, ConductorMaterial, InsulationRating, DeviceType
)
from core.components import LookupStatus
from core.converters import convert_flag, convert_length_unit
from core import reports
from core.advisory import (
    AdvisoryError, ask_advisor, ampacity_prompt, voltage_drop_prompt, protection_prompt, protection_report_prompt,
    motor_prompt, transformer_prompt, load_schedule_prompt
)
from standards.nom import (
    AmpacityCalculator, VoltageDropCalculator, ConduitFillCalculator, ProtectionCalculator,
    MotorCalculator, TransformerCalculator
)
from standards.nom_logic import LoadScheduleLogic
from standards.nom_tables import (
    TABLE_8_CONDUCTORS, AMPACITY_TABLE_CU, HP_OPTIONS, CONDUIT_TYPES, INSULATION_TYPES,
    VOLTAGE_DROP_LIMIT_PERCENT
)

# --- Page Config ---
st.set_page_config(
    page_title="Calculadora NOM-001-SEDE-2012",
    page_icon="⚡",
    layout="wide",
    initial_sidebar_state="expanded"
)

# --- Custom CSS ---
st.markdown("""
<style>
    .reportview-container { background: #f0f2f6; }
    .main-header { font-family: 'Inter', sans-serif; color: #1E3A8A; font-weight: 700; }
    .stDataFrame { border-radius: 10px; overflow: hidden; }
</style>
""", unsafe_allow_html=True)

GAUGES = list(AMPACITY_TABLE_CU.keys())
TABLE_8_GAUGES = [c.gauge for c in TABLE_8_CONDUCTORS]

# --- Session State Init ---
DEFAULT_TABLES = {
    "ampacity_df": pd.DataFrame([
        {"Nombre": "Alimentador Principal", "Material": "Cu", "Rating": 75, "Calibre": "1/0", "T.Amb": 35.0, "Conductores": 3}
    ]),
    "vd_df": pd.DataFrame([
        {"Nombre": "Alimentador Gral", "Longitud": 75.0, "U.Long": "m", "Corriente": 120.0, "Voltaje": 480.0, "Calibre": "1/0", "Trifasico": True}
    ]),
    "conduit_df": pd.DataFrame([
        {"Aislamiento": "THHW-LS", "Calibre": "1/0", "Cantidad": 3}
    ]),
    "protection_df": pd.DataFrame([
        {"Nombre": "Protección Principal", "Carga(A)": 80.0, "Continua": True, "Polos": 3, "Tipo": "ITM"}
    ]),
    "motor_df": pd.DataFrame([
        {"Nombre": "Bomba 1", "Fases": 3, "Voltaje": 220, "HP": 10.0, "FS": 1.15}
    ]),
    "transformer_df": pd.DataFrame([
        {"Nombre": "Subestación Principal", "kVA": 150.0, "V.Primario": 13200.0, "V.Secundario": 220.0, "Fases": 3, "Z%": 5.0, "Prot.Secundario": True}
    ]),
    "schedule_df": pd.DataFrame([
        {"Circuito": "C-1", "Descripcion": "Alumbrado Planta Baja", "VA": 1200.0, "Polos": 1, "Voltaje": 127, "A": True, "B": False, "C": False}
    ]),
}

for key, df in DEFAULT_TABLES.items():
    if key not in st.session_state:
        st.session_state[key] = df
if "demand_factor" not in st.session_state:
    st.session_state.demand_factor = 0.9
if "system_voltage" not in st.session_state:
    st.session_state.system_voltage = 220.0

# --- Helpers ---
def editable_table(key, column_config=None):
    edited = st.data_editor(
        st.session_state[key],
        key=f"{key}_editor",
        use_container_width=True,
        num_rows="dynamic",
        column_config=column_config or {},
    )
    # Edits live in the widget state; the stored frame stays the initial data
    return edited.dropna(how="all")

def parse_rows(df, builder):
    entries = []
    for idx, row in df.iterrows():
        try:
            entries.append(builder(row))
        except (ValueError, TypeError, KeyError) as e:
            st.error(f"Error parseando fila {idx+1}: {e}")
    return entries

def download_buttons(name, df, reference):
    c1, c2 = st.columns(2)
    c1.download_button(
        "📥 CSV", data=reports.to_csv_bytes(df), file_name=f"{name}_nom001.csv",
        mime="text/csv", use_container_width=True, key=f"{name}_csv"
    )
    c2.download_button(
        "📥 Excel", data=reports.export_to_excel({name: df}, references=[reference]), file_name=f"{name}_nom001.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        use_container_width=True, key=f"{name}_xlsx"
    )

def advisor_box(prompt, key):
    # A deployment registers its AdvisoryService under "advisory_service"; without one the prompt is only shown
    with st.expander("🤖 Consultar fundamento normativo"):
        st.code(prompt, language=None)
        service = st.session_state.get("advisory_service")
        if service is not None and st.button("Consultar", key=f"{key}_ask"):
            try:
                st.markdown(ask_advisor(service, prompt))
            except AdvisoryError as e:
                st.error(f"No se pudo consultar al asesor: {e}")

def unsupported_note(status):
    return "Sin dato en tabla" if status == LookupStatus.UNSUPPORTED else ""

# --- Row builders ---
def build_ampacity(row):
    material = ConductorMaterial.ALUMINUM if str(row["Material"]).strip().lower() == "al" else ConductorMaterial.COPPER
    return AmpacityEntry(
        name=str(row["Nombre"]), gauge=str(row["Calibre"]), material=material,
        insulation_rating=InsulationRating(int(row["Rating"])),
        ambient_temp_c=float(row["T.Amb"]), conductor_count=int(row["Conductores"])
    )

def build_voltage_drop(row):
    return VoltageDropEntry(
        name=str(row["Nombre"]),
        length_meters=convert_length_unit(float(row["Longitud"]), str(row["U.Long"])),
        current_amps=float(row["Corriente"]), voltage=float(row["Voltaje"]),
        gauge=str(row["Calibre"]), is_three_phase=convert_flag(row["Trifasico"])
    )

def build_protection(row):
    return ProtectionEntry(
        name=str(row["Nombre"]), load_amps=float(row["Carga(A)"]), is_continuous=convert_flag(row["Continua"]),
        poles=int(row["Polos"]), device_type=DeviceType(str(row["Tipo"]))
    )

def build_motor(row):
    return MotorEntry(
        name=str(row["Nombre"]), phases=int(row["Fases"]), voltage=int(row["Voltaje"]),
        horsepower=float(row["HP"]), service_factor=float(row["FS"])
    )

def build_transformer(row):
    return TransformerEntry(
        name=str(row["Nombre"]), kva=float(row["kVA"]), primary_voltage=float(row["V.Primario"]),
        secondary_voltage=float(row["V.Secundario"]), phases=int(row["Fases"]),
        impedance_percent=float(row["Z%"]), has_secondary_protection=convert_flag(row["Prot.Secundario"])
    )

def build_circuit(row):
    return Circuit(
        name=str(row["Circuito"]), description=str(row["Descripcion"]), load_va=float(row["VA"]),
        poles=int(row["Polos"]), voltage=float(row["Voltaje"]),
        phase_a=convert_flag(row["A"]), phase_b=convert_flag(row["B"]), phase_c=convert_flag(row["C"])
    )

# --- Sidebar ---
with st.sidebar:
    st.title("Configuración")
    st.info("Edite los datos directamente en cada tabla; los resultados se recalculan al instante.")
    st.markdown("---")
    st.subheader("Tabla 8 (Cap. 10)")
    st.dataframe(pd.DataFrame([c.__dict__ for c in TABLE_8_CONDUCTORS]), hide_index=True)

# --- Main Area ---
st.markdown("<h1 class='main-header'>⚡ Calculadora NOM-001-SEDE-2012</h1>", unsafe_allow_html=True)
st.markdown("---")

tabs = st.tabs(["Ampacidad", "Caída de Tensión", "Tubería", "Protecciones", "Motores", "Transformadores", "Cédula de Cargas"])

# --- Ampacidad ---
with tabs[0]:
    st.caption(AmpacityCalculator.reference)
    df = editable_table("ampacity_df", {
        "Material": st.column_config.SelectboxColumn(options=["Cu", "Al"], width="small"),
        "Rating": st.column_config.SelectboxColumn(options=[60, 75, 90], width="small"),
        "Calibre": st.column_config.SelectboxColumn(options=GAUGES, width="small"),
        "Conductores": st.column_config.NumberColumn(min_value=1, step=1),
    })
    entries = parse_rows(df, build_ampacity)
    if entries:
        results = AmpacityCalculator().compute_all(entries)
        out = reports.ampacity_frame(entries, results)
        out["Notas"] = [unsupported_note(r.status) or ("No permitido a esta temperatura" if not r.is_permitted else "") for r in results]
        st.dataframe(out, use_container_width=True, hide_index=True)
        download_buttons("ampacidad", out, AmpacityCalculator.reference)
        advisor_box(ampacity_prompt(entries[-1], results[-1]), "ampacidad")

# --- Caída de Tensión ---
with tabs[1]:
    st.caption(f"{VoltageDropCalculator.reference}. Límite recomendado {VOLTAGE_DROP_LIMIT_PERCENT}%. FP fijo 0.9.")
    df = editable_table("vd_df", {
        "U.Long": st.column_config.SelectboxColumn(options=["m", "ft"], width="small"),
        "Calibre": st.column_config.SelectboxColumn(options=TABLE_8_GAUGES, width="small"),
    })
    entries = parse_rows(df, build_voltage_drop)
    if entries:
        results = VoltageDropCalculator().compute_all(entries)
        out = reports.voltage_drop_frame(entries, results)
        st.dataframe(out, use_container_width=True, hide_index=True)
        if any(r.status == LookupStatus.UNSUPPORTED for r in results):
            st.warning("Hay circuitos con calibre sin datos o tensión no válida; se reportan como NO CUMPLE.")
        last = results[-1]
        c1, c2 = st.columns(2)
        c1.metric("Caída (V)", f"{last.drop_volts:.2f} V")
        c2.metric("Caída (%)", f"{last.drop_percent:.2f} %", delta="CUMPLE" if last.is_compliant else "NO CUMPLE",
                  delta_color="normal" if last.is_compliant else "inverse")
        download_buttons("caida_tension", out, VoltageDropCalculator.reference)
        advisor_box(voltage_drop_prompt(entries[-1], last), "caida_tension")

# --- Tubería ---
with tabs[2]:
    st.caption(f"{ConduitFillCalculator.reference}. El tipo de tubería es informativo.")
    conduit_type = st.selectbox("Tipo de Tubería", CONDUIT_TYPES)
    df = editable_table("conduit_df", {
        "Aislamiento": st.column_config.SelectboxColumn(options=INSULATION_TYPES),
        "Calibre": st.column_config.SelectboxColumn(options=TABLE_8_GAUGES, width="small"),
        "Cantidad": st.column_config.NumberColumn(min_value=1, step=1),
    })
    runs = parse_rows(df, lambda row: ConductorRun(str(row["Calibre"]), int(row["Cantidad"]), str(row["Aislamiento"])))
    entry = ConduitFillEntry(tuple(runs), conduit_type)
    result = ConduitFillCalculator().compute(entry)
    c1, c2, c3 = st.columns(3)
    c1.metric("Área Total", f"{round(result.total_area_mm2)} mm²")
    c2.metric("Tubería Sugerida", result.label)
    c3.metric("Relleno Permitido", f"{result.fill_percent}%")
    if result.unsupported_gauges:
        st.warning(f"Calibres sin datos de área: {', '.join(result.unsupported_gauges)}")
    download_buttons("tuberia", reports.conduit_frame(entry, result), ConduitFillCalculator.reference)

# --- Protecciones ---
with tabs[3]:
    st.caption(ProtectionCalculator.reference)
    df = editable_table("protection_df", {
        "Polos": st.column_config.SelectboxColumn(options=[1, 2, 3], width="small"),
        "Tipo": st.column_config.SelectboxColumn(options=[d.value for d in DeviceType], width="small"),
    })
    entries = parse_rows(df, build_protection)
    if entries:
        results = ProtectionCalculator().compute_all(entries)
        out = reports.protection_frame(entries, results)
        st.dataframe(out, use_container_width=True, hide_index=True)
        if any(r.exceeds_table for r in results):
            st.warning("Alguna carga excede la mayor capacidad tabulada; se muestra el máximo.")
        download_buttons("protecciones", out, ProtectionCalculator.reference)
        advisor_box(protection_prompt(entries[-1], results[-1]), "protecciones")
        advisor_box(protection_report_prompt(entries[-1], results[-1]), "protecciones_informe")

# --- Motores ---
with tabs[4]:
    st.caption(MotorCalculator.reference)
    df = editable_table("motor_df", {
        "Fases": st.column_config.SelectboxColumn(options=[1, 3], width="small"),
        "Voltaje": st.column_config.SelectboxColumn(options=[127, 220, 440], width="small"),
        "HP": st.column_config.SelectboxColumn(options=HP_OPTIONS, width="small"),
    })
    entries = parse_rows(df, build_motor)
    if entries:
        results = MotorCalculator().compute_all(entries)
        out = reports.motor_frame(entries, results)
        out["Notas"] = [unsupported_note(r.status) for r in results]
        st.dataframe(out, use_container_width=True, hide_index=True)
        download_buttons("motores", out, MotorCalculator.reference)
        advisor_box(motor_prompt(entries[-1], results[-1]), "motores")

# --- Transformadores ---
with tabs[5]:
    st.caption(TransformerCalculator.reference)
    df = editable_table("transformer_df", {
        "Fases": st.column_config.SelectboxColumn(options=[1, 3], width="small"),
    })
    entries = parse_rows(df, build_transformer)
    if entries:
        results = TransformerCalculator().compute_all(entries)
        out = reports.transformer_frame(entries, results)
        st.dataframe(out, use_container_width=True, hide_index=True)
        if any(r.exceeds_table for r in results):
            st.warning("Alguna protección excede la mayor capacidad tabulada; se muestra el máximo.")
        download_buttons("transformadores", out, TransformerCalculator.reference)
        advisor_box(transformer_prompt(entries[-1], results[-1]), "transformadores")

# --- Cédula de Cargas ---
with tabs[6]:
    st.caption(LoadScheduleLogic.reference)
    c1, c2 = st.columns(2)
    demand = c1.number_input("Factor de Demanda", 0.0, 1.0, step=0.05, key="demand_factor")
    system_v = c2.number_input("Tensión del Sistema (V)", step=10.0, key="system_voltage")
    df = editable_table("schedule_df", {
        "Polos": st.column_config.SelectboxColumn(options=[1, 2, 3], width="small"),
        "Voltaje": st.column_config.SelectboxColumn(options=[127, 220, 440], width="small"),
    })
    circuits = parse_rows(df, build_circuit)
    summary = LoadScheduleLogic.summarize(circuits, demand, system_v)
    out = reports.load_schedule_frame(summary)
    st.dataframe(out, use_container_width=True, hide_index=True)
    if any(c.status == LookupStatus.UNSUPPORTED for c in summary.circuits):
        st.warning("Hay circuitos sin fase asignada o con tensión no válida; no suman carga.")
    if any(c.exceeds_table for c in summary.circuits):
        st.warning("Algún circuito excede el mayor conductor o interruptor tabulado; se muestra el máximo.")

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Carga Conectada", f"{summary.connected_load:.0f} VA")
    m2.metric("Carga Demandada", f"{summary.demanded_load:.0f} VA")
    m3.metric("Desbalance", f"{summary.unbalance_percent:.2f} %")
    m4.metric("Corriente Principal", f"{summary.main_amps:.2f} A")
    st.bar_chart(pd.DataFrame({"VA": summary.phase_totals}, index=["A", "B", "C"]))

    st.download_button(
        "📥 Descargar Cédula (Excel)",
        data=reports.export_to_excel({
            "Cedula de Cargas": out,
            "Resumen Tablero": reports.panel_totals_frame(summary),
        }, references=[LoadScheduleLogic.reference]),
        file_name="cedula_cargas_nom001.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    advisor_box(load_schedule_prompt(summary), "cedula")
