import datetime
import io
from typing import Dict, Optional, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from core.components import (
    AmpacityResult, ConduitFillResult, MotorResult, PanelSummary, ProtectionResult,
    TransformerResult, VoltageDropResult,
)
from core.models import (
    AmpacityEntry, ConduitFillEntry, MotorEntry, ProtectionEntry, TransformerEntry, VoltageDropEntry,
)

def ampacity_frame(entries: Sequence[AmpacityEntry], results: Sequence[AmpacityResult]) -> pd.DataFrame:
    rows = []
    for e, r in zip(entries, results):
        rows.append({
            "Nombre": e.name, "Material": e.material.value, "Temp Rating": e.insulation_rating.value,
            "Calibre": e.gauge, "Temp Amb": e.ambient_temp_c, "Num Cond": e.conductor_count,
            "Amp Base": r.base_ampacity, "Factor Agrup": r.grouping_factor,
            "Factor Temp": r.temp_factor, "Amp Final": r.corrected_ampacity,
        })
    return pd.DataFrame(rows)

def voltage_drop_frame(entries: Sequence[VoltageDropEntry], results: Sequence[VoltageDropResult]) -> pd.DataFrame:
    rows = []
    for e, r in zip(entries, results):
        rows.append({
            "Nombre": e.name, "Longitud(m)": e.length_meters, "Corriente(A)": e.current_amps,
            "Tension(V)": e.voltage, "Conductor(AWG)": e.gauge,
            "Sistema": "Trifasico" if e.is_three_phase else "Monofasico",
            "Caida(V)": round(r.drop_volts, 2), "Caida(%)": round(r.drop_percent, 2),
            "Cumplimiento": "CUMPLE" if r.is_compliant else "NO CUMPLE",
        })
    return pd.DataFrame(rows)

def conduit_frame(entry: ConduitFillEntry, result: ConduitFillResult) -> pd.DataFrame:
    rows = [{"Aislamiento": run.insulation, "Calibre": run.gauge, "Cantidad": run.quantity}
            for run in entry.conductors]
    rows.append({
        "Aislamiento": f"TOTAL ({result.conduit_type})", "Calibre": result.label,
        "Cantidad": result.conductor_count,
    })
    return pd.DataFrame(rows)

def protection_frame(entries: Sequence[ProtectionEntry], results: Sequence[ProtectionResult]) -> pd.DataFrame:
    rows = []
    for e, r in zip(entries, results):
        rows.append({
            "Nombre": e.name, "Carga(A)": e.load_amps, "Continuo": "SI" if e.is_continuous else "NO",
            "Fases": e.poles, "Tipo": e.device_type.value,
            "Min Requerido(A)": round(r.min_rating, 2), "Sugerido(A)": r.standard_rating,
        })
    return pd.DataFrame(rows)

def motor_frame(entries: Sequence[MotorEntry], results: Sequence[MotorResult]) -> pd.DataFrame:
    rows = []
    for e, r in zip(entries, results):
        rows.append({
            "Nombre": e.name, "Fases": e.phases, "Tension(V)": e.voltage, "HP": e.horsepower,
            "FLA(A)": r.fla, "Cond. Min(A)": round(r.min_conductor_ampacity, 2),
            "Sobrecarga(A)": round(r.overload_trip, 2), "ITM Sugerido(A)": r.standard_breaker,
        })
    return pd.DataFrame(rows)

def transformer_frame(entries: Sequence[TransformerEntry], results: Sequence[TransformerResult]) -> pd.DataFrame:
    rows = []
    for e, r in zip(entries, results):
        rows.append({
            "Nombre": e.name, "Capacidad(kVA)": e.kva, "V-Primario": e.primary_voltage,
            "V-Secundario": e.secondary_voltage, "I-Primaria(A)": round(r.primary_current, 2),
            "I-Secundaria(A)": round(r.secondary_current, 2), "Prot-Primaria(A)": r.primary_breaker,
            "Prot-Secundaria(A)": r.secondary_breaker_display,
        })
    return pd.DataFrame(rows)

def load_schedule_frame(summary: PanelSummary) -> pd.DataFrame:
    rows = []
    for c in summary.circuits:
        rows.append({
            "Circuito": c.name, "Descripcion": c.description, "Polos": c.poles,
            "A": round(c.share_va) if c.phase_a else 0,
            "B": round(c.share_va) if c.phase_b else 0,
            "C": round(c.share_va) if c.phase_c else 0,
            "Corriente(A)": round(c.amps, 2), "Conductor": c.conductor_label,
            "Proteccion": c.protection_label, "Tuberia": c.conduit.label,
        })
    return pd.DataFrame(rows)

def panel_totals_frame(summary: PanelSummary) -> pd.DataFrame:
    return pd.DataFrame([
        {"Parametro": "Fase A (VA)", "Valor": round(summary.total_a)},
        {"Parametro": "Fase B (VA)", "Valor": round(summary.total_b)},
        {"Parametro": "Fase C (VA)", "Valor": round(summary.total_c)},
        {"Parametro": "Carga Conectada (VA)", "Valor": round(summary.connected_load)},
        {"Parametro": "Factor de Demanda", "Valor": summary.demand_factor},
        {"Parametro": "Carga Demandada (VA)", "Valor": round(summary.demanded_load)},
        {"Parametro": "Desbalance (%)", "Valor": round(summary.unbalance_percent, 2)},
        {"Parametro": "Corriente Principal (A)", "Valor": round(summary.main_amps, 2)},
    ])

def to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")

def export_to_excel(sheets: Dict[str, pd.DataFrame], filename: Optional[str] = None,
                    references: Sequence[str] = ()) -> bytes:
    """
    Writes one sheet per DataFrame with a styled header row.
    The normative references used are listed on the Info sheet.
    Returns the workbook bytes and also saves it when a filename is given.
    """
    wb = Workbook()
    wb.remove(wb.active)

    header_fill = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
    header_font = Font(bold=True)

    for title, df in sheets.items():
        # Excel limits sheet titles to 31 chars
        ws = wb.create_sheet(title[:31])
        ws.append(list(df.columns))
        for cell in ws[1]:
            cell.font = header_font
            cell.fill = header_fill
        for row in df.itertuples(index=False):
            ws.append(list(row))
        for col in ws.columns:
            ws.column_dimensions[col[0].column_letter].width = 15

    if not sheets:
        ws = wb.create_sheet("Memoria")
        ws.append(["Sin datos"])

    ws = wb.create_sheet("Info")
    ws.append(["Memoria de Cálculo NOM-001-SEDE-2012"])
    ws.append(["Fecha:", datetime.datetime.now().strftime("%Y-%m-%d %H:%M")])
    for ref in references:
        ws.append(["Referencia:", ref])

    output = io.BytesIO()
    wb.save(output)
    data = output.getvalue()
    if filename:
        with open(filename, "wb") as fh:
            fh.write(data)
    return data
