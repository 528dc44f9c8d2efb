import io
import math
import os
import re
import unittest
from openpyxl import load_workbook
from core import reports
from core.advisory import (
    SYSTEM_INSTRUCTION, AdvisoryService, AdvisoryError, ask_advisor, ampacity_prompt, voltage_drop_prompt,
    protection_report_prompt, motor_prompt, transformer_prompt, load_schedule_prompt
)
from core.converters import convert_flag, convert_power_unit, convert_length_unit
from core.models import (
    AmpacityEntry, VoltageDropEntry, ConductorRun, ConduitFillEntry, ProtectionEntry,
    MotorEntry, TransformerEntry, Circuit
)
from standards.nom import (
    AmpacityCalculator, VoltageDropCalculator, ConduitFillCalculator, ProtectionCalculator,
    MotorCalculator, TransformerCalculator
)
from standards.nom_logic import LoadScheduleLogic


class EchoService(AdvisoryService):
    def __init__(self):
        self.instructions = []

    def ask(self, prompt, system_instruction):
        self.instructions.append(system_instruction)
        return f"Respuesta: {prompt[:10]}"


class BrokenService(AdvisoryService):
    def ask(self, prompt, system_instruction):
        raise ConnectionError("sin red")


class TestConverters(unittest.TestCase):
    def test_power_to_va(self):
        self.assertEqual(convert_power_unit(1200, "VA"), 1200)
        self.assertEqual(convert_power_unit(1.5, "kva"), 1500)
        self.assertAlmostEqual(convert_power_unit(2, "KW", 0.8), 2500)
        self.assertAlmostEqual(convert_power_unit(900, "W"), 1000)
        self.assertAlmostEqual(convert_power_unit(1, "HP", 1.0), 746)

    def test_length_to_meters(self):
        self.assertEqual(convert_length_unit(30, "m"), 30)
        self.assertAlmostEqual(convert_length_unit(100, "ft"), 30.48)

    def test_checkbox_flags(self):
        self.assertTrue(convert_flag(True))
        self.assertFalse(convert_flag(False))
        self.assertFalse(convert_flag(None))
        self.assertFalse(convert_flag(math.nan))


class TestFrames(unittest.TestCase):
    def test_voltage_drop_frame(self):
        entries = [VoltageDropEntry("Circuito 1", 30, 20, 220, "12"), VoltageDropEntry("Corto", 5, 10, 220, "12")]
        df = reports.voltage_drop_frame(entries, VoltageDropCalculator().compute_all(entries))
        self.assertEqual(list(df["Cumplimiento"]), ["NO CUMPLE", "CUMPLE"])
        self.assertEqual(df.loc[0, "Caida(%)"], 3.15)
        self.assertEqual(df.loc[0, "Sistema"], "Monofasico")

    def test_voltage_drop_frame_invalid_voltage(self):
        entries = [VoltageDropEntry("Sin tension", 30, 20, 0, "12")]
        df = reports.voltage_drop_frame(entries, VoltageDropCalculator().compute_all(entries))
        self.assertEqual(df.loc[0, "Cumplimiento"], "NO CUMPLE")

    def test_transformer_frame_marks_secondary(self):
        entries = [TransformerEntry("T1", 45, 480, 220, 3, 3, False)]
        df = reports.transformer_frame(entries, TransformerCalculator().compute_all(entries))
        self.assertEqual(df.loc[0, "Prot-Secundaria(A)"], "N/A")

    def test_ampacity_and_motor_frames(self):
        a = [AmpacityEntry("Alimentador", "1/0", ambient_temp_c=35)]
        df = reports.ampacity_frame(a, AmpacityCalculator().compute_all(a))
        self.assertEqual(df.loc[0, "Amp Final"], 141.0)

        m = [MotorEntry("Bomba", 3, 220, 10)]
        df = reports.motor_frame(m, MotorCalculator().compute_all(m))
        self.assertEqual(df.loc[0, "ITM Sugerido(A)"], 70)

    def test_protection_frame(self):
        p = [ProtectionEntry("Principal", 80, True, 3)]
        df = reports.protection_frame(p, ProtectionCalculator().compute_all(p))
        self.assertEqual(df.loc[0, "Continuo"], "SI")
        self.assertEqual(df.loc[0, "Sugerido(A)"], 100)

    def test_conduit_frame_total_row(self):
        entry = ConduitFillEntry((ConductorRun("1/0", 3), ConductorRun("12", 2)), "EMT")
        df = reports.conduit_frame(entry, ConduitFillCalculator().compute(entry))
        self.assertEqual(len(df), 3)
        self.assertEqual(df.iloc[-1]["Cantidad"], 5)

    def test_load_schedule_frames(self):
        summary = LoadScheduleLogic.summarize([Circuit("C-1", "Alumbrado", 1200, 1, 127, True)], 0.9, 220)
        df = reports.load_schedule_frame(summary)
        self.assertEqual(df.loc[0, "A"], 1200)
        self.assertEqual(df.loc[0, "B"], 0)
        totals = reports.panel_totals_frame(summary)
        self.assertIn("Desbalance (%)", list(totals["Parametro"]))

    def test_csv_bytes(self):
        p = [ProtectionEntry("Principal", 80, True, 3)]
        data = reports.to_csv_bytes(reports.protection_frame(p, ProtectionCalculator().compute_all(p)))
        lines = data.decode("utf-8").splitlines()
        self.assertEqual(lines[0], "Nombre,Carga(A),Continuo,Fases,Tipo,Min Requerido(A),Sugerido(A)")
        self.assertEqual(len(lines), 2)


class TestExcelExport(unittest.TestCase):
    def test_workbook_sheets(self):
        p = [ProtectionEntry("Principal", 80, True, 3)]
        df = reports.protection_frame(p, ProtectionCalculator().compute_all(p))
        data = reports.export_to_excel({"Protecciones": df})
        wb = load_workbook(io.BytesIO(data))
        self.assertEqual(wb.sheetnames, ["Protecciones", "Info"])
        ws = wb["Protecciones"]
        self.assertEqual(ws["A1"].value, "Nombre")
        self.assertTrue(ws["A1"].font.bold)
        self.assertEqual(ws["G2"].value, 100)

    def test_references_on_info_sheet(self):
        data = reports.export_to_excel({}, references=[ProtectionCalculator.reference, TransformerCalculator.reference])
        ws = load_workbook(io.BytesIO(data))["Info"]
        refs = [row[1] for row in ws.iter_rows(min_row=3, values_only=True)]
        self.assertEqual(refs, [ProtectionCalculator.reference, TransformerCalculator.reference])

    def test_empty_export(self):
        wb = load_workbook(io.BytesIO(reports.export_to_excel({})))
        self.assertIn("Memoria", wb.sheetnames)


class TestAdvisory(unittest.TestCase):
    def test_ask_advisor(self):
        service = EchoService()
        self.assertTrue(ask_advisor(service, "Hola mundo NOM").startswith("Respuesta"))
        self.assertEqual(service.instructions, [SYSTEM_INSTRUCTION])

    def test_custom_instruction(self):
        service = EchoService()
        ask_advisor(service, "Hola", "Responde breve")
        self.assertEqual(service.instructions, ["Responde breve"])

    def test_failure_wrapped(self):
        with self.assertRaises(AdvisoryError):
            ask_advisor(BrokenService(), "Hola")

    def test_prompts_carry_values(self):
        a = AmpacityEntry("Alimentador", "1/0", ambient_temp_c=35)
        self.assertIn("1/0", ampacity_prompt(a, AmpacityCalculator().compute(a)))

        v = VoltageDropEntry("Circuito 1", 30, 20, 220, "12")
        self.assertIn("3.15%", voltage_drop_prompt(v, VoltageDropCalculator().compute(v)))

        p = ProtectionEntry("Principal", 80, True, 3)
        self.assertIn("Capacidad Sugerida: 100 A", protection_report_prompt(p, ProtectionCalculator().compute(p)))

        m = MotorEntry("Bomba", 3, 220, 10)
        self.assertIn("FLA 28", motor_prompt(m, MotorCalculator().compute(m)))

        t = TransformerEntry("T1", 45, 480, 220, 3, 3, False)
        prompt = transformer_prompt(t, TransformerCalculator().compute(t))
        self.assertIn("Primario 125%", prompt)
        self.assertNotIn("Secundario", prompt)

        s = LoadScheduleLogic.summarize([Circuit("C-1", "Alumbrado", 1200, 1, 127, True)], 0.9)
        self.assertIn("1 circuitos", load_schedule_prompt(s))


class TestPackaging(unittest.TestCase):
    def test_streamlit_script_not_installed(self):
        # app.py runs page calls on import; it is launched with `streamlit run`
        path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "pyproject.toml")
        with open(path, encoding="utf-8") as f:
            modules = re.search(r"^py-modules = \[(.*)\]$", f.read(), re.MULTILINE).group(1)
        self.assertEqual(modules, '"main"')

if __name__ == '__main__':
    unittest.main()
