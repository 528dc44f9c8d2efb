import sys
import logging
import datetime
from core.models import (
    AmpacityEntry, VoltageDropEntry, ConductorRun, ConduitFillEntry, ProtectionEntry,
    MotorEntry, TransformerEntry, Circuit, ConductorMaterial, InsulationRating
)
from core.components import LookupStatus
from core.converters import convert_power_unit, convert_length_unit
from core import reports
from core.advisory import ampacity_prompt, motor_prompt, transformer_prompt
from standards.nom import (
    AmpacityCalculator, VoltageDropCalculator, ConduitFillCalculator, ProtectionCalculator,
    MotorCalculator, TransformerCalculator
)
from standards.nom_logic import LoadScheduleLogic
from standards.nom_tables import HP_OPTIONS

def ask(prompt, cast=str, default=None):
    # Re-prompts until the text converts
    while True:
        raw = input(prompt).strip()
        if not raw and default is not None:
            return default
        try:
            return cast(raw)
        except ValueError as e:
            print(f"Error en entrada de datos: {e}. Intente de nuevo.")

def ask_yes(prompt):
    return input(prompt).strip().lower() == 's'

def read_ampacity():
    entries = []
    while True:
        print(f"\n[Conductor #{len(entries)+1}]")
        name = input("Nombre: ").strip()
        if not name: break
        material = ConductorMaterial.ALUMINUM if input("Material (Cu/Al) [Cu]: ").strip().lower() == 'al' else ConductorMaterial.COPPER
        rating = ask("Temperatura nominal (60/75/90) [75]: ", lambda s: InsulationRating(int(s)), InsulationRating.TEMP_75)
        gauge = ask("Calibre (AWG) [12]: ", str, "12")
        temp = ask("Temperatura ambiente (°C) [30]: ", float, 30.0)
        count = ask("N° de conductores portadores de corriente [3]: ", int, 3)
        entries.append(AmpacityEntry(name, gauge, material, rating, temp, count))
        if not ask_yes("¿Agregar otro? (s/n): "): break

    results = AmpacityCalculator().compute_all(entries)
    print(f"\nReferencia: {AmpacityCalculator.reference}")
    print("-" * 90)
    print(f"{'Nombre':<20} | {'Calibre':<8} | {'Base':<6} | {'F.Temp':<6} | {'F.Agrup':<7} | {'Corregida'}")
    print("-" * 90)
    for e, r in zip(entries, results):
        warn = " (sin dato)" if r.status == LookupStatus.UNSUPPORTED else (" (!)" if not r.is_permitted else "")
        print(f"{e.name:<20} | {e.gauge:<8} | {r.base_ampacity:<6} | {r.temp_factor:<6} | {r.grouping_factor:<7} | {r.corrected_ampacity} A{warn}")
    if entries:
        print(f"\nConsulta sugerida:\n{ampacity_prompt(entries[-1], results[-1])}")
    return {"Ampacidad": reports.ampacity_frame(entries, results)}

def read_voltage_drop():
    entries = []
    while True:
        print(f"\n[Circuito #{len(entries)+1}]")
        name = input("Nombre: ").strip()
        if not name: break
        l_input = ask("Longitud (ej: 30 m, 100 ft): ", str)
        parts = l_input.split()
        try:
            length = convert_length_unit(float(parts[0]), parts[1] if len(parts) > 1 else "m")
        except (ValueError, IndexError):
            print("Longitud inválida, se usa 30 m.")
            length = 30.0
        current = ask("Corriente (A): ", float)
        voltage = ask("Tensión (V) [220]: ", float, 220.0)
        gauge = ask("Calibre (AWG) [12]: ", str, "12")
        three = ask("Fases (1 o 3) [1]: ", int, 1) == 3
        entries.append(VoltageDropEntry(name, length, current, voltage, gauge, three))
        if not ask_yes("¿Agregar otro? (s/n): "): break

    results = VoltageDropCalculator().compute_all(entries)
    print(f"\nReferencia: {VoltageDropCalculator.reference}")
    for e, r in zip(entries, results):
        if r.status == LookupStatus.UNSUPPORTED:
            warn = " (sin dato o tensión no válida) NO CUMPLE"
        else:
            warn = "" if r.is_compliant else " (!) NO CUMPLE"
        print(f"{e.name:<20} | {r.drop_volts:.2f} V | {r.drop_percent:.2f}%{warn}")
    return {"Caida de Tension": reports.voltage_drop_frame(entries, results)}

def read_conduit():
    runs = []
    conduit_type = ask("Tipo de tubería [PVC-40]: ", str, "PVC-40")
    while True:
        gauge = input("Calibre (vacío para terminar): ").strip()
        if not gauge: break
        qty = ask("Cantidad [3]: ", int, 3)
        runs.append(ConductorRun(gauge, qty))
    entry = ConduitFillEntry(tuple(runs), conduit_type)
    result = ConduitFillCalculator().compute(entry)
    print(f"\nReferencia: {ConduitFillCalculator.reference}")
    print(f"\nÁrea total: {round(result.total_area_mm2)} mm² | Tubería sugerida: {result.label} | Relleno permitido: {result.fill_percent}%")
    if result.unsupported_gauges:
        print(f"Calibres sin datos (ignorados): {', '.join(result.unsupported_gauges)}")
    return {"Tuberia": reports.conduit_frame(entry, result)}

def read_protection():
    entries = []
    while True:
        name = input("\nNombre de la carga: ").strip()
        if not name: break
        amps = ask("Corriente de carga (A): ", float)
        cont = ask_yes("¿Es carga continua (>3h)? (s/n) [n]: ")
        poles = ask("Polos (1, 2 o 3) [1]: ", int, 1)
        entries.append(ProtectionEntry(name, amps, cont, poles))
        if not ask_yes("¿Agregar otra? (s/n): "): break

    results = ProtectionCalculator().compute_all(entries)
    print(f"\nReferencia: {ProtectionCalculator.reference}")
    for e, r in zip(entries, results):
        note = " (Máximo de tabla)" if r.exceeds_table else ""
        print(f"{e.name:<20} | Min {r.min_rating:.2f} A | Sugerido {r.standard_rating} A{note}")
    return {"Protecciones": reports.protection_frame(entries, results)}

def read_motors():
    entries = []
    while True:
        name = input("\nNombre del motor: ").strip()
        if not name: break
        phases = ask("Fases (1 o 3) [3]: ", int, 3)
        voltage = ask("Tensión (127/220/440) [220]: ", int, 220)
        hp = ask(f"HP {HP_OPTIONS}: ", float)
        sf = ask("Factor de servicio [1.15]: ", float, 1.15)
        entries.append(MotorEntry(name, phases, voltage, hp, sf))
        if not ask_yes("¿Agregar otro? (s/n): "): break

    results = MotorCalculator().compute_all(entries)
    print(f"\nReferencia: {MotorCalculator.reference}")
    for e, r in zip(entries, results):
        if r.status == LookupStatus.UNSUPPORTED:
            print(f"{e.name:<20} | Combinación no tabulada ({e.phases}F, {e.voltage} V, {e.horsepower} HP)")
            continue
        print(f"{e.name:<20} | FLA {r.fla} A | Cond. {r.min_conductor_ampacity:.2f} A | Sobrecarga {r.overload_trip:.2f} A | ITM {r.standard_breaker} A")
    if entries:
        print(f"\nConsulta sugerida:\n{motor_prompt(entries[-1], results[-1])}")
    return {"Motores": reports.motor_frame(entries, results)}

def read_transformers():
    entries = []
    while True:
        name = input("\nNombre del transformador: ").strip()
        if not name: break
        kva = ask("Capacidad (kVA): ", float)
        v_pri = ask("Tensión primaria (V) [13200]: ", float, 13200.0)
        v_sec = ask("Tensión secundaria (V) [220]: ", float, 220.0)
        phases = ask("Fases (1 o 3) [3]: ", int, 3)
        sec_prot = input("¿Protección en secundario? (s/n) [s]: ").strip().lower() != 'n'
        entries.append(TransformerEntry(name, kva, v_pri, v_sec, phases, has_secondary_protection=sec_prot))
        if not ask_yes("¿Agregar otro? (s/n): "): break

    results = TransformerCalculator().compute_all(entries)
    print(f"\nReferencia: {TransformerCalculator.reference}")
    for e, r in zip(entries, results):
        note = " (Máximo de tabla)" if r.exceeds_table else ""
        print(f"{e.name:<20} | Ip {r.primary_current:.2f} A -> {r.primary_breaker} A | Is {r.secondary_current:.2f} A -> {r.secondary_breaker_display}{note}")
    if entries:
        print(f"\nConsulta sugerida:\n{transformer_prompt(entries[-1], results[-1])}")
    return {"Transformadores": reports.transformer_frame(entries, results)}

def read_load_schedule():
    circuits = []
    demand = ask("Factor de demanda [0.9]: ", float, 0.9)
    system_v = ask("Tensión del sistema (V) [220]: ", float, 220.0)
    while True:
        print(f"\n[Circuito C-{len(circuits)+1}]")
        desc = input("Descripción: ").strip()
        if not desc: break
        val = ask("Carga (ej: 1200 VA, 2 KW) [VA]: ", str)
        parts = val.split()
        try:
            va = convert_power_unit(float(parts[0]), parts[1] if len(parts) > 1 else "VA")
        except (ValueError, IndexError):
            print("Carga inválida, se usa 0 VA.")
            va = 0.0
        poles = ask("Polos (1, 2 o 3) [1]: ", int, 1)
        voltage = ask("Tensión (127/220/440) [127]: ", float, 127.0)
        phases = input("Fases asignadas (ej: A, AB, ABC) [A]: ").strip().upper() or "A"
        circuits.append(Circuit(f"C-{len(circuits)+1}", desc, va, poles, voltage,
                                "A" in phases, "B" in phases, "C" in phases))

    summary = LoadScheduleLogic.summarize(circuits, demand, system_v)
    print("-" * 100)
    print(f"{'Cto':<5} | {'Descripción':<20} | {'Amps':<7} | {'Conductor':<9} | {'Protección':<10} | {'Tubería'}")
    print("-" * 100)
    for c in summary.circuits:
        note = " (Máximo de tabla)" if c.exceeds_table else ""
        if c.status == LookupStatus.UNSUPPORTED:
            note = " (sin fase o tensión no válida)"
        print(f"{c.name:<5} | {c.description[:20]:<20} | {c.amps:<7.2f} | {c.conductor_label:<9} | {c.protection_label:<10} | {c.conduit.label}{note}")
    print("-" * 100)
    print(f"Fases A/B/C: {summary.total_a:.0f} / {summary.total_b:.0f} / {summary.total_c:.0f} VA")
    print(f"Conectada: {summary.connected_load:.0f} VA | Demandada: {summary.demanded_load:.0f} VA | Desbalance: {summary.unbalance_percent:.2f}% | I principal: {summary.main_amps:.2f} A")
    return {
        "Cedula de Cargas": reports.load_schedule_frame(summary),
        "Resumen Tablero": reports.panel_totals_frame(summary),
    }

MENU = [
    ("Ampacidad", read_ampacity, AmpacityCalculator.reference),
    ("Caída de Tensión", read_voltage_drop, VoltageDropCalculator.reference),
    ("Tubería", read_conduit, ConduitFillCalculator.reference),
    ("Protecciones", read_protection, ProtectionCalculator.reference),
    ("Motores", read_motors, MotorCalculator.reference),
    ("Transformadores", read_transformers, TransformerCalculator.reference),
    ("Cédula de Cargas", read_load_schedule, LoadScheduleLogic.reference),
]

def main():
    level = logging.DEBUG if "--verbose" in sys.argv else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    print("==========================================================")
    print(" CALCULADORA NOM-001-SEDE-2012")
    print("==========================================================")

    sheets = {}
    references = []
    while True:
        print()
        for i, (label, _, _) in enumerate(MENU, start=1):
            print(f"({i}) {label}")
        choice = input("Seleccione cálculo (vacío para salir): ").strip()
        if not choice: break
        try:
            _, handler, reference = MENU[int(choice) - 1]
        except (ValueError, IndexError):
            print("Opción inválida.")
            continue
        sheets.update(handler())
        if reference not in references:
            references.append(reference)

    if not sheets:
        print("No se realizaron cálculos.")
        sys.exit()

    if ask_yes("\n¿Exportar reporte a Excel? (s/n): "):
        filename = f"Memoria_NOM001_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        reports.export_to_excel(sheets, filename, references)
        print(f"\n[INFO] Excel generado: {filename}")

if __name__ == "__main__":
    main()
