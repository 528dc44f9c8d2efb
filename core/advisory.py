import logging
from abc import ABC, abstractmethod

from core.components import (
    AmpacityResult, MotorResult, PanelSummary, ProtectionResult, TransformerResult, VoltageDropResult,
)
from core.models import AmpacityEntry, MotorEntry, ProtectionEntry, TransformerEntry, VoltageDropEntry

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "Eres un experto senior en la norma oficial mexicana NOM-001-SEDE-2012 (Instalaciones Eléctricas). "
    "Ayuda a ingenieros con cálculos precisos, interpretaciones normativas y mejores prácticas. "
    "Incluye referencias a artículos específicos cuando sea posible."
)


class AdvisoryError(Exception):
    pass


class AdvisoryService(ABC):
    """Text-in, text-out collaborator answering normative questions."""

    @abstractmethod
    def ask(self, prompt: str, system_instruction: str) -> str:
        pass


def ask_advisor(service: AdvisoryService, prompt: str, system_instruction: str = SYSTEM_INSTRUCTION) -> str:
    try:
        return service.ask(prompt, system_instruction)
    except Exception as e:
        logger.warning("Advisory service failed: %s", e)
        raise AdvisoryError(str(e)) from e


def ampacity_prompt(entry: AmpacityEntry, result: AmpacityResult) -> str:
    return (
        f"Explica el fundamento normativo para la ampacidad del conductor {entry.gauge} "
        f"{entry.material.value} a {entry.insulation_rating.value}°C, considerando una temperatura "
        f"ambiente de {entry.ambient_temp_c}°C y {entry.conductor_count} conductores portadores de "
        f"corriente en la misma canalización (ampacidad corregida {result.corrected_ampacity} A). "
        f"Refiere a la Tabla 310-15(b)(16) y factores de ajuste de la NOM-001-SEDE-2012."
    )

def voltage_drop_prompt(entry: VoltageDropEntry, result: VoltageDropResult) -> str:
    return (
        f"Explica el fundamento normativo para el circuito '{entry.name}' con una caída del "
        f"{result.drop_percent:.2f}%. Cita Art. 210-19(a) de la NOM-001-SEDE-2012."
    )

def protection_prompt(entry: ProtectionEntry, result: ProtectionResult) -> str:
    return (
        f"Explica el fundamento normativo para seleccionar una protección de {result.standard_rating}A "
        f"para una carga de {entry.load_amps}A ({'continua' if entry.is_continuous else 'no continua'}) "
        f"según la NOM-001-SEDE-2012. Cita Art. 240-6 (Capacidad estándar) y Art. 210-20 / 215-3 "
        f"(Cargas continuas al 125%)."
    )

def protection_report_prompt(entry: ProtectionEntry, result: ProtectionResult) -> str:
    return "\n".join([
        "Genera un informe de selección de protección:",
        f"- Identificador: {entry.name}",
        f"- Carga Nominal: {entry.load_amps} A",
        f"- Uso Continuo: {'Sí (125%)' if entry.is_continuous else 'No (100%)'}",
        f"- Fases: {entry.poles}",
        f"- Tipo: {entry.device_type.value}",
        f"- Capacidad Sugerida: {result.standard_rating} A",
        "Concluye con la referencia a la Tabla 240-6 de la NOM-001-SEDE-2012.",
    ])

def motor_prompt(entry: MotorEntry, result: MotorResult) -> str:
    return "\n".join([
        f"Actúa como consultor senior de la NOM-001-SEDE-2012. Explica los fundamentos para un motor de "
        f"{entry.horsepower} HP, {entry.phases} fases, {entry.voltage} V (FLA {result.fla} A).",
        "Detalla:",
        "1. FLA según tabla 430.248/250.",
        "2. Dimensionamiento de conductores al 125% (Art. 430.22).",
        "3. Protección contra sobrecarga (Art. 430.32).",
        "4. Protección contra cortocircuito al 250% (Art. 430.52).",
    ])

def transformer_prompt(entry: TransformerEntry, result: TransformerResult) -> str:
    if result.secondary_applicable:
        multipliers = (f"Primario {result.primary_multiplier * 100:.0f}% y "
                       f"Secundario {result.secondary_multiplier * 100:.0f}%")
    else:
        multipliers = f"Primario {result.primary_multiplier * 100:.0f}%"
    return (
        f"Actúa como perito en la NOM-001-SEDE-2012. Explica el dimensionamiento de protecciones para un "
        f"transformador de {entry.kva} kVA, {entry.primary_voltage}V/{entry.secondary_voltage}V, "
        f"{entry.phases} fases. Justifica los multiplicadores usados ({multipliers}) basándote en el "
        f"Artículo 450-3 y la Tabla correspondiente."
    )

def load_schedule_prompt(summary: PanelSummary) -> str:
    return (
        f"Revisa una cédula de cargas con {len(summary.circuits)} circuitos: carga conectada "
        f"{summary.connected_load:.0f} VA, factor de demanda {summary.demand_factor}, desbalance "
        f"{summary.unbalance_percent:.2f}%. Indica si el desbalance es aceptable y cita los Artículos "
        f"210, 220 y 240 de la NOM-001-SEDE-2012."
    )
