import logging
import math
from typing import Iterable, Optional

from core.components import CircuitResult, LookupStatus, PanelSummary
from core.models import AmpacityEntry, Circuit, ConductorMaterial, ConductorRun, ConduitFillEntry, InsulationRating
from standards.nom import AmpacityCalculator, ConduitFillCalculator
from standards.nom_tables import (
    CONTINUOUS_FACTOR, PANEL_BREAKER_RATINGS, REFERENCE_AMBIENT_C, find_conductor_for_ampacity,
    next_standard_rating,
)

logger = logging.getLogger(__name__)


class LoadScheduleLogic:
    """
    Cédula de cargas: per-circuit sizing and three-phase balance of a panel.

    Every branch circuit is treated as a continuous load (conductor and breaker at 125%)
    in copper with 75C terminals at the 30C reference ambient.
    """

    reference = "Art. 210, 220 y 240 (balanceo de fases y dimensionamiento de circuitos derivados)"

    ampacity_calc = AmpacityCalculator()
    conduit_calc = ConduitFillCalculator()

    @staticmethod
    def calculate_circuit_current(circuit: Circuit) -> float:
        # A circuit with no phase assigned carries nothing
        if circuit.active_phases == 0:
            return 0.0
        denominator = circuit.voltage * (math.sqrt(3) if circuit.poles == 3 else 1.0)
        if denominator <= 0:
            return 0.0
        return circuit.load_va / denominator

    @staticmethod
    def calculate_phase_share(circuit: Circuit) -> float:
        active = circuit.active_phases
        # A circuit without a usable voltage is left out of the phase totals
        if active == 0 or circuit.voltage <= 0:
            return 0.0
        return circuit.load_va / active

    @staticmethod
    def process_circuit(circuit: Circuit) -> CircuitResult:
        amps = LoadScheduleLogic.calculate_circuit_current(circuit)
        min_ampacity = amps * CONTINUOUS_FACTOR

        conductor, conductor_exceeds = find_conductor_for_ampacity(min_ampacity)
        protection, protection_exceeds = next_standard_rating(min_ampacity, PANEL_BREAKER_RATINGS)

        # Phase conductors plus neutral/ground share the raceway
        wires = circuit.poles + 1
        conductor_ampacity = LoadScheduleLogic.ampacity_calc.compute(AmpacityEntry(
            name=circuit.name,
            gauge=conductor.gauge,
            material=ConductorMaterial.COPPER,
            insulation_rating=InsulationRating.TEMP_75,
            ambient_temp_c=REFERENCE_AMBIENT_C,
            conductor_count=wires,
        ))
        conduit = LoadScheduleLogic.conduit_calc.compute(
            ConduitFillEntry(conductors=(ConductorRun(conductor.gauge, wires),))
        )

        status = LookupStatus.OK
        if circuit.active_phases == 0:
            logger.debug("Circuit %s has no phase assigned, it adds no load", circuit.name)
            status = LookupStatus.UNSUPPORTED
        elif circuit.voltage <= 0:
            logger.debug("Circuit %s has a non-positive voltage, it adds no load", circuit.name)
            status = LookupStatus.UNSUPPORTED

        return CircuitResult(
            name=circuit.name,
            description=circuit.description,
            poles=circuit.poles,
            amps=amps,
            min_ampacity=min_ampacity,
            share_va=LoadScheduleLogic.calculate_phase_share(circuit),
            conductor=conductor,
            conductor_ampacity=conductor_ampacity,
            protection=protection,
            conduit=conduit,
            phase_a=circuit.phase_a,
            phase_b=circuit.phase_b,
            phase_c=circuit.phase_c,
            protection_exceeds_table=protection_exceeds,
            conductor_exceeds_table=conductor_exceeds,
            status=status,
        )

    @staticmethod
    def calculate_unbalance(total_a: float, total_b: float, total_c: float) -> float:
        connected = total_a + total_b + total_c
        avg = connected / 3
        if avg <= 0:
            return 0.0
        return (max(total_a, total_b, total_c) - min(total_a, total_b, total_c)) / avg * 100

    @staticmethod
    def summarize(circuits: Iterable[Circuit], demand_factor: float = 1.0,
                  system_voltage: Optional[float] = None) -> PanelSummary:
        results = tuple(LoadScheduleLogic.process_circuit(c) for c in circuits)

        total_a = total_b = total_c = 0.0
        for r in results:
            if r.phase_a: total_a += r.share_va
            if r.phase_b: total_b += r.share_va
            if r.phase_c: total_c += r.share_va

        connected = total_a + total_b + total_c
        demanded = connected * demand_factor

        main_amps = 0.0
        if system_voltage and system_voltage > 0:
            main_amps = demanded / (system_voltage * math.sqrt(3))

        return PanelSummary(
            circuits=results,
            total_a=total_a,
            total_b=total_b,
            total_c=total_c,
            connected_load=connected,
            demanded_load=demanded,
            unbalance_percent=LoadScheduleLogic.calculate_unbalance(total_a, total_b, total_c),
            main_amps=main_amps,
            demand_factor=demand_factor,
            system_voltage=system_voltage,
        )
