import logging
import math

from core.calculator import Calculator
from core.components import (
    AmpacityResult, ConduitFillResult, LookupStatus, MotorResult, ProtectionResult,
    TransformerResult, VoltageDropResult,
)
from core.models import (
    AmpacityEntry, ConduitFillEntry, MotorEntry, ProtectionEntry, TransformerEntry, VoltageDropEntry,
)
from standards.nom_tables import (
    CONDUCTORS_BY_GAUGE, CONTINUOUS_FACTOR, INSULATION_AREA_FACTOR, MOTOR_BREAKER_RATINGS,
    POWER_FACTOR, SIN_PHI, STANDARD_RATINGS, TRANSFORMER_BREAKER_RATINGS, TRANSFORMER_MULTIPLIERS,
    VOLTAGE_DROP_LIMIT_PERCENT, get_grouping_factor, get_temp_correction, lookup_base_ampacity,
    lookup_fla, next_standard_rating, select_conduit_size,
)

logger = logging.getLogger(__name__)


class AmpacityCalculator(Calculator):
    title = "Ampacidad"
    reference = "Tabla 310-15(b)(16) & 310-15(b)(2)(a), 310-15(b)(3)(a)"

    def compute(self, entry: AmpacityEntry) -> AmpacityResult:
        rating = entry.insulation_rating.value
        base = lookup_base_ampacity(entry.material, entry.gauge, rating)
        status = LookupStatus.OK
        if base is None:
            logger.debug("No ampacity for %s %s AWG at %sC", entry.material.value, entry.gauge, rating)
            base = 0.0
            status = LookupStatus.UNSUPPORTED

        f_group = get_grouping_factor(entry.conductor_count)
        f_temp = get_temp_correction(entry.ambient_temp_c, rating)
        corrected = round(base * f_group * f_temp, 1)

        return AmpacityResult(
            base_ampacity=base,
            temp_factor=f_temp,
            grouping_factor=f_group,
            corrected_ampacity=corrected,
            status=status,
        )


class VoltageDropCalculator(Calculator):
    title = "Caída de Tensión"
    reference = "Art. 210-19(a) / 215-2(a)"

    def compute(self, entry: VoltageDropEntry) -> VoltageDropResult:
        conductor = CONDUCTORS_BY_GAUGE.get(entry.gauge)
        if conductor is None:
            logger.debug("Gauge %s not in Table 8, voltage drop set to zero", entry.gauge)
            return VoltageDropResult(0.0, 0.0, VOLTAGE_DROP_LIMIT_PERCENT, LookupStatus.UNSUPPORTED)

        # Single phase doubles the path length (go and return)
        k = math.sqrt(3) if entry.is_three_phase else 2.0
        z_eff = conductor.resistance_copper * POWER_FACTOR + conductor.reactance_steel * SIN_PHI
        vd_volts = (k * entry.length_meters * entry.current_amps * z_eff) / 1000.0
        if entry.voltage <= 0:
            logger.debug("Circuit %s has a non-positive voltage, drop percent set to zero", entry.name)
            return VoltageDropResult(vd_volts, 0.0, VOLTAGE_DROP_LIMIT_PERCENT, LookupStatus.UNSUPPORTED)
        vd_percent = (vd_volts / entry.voltage) * 100.0

        return VoltageDropResult(vd_volts, vd_percent, VOLTAGE_DROP_LIMIT_PERCENT)


class ConduitFillCalculator(Calculator):
    title = "Tubería"
    reference = "Capítulo 10, Tablas 1, 4 y 5"

    def compute(self, entry: ConduitFillEntry) -> ConduitFillResult:
        total_area = 0.0
        count = 0
        missing = []
        for run in entry.conductors:
            count += run.quantity
            conductor = CONDUCTORS_BY_GAUGE.get(run.gauge)
            if conductor is None:
                missing.append(run.gauge)
                continue
            # Approximate area including insulation
            total_area += conductor.area_mm2 * INSULATION_AREA_FACTOR * run.quantity

        if missing:
            logger.debug("Gauges without area data skipped: %s", missing)

        designator, inches = select_conduit_size(total_area)
        return ConduitFillResult(
            total_area_mm2=total_area,
            trade_size=designator,
            trade_size_in=inches,
            conductor_count=count,
            fill_percent=self.permitted_fill(count),
            conduit_type=entry.conduit_type,
            unsupported_gauges=tuple(missing),
        )

    @staticmethod
    def permitted_fill(conductor_count: int) -> int:
        # Capitulo 10 Tabla 1
        if conductor_count == 1:
            return 53
        if conductor_count == 2:
            return 31
        return 40


class ProtectionCalculator(Calculator):
    title = "Protecciones"
    reference = "Art. 240-6 & 210-20(a) / 215-3 (125% Continua)"
    RATINGS = STANDARD_RATINGS

    def compute(self, entry: ProtectionEntry) -> ProtectionResult:
        multiplier = CONTINUOUS_FACTOR if entry.is_continuous else 1.0
        min_rating = entry.load_amps * multiplier
        rating, exceeds = next_standard_rating(min_rating, self.RATINGS)
        return ProtectionResult(min_rating=min_rating, standard_rating=rating, exceeds_table=exceeds)


class MotorCalculator(Calculator):
    title = "Motores"
    reference = "Tablas 430-248/250, Art. 430-22, 430-32, 430-52"
    RATINGS = MOTOR_BREAKER_RATINGS

    def compute(self, entry: MotorEntry) -> MotorResult:
        fla = lookup_fla(entry.phases, entry.voltage, entry.horsepower)
        status = LookupStatus.OK
        if fla is None:
            logger.debug("No FLA for %s HP, %s phases, %s V", entry.horsepower, entry.phases, entry.voltage)
            fla = 0.0
            status = LookupStatus.UNSUPPORTED

        # Art. 430-32: 125% with SF >= 1.15, otherwise 115%
        overload_factor = 1.25 if entry.service_factor >= 1.15 else 1.15
        # Art. 430-52: Inverse time breaker up to 250% of FLA
        max_breaker = fla * 2.50
        breaker, exceeds = next_standard_rating(max_breaker, self.RATINGS)

        return MotorResult(
            fla=fla,
            min_conductor_ampacity=fla * 1.25,  # Art. 430-22
            overload_factor=overload_factor,
            overload_trip=fla * overload_factor,
            max_breaker=max_breaker,
            standard_breaker=breaker,
            exceeds_table=exceeds,
            status=status,
        )


class TransformerCalculator(Calculator):
    title = "Transformadores"
    reference = "Art. 450-3, Tablas 450-3(a) y 450-3(b)"
    RATINGS = TRANSFORMER_BREAKER_RATINGS

    @staticmethod
    def full_load_current(kva: float, voltage: float, phases: int) -> float:
        factor = math.sqrt(3) if phases == 3 else 1.0
        if voltage <= 0:
            return 0.0
        return (kva * 1000) / (voltage * factor)

    @staticmethod
    def select_multipliers(primary_voltage: float, has_secondary_protection: bool):
        return TRANSFORMER_MULTIPLIERS[(primary_voltage > 600, bool(has_secondary_protection))]

    def compute(self, entry: TransformerEntry) -> TransformerResult:
        i_pri = self.full_load_current(entry.kva, entry.primary_voltage, entry.phases)
        i_sec = self.full_load_current(entry.kva, entry.secondary_voltage, entry.phases)
        status = LookupStatus.OK
        if entry.primary_voltage <= 0 or entry.secondary_voltage <= 0:
            logger.debug("Transformer %s has a non-positive voltage", entry.name)
            status = LookupStatus.UNSUPPORTED

        pri_mult, sec_mult = self.select_multipliers(entry.primary_voltage, entry.has_secondary_protection)
        pri_min = i_pri * pri_mult
        sec_min = i_sec * sec_mult
        pri_breaker, pri_exceeds = next_standard_rating(pri_min, self.RATINGS)
        sec_breaker, sec_exceeds = next_standard_rating(sec_min, self.RATINGS)

        return TransformerResult(
            primary_current=i_pri,
            secondary_current=i_sec,
            primary_multiplier=pri_mult,
            secondary_multiplier=sec_mult,
            primary_min_rating=pri_min,
            secondary_min_rating=sec_min,
            primary_breaker=pri_breaker,
            secondary_breaker=sec_breaker,
            secondary_applicable=entry.has_secondary_protection,
            primary_exceeds_table=pri_exceeds,
            secondary_exceeds_table=sec_exceeds,
            status=status,
        )
