from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

class LookupStatus(Enum):
    OK = "OK"
    UNSUPPORTED = "UNSUPPORTED"  # No table entry; numeric fields are zero

@dataclass(frozen=True)
class ConductorSpec:
    gauge: str
    area_mm2: float
    resistance_copper: float  # Ohm/km at 75C
    reactance_steel: float    # Ohm/km
    ampacity_75c: float

@dataclass(frozen=True)
class AmpacityResult:
    base_ampacity: float
    temp_factor: float
    grouping_factor: float
    corrected_ampacity: float
    status: LookupStatus = LookupStatus.OK

    @property
    def is_permitted(self) -> bool:
        # A temperature factor of 0 means the insulation can't be used at that ambient
        return self.temp_factor > 0

@dataclass(frozen=True)
class VoltageDropResult:
    drop_volts: float
    drop_percent: float
    limit_percent: float = 3.0
    status: LookupStatus = LookupStatus.OK

    @property
    def is_compliant(self) -> bool:
        return self.status == LookupStatus.OK and self.drop_percent <= self.limit_percent

@dataclass(frozen=True)
class ConduitFillResult:
    total_area_mm2: float
    trade_size: str      # Metric designator, e.g. "25"
    trade_size_in: str   # Inch designation, e.g. '1"'
    conductor_count: int
    fill_percent: int
    conduit_type: str
    unsupported_gauges: Tuple[str, ...] = ()

    @property
    def status(self) -> LookupStatus:
        return LookupStatus.UNSUPPORTED if self.unsupported_gauges else LookupStatus.OK

    @property
    def label(self) -> str:
        return f'{self.trade_size} ({self.trade_size_in})'

@dataclass(frozen=True)
class ProtectionResult:
    min_rating: float
    standard_rating: int
    exceeds_table: bool = False

    @property
    def is_oversized(self) -> bool:
        return self.standard_rating > self.min_rating

@dataclass(frozen=True)
class MotorResult:
    fla: float
    min_conductor_ampacity: float
    overload_factor: float
    overload_trip: float
    max_breaker: float
    standard_breaker: int
    exceeds_table: bool = False
    status: LookupStatus = LookupStatus.OK

@dataclass(frozen=True)
class TransformerResult:
    primary_current: float
    secondary_current: float
    primary_multiplier: float
    secondary_multiplier: float
    primary_min_rating: float
    secondary_min_rating: float
    primary_breaker: int
    secondary_breaker: int
    secondary_applicable: bool = True
    primary_exceeds_table: bool = False
    secondary_exceeds_table: bool = False
    status: LookupStatus = LookupStatus.OK

    @property
    def secondary_breaker_display(self) -> str:
        return str(self.secondary_breaker) if self.secondary_applicable else "N/A"

    @property
    def exceeds_table(self) -> bool:
        return self.primary_exceeds_table or (self.secondary_applicable and self.secondary_exceeds_table)

@dataclass(frozen=True)
class CircuitResult:
    name: str
    description: str
    poles: int
    amps: float
    min_ampacity: float
    share_va: float
    conductor: ConductorSpec
    conductor_ampacity: AmpacityResult
    protection: int
    conduit: ConduitFillResult
    phase_a: bool = False
    phase_b: bool = False
    phase_c: bool = False
    protection_exceeds_table: bool = False
    conductor_exceeds_table: bool = False
    status: LookupStatus = LookupStatus.OK

    @property
    def exceeds_table(self) -> bool:
        return self.protection_exceeds_table or self.conductor_exceeds_table

    @property
    def protection_label(self) -> str:
        return f"{self.poles}x{self.protection}A"

    @property
    def conductor_label(self) -> str:
        return f"{self.conductor.gauge} AWG"

@dataclass(frozen=True)
class PanelSummary:
    circuits: Tuple[CircuitResult, ...]
    total_a: float
    total_b: float
    total_c: float
    connected_load: float
    demanded_load: float
    unbalance_percent: float
    main_amps: float
    demand_factor: float = 1.0
    system_voltage: Optional[float] = None

    @property
    def phase_totals(self) -> Tuple[float, float, float]:
        return (self.total_a, self.total_b, self.total_c)
