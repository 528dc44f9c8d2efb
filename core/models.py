from dataclasses import dataclass
from enum import Enum
from typing import Tuple

class ConductorMaterial(Enum):
    COPPER = "Cu"
    ALUMINUM = "Al"

class InsulationRating(Enum):
    TEMP_60 = 60
    TEMP_75 = 75
    TEMP_90 = 90

class DeviceType(Enum):
    BREAKER = "ITM"
    FUSE = "Fuse"

@dataclass(frozen=True)
class AmpacityEntry:
    name: str
    gauge: str
    material: ConductorMaterial = ConductorMaterial.COPPER
    insulation_rating: InsulationRating = InsulationRating.TEMP_75
    ambient_temp_c: float = 30.0
    conductor_count: int = 3  # Current-carrying conductors in the same raceway

@dataclass(frozen=True)
class VoltageDropEntry:
    name: str
    length_meters: float  # One-way length
    current_amps: float
    voltage: float
    gauge: str
    is_three_phase: bool = False

@dataclass(frozen=True)
class ConductorRun:
    gauge: str
    quantity: int
    insulation: str = "THHW-LS"

@dataclass(frozen=True)
class ConduitFillEntry:
    conductors: Tuple[ConductorRun, ...]
    conduit_type: str = "PVC-40"  # Display only, does not change the breakpoints

@dataclass(frozen=True)
class ProtectionEntry:
    name: str
    load_amps: float
    is_continuous: bool = False
    poles: int = 1
    device_type: DeviceType = DeviceType.BREAKER

@dataclass(frozen=True)
class MotorEntry:
    name: str
    phases: int  # 1 or 3
    voltage: int
    horsepower: float
    service_factor: float = 1.15

@dataclass(frozen=True)
class TransformerEntry:
    name: str
    kva: float
    primary_voltage: float
    secondary_voltage: float
    phases: int = 3
    impedance_percent: float = 5.0
    has_secondary_protection: bool = True

@dataclass(frozen=True)
class Circuit:
    name: str
    description: str
    load_va: float
    poles: int = 1  # 1, 2 or 3
    voltage: float = 127.0
    phase_a: bool = True
    phase_b: bool = False
    phase_c: bool = False

    @property
    def active_phases(self) -> int:
        return sum(1 for flag in (self.phase_a, self.phase_b, self.phase_c) if flag)
