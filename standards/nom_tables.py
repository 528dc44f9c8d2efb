import logging
from typing import Dict, Optional, Sequence, Tuple

from core.components import ConductorSpec
from core.models import ConductorMaterial, InsulationRating

logger = logging.getLogger(__name__)

# Engine-wide constants
POWER_FACTOR = 0.9
SIN_PHI = 0.436  # Approx. for PF 0.9
VOLTAGE_DROP_LIMIT_PERCENT = 3.0  # Art. 210-19(a) Nota 4
CONTINUOUS_FACTOR = 1.25  # Art. 210-20(a) / 215-3
INSULATION_AREA_FACTOR = 1.8
REFERENCE_AMBIENT_C = 30.0

# NOM-001-SEDE-2012 Capitulo 10, Tabla 8 (simplificada)
# Resistance is copper at 75C, reactance is for conductors in steel conduit, both Ohm/km
TABLE_8_CONDUCTORS: Tuple[ConductorSpec, ...] = (
    ConductorSpec("14", 2.08, 10.1, 0.190, 20),
    ConductorSpec("12", 3.31, 6.33, 0.177, 25),
    ConductorSpec("10", 5.26, 3.99, 0.164, 35),
    ConductorSpec("8", 8.37, 2.52, 0.171, 50),
    ConductorSpec("6", 13.3, 1.61, 0.167, 65),
    ConductorSpec("4", 21.2, 1.02, 0.157, 85),
    ConductorSpec("2", 33.6, 0.640, 0.148, 115),
    ConductorSpec("1/0", 53.5, 0.407, 0.144, 150),
    ConductorSpec("2/0", 67.4, 0.322, 0.141, 175),
    ConductorSpec("3/0", 85.0, 0.256, 0.138, 200),
    ConductorSpec("4/0", 107, 0.203, 0.135, 230),
)

CONDUCTORS_BY_GAUGE: Dict[str, ConductorSpec] = {c.gauge: c for c in TABLE_8_CONDUCTORS}

# Tabla 310-15(b)(16) - Allowable Ampacities, ordered by conductor size
# Format: {SizeAWG: {TempRating: Amps}}
AMPACITY_TABLE_CU = {
    "14": {60: 15, 75: 20, 90: 25},
    "12": {60: 20, 75: 25, 90: 30},
    "10": {60: 30, 75: 35, 90: 40},
    "8":  {60: 40, 75: 50, 90: 55},
    "6":  {60: 55, 75: 65, 90: 75},
    "4":  {60: 70, 75: 85, 90: 95},
    "3":  {60: 85, 75: 100, 90: 110},
    "2":  {60: 95, 75: 115, 90: 130},
    "1":  {60: 110, 75: 130, 90: 150},
    "1/0": {60: 125, 75: 150, 90: 170},
    "2/0": {60: 145, 75: 175, 90: 195},
    "3/0": {60: 165, 75: 200, 90: 225},
    "4/0": {60: 195, 75: 230, 90: 260},
}

# Aluminum starts at 12 AWG
AMPACITY_TABLE_AL = {
    "12": {60: 15, 75: 20, 90: 25},
    "10": {60: 25, 75: 30, 90: 35},
    "8":  {60: 30, 75: 40, 90: 45},
    "6":  {60: 40, 75: 50, 90: 60},
    "4":  {60: 55, 75: 65, 90: 75},
    "3":  {60: 65, 75: 75, 90: 85},
    "2":  {60: 75, 75: 90, 90: 100},
    "1":  {60: 85, 75: 100, 90: 115},
    "1/0": {60: 100, 75: 120, 90: 135},
    "2/0": {60: 115, 75: 135, 90: 150},
    "3/0": {60: 130, 75: 155, 90: 175},
    "4/0": {60: 150, 75: 180, 90: 205},
}

AMPACITY_TABLES = {
    ConductorMaterial.COPPER: AMPACITY_TABLE_CU,
    ConductorMaterial.ALUMINUM: AMPACITY_TABLE_AL,
}

# Tabla 310-15(b)(2)(a) - Ambient Temperature Correction Factors (30C base)
# Format: {Insulation_Rating: ((Max_Ambient, Factor), ...)}, 0 above the last band
TEMP_CORRECTION_FACTORS = {
    60: ((25, 1.08), (30, 1.00), (35, 0.91), (40, 0.82), (45, 0.71), (50, 0.58), (55, 0.41)),
    75: ((25, 1.05), (30, 1.00), (35, 0.94), (40, 0.88), (45, 0.82), (50, 0.75), (55, 0.67),
         (60, 0.58), (70, 0.33)),
    90: ((25, 1.04), (30, 1.00), (35, 0.96), (40, 0.91), (45, 0.87), (50, 0.82), (55, 0.76),
         (60, 0.71), (70, 0.58), (80, 0.41)),
}

# Tabla 310-15(b)(3)(a) - Adjustment Factors for More Than Three Current-Carrying Conductors
# Format: (Max_Conductors, Factor), 0.35 above 40
GROUPING_FACTORS = (
    (3, 1.0),
    (6, 0.80),   # 4-6 conductors
    (9, 0.70),   # 7-9
    (20, 0.50),  # 10-20
    (30, 0.45),  # 21-30
    (40, 0.40),  # 31-40
)
GROUPING_FACTOR_ABOVE_40 = 0.35

# Tablas 430-248 (1 fase) y 430-250 (3 fases) - Full-Load Current, by (phases, voltage)
FLA_TABLE: Dict[Tuple[int, int], Dict[float, float]] = {
    (3, 220): {0.5: 2.0, 0.75: 2.8, 1: 3.6, 1.5: 5.2, 2: 6.8, 3: 9.6, 5: 15.2, 7.5: 22, 10: 28,
               15: 42, 20: 54, 25: 68, 30: 80, 40: 104, 50: 130, 60: 154, 75: 192, 100: 248},
    (3, 440): {0.5: 1.0, 0.75: 1.4, 1: 1.8, 1.5: 2.6, 2: 3.4, 3: 4.8, 5: 7.6, 7.5: 11, 10: 14,
               15: 21, 20: 27, 25: 34, 30: 40, 40: 52, 50: 65, 60: 77, 75: 96, 100: 124},
    (1, 127): {0.5: 9.8, 0.75: 13.8, 1: 16, 1.5: 20, 2: 24, 3: 34, 5: 56, 7.5: 80, 10: 100},
    (1, 220): {0.5: 4.9, 0.75: 6.9, 1: 8, 1.5: 10, 2: 12, 3: 17, 5: 28, 7.5: 40, 10: 50},
}

HP_OPTIONS = [0.5, 0.75, 1, 1.5, 2, 3, 5, 7.5, 10, 15, 20, 25, 30, 40, 50, 60, 75, 100]

# Art. 240-6 - Standard ampere ratings for fuses and inverse time breakers
STANDARD_RATINGS = [15, 20, 25, 30, 35, 40, 45, 50, 60, 70, 80, 90, 100, 110, 125, 150, 175, 200,
                    225, 250, 300, 350, 400, 450, 500, 600, 700, 800, 1000, 1200, 1600, 2000,
                    2500, 3000, 4000, 5000, 6000]

# Motor branch ITM ratings offered by the motor screen
MOTOR_BREAKER_RATINGS = [15, 20, 25, 30, 35, 40, 45, 50, 60, 70, 80, 90, 100, 110, 125, 150,
                         175, 200, 225, 250, 300, 350, 400, 450, 500, 600]

TRANSFORMER_BREAKER_RATINGS = [15, 20, 25, 30, 35, 40, 45, 50, 60, 70, 80, 90, 100, 110, 125, 150,
                               175, 200, 225, 250, 300, 350, 400, 450, 500, 600, 700, 800, 1000,
                               1200, 1600, 2000, 2500, 3000, 4000, 5000]

# Branch breakers available in a distribution panel
PANEL_BREAKER_RATINGS = [15, 20, 30, 40, 50, 60, 70, 80, 100, 110, 125, 150, 175, 200]

# Art. 450-3 multipliers: {(primary over 600V, secondary protection): (primary, secondary)}
TRANSFORMER_MULTIPLIERS = {
    (True, True): (3.00, 1.25),    # Tabla 450-3(a)
    (True, False): (1.25, 1.25),
    (False, True): (2.50, 1.25),   # Tabla 450-3(b)
    (False, False): (1.25, 1.25),
}

# Capitulo 10 Tabla 4 simplified to a 40% fill rule
# Format: (Max_Area_mm2 exclusive, Metric designator, Inch size)
CONDUIT_SIZES = (
    (78, "13", '1/2"'),
    (137, "19", '3/4"'),
    (222, "25", '1"'),
    (420, "32", '1 1/4"'),
    (534, "38", '1 1/2"'),
    (878, "51", '2"'),
    (1500, "78", '3"'),
)
LARGEST_CONDUIT = ("103", '4"')

CONDUIT_TYPES = ["PVC-40", "PVC-80", "EMT", "IMC", "RMC"]
INSULATION_TYPES = ["THHW-LS", "THHN", "THW", "XHHW-2"]


def get_temp_correction(temp_c: float, insulation_rating: int) -> float:
    if isinstance(insulation_rating, InsulationRating):
        insulation_rating = insulation_rating.value
    bands = TEMP_CORRECTION_FACTORS.get(insulation_rating, TEMP_CORRECTION_FACTORS[60])
    for max_t, factor in bands:
        if temp_c <= max_t:
            return factor
    return 0.0  # Too hot for this insulation

def get_grouping_factor(count: int) -> float:
    for limit, factor in GROUPING_FACTORS:
        if count <= limit:
            return factor
    return GROUPING_FACTOR_ABOVE_40

def lookup_base_ampacity(material: ConductorMaterial, gauge: str, insulation_rating: int) -> Optional[float]:
    if isinstance(insulation_rating, InsulationRating):
        insulation_rating = insulation_rating.value
    row = AMPACITY_TABLES[material].get(gauge)
    if row is None:
        return None
    return row.get(insulation_rating)

def lookup_fla(phases: int, voltage: int, horsepower: float) -> Optional[float]:
    return FLA_TABLE.get((phases, voltage), {}).get(horsepower)

def find_conductor_for_ampacity(min_ampacity: float) -> Tuple[ConductorSpec, bool]:
    """
    First conductor (smallest size) whose 75C ampacity covers the minimum.
    Returns (conductor, exceeds_table); the largest conductor when none does.
    """
    for conductor in TABLE_8_CONDUCTORS:
        if conductor.ampacity_75c >= min_ampacity:
            return conductor, False
    logger.debug("No conductor reaches %.2f A, using %s", min_ampacity, TABLE_8_CONDUCTORS[-1].gauge)
    return TABLE_8_CONDUCTORS[-1], True

def next_standard_rating(minimum: float, ratings: Sequence[int] = STANDARD_RATINGS) -> Tuple[int, bool]:
    """
    Smallest tabulated rating >= minimum.
    Returns (rating, exceeds_table); when nothing is large enough the largest rating is returned.
    """
    for rating in ratings:
        if rating >= minimum:
            return rating, False
    logger.debug("Minimum %.2f A exceeds the largest standard rating %s A", minimum, ratings[-1])
    return ratings[-1], True

def select_conduit_size(total_area_mm2: float) -> Tuple[str, str]:
    for max_area, designator, inches in CONDUIT_SIZES:
        if total_area_mm2 < max_area:
            return designator, inches
    return LARGEST_CONDUIT
