import pandas as pd

def convert_power_unit(val: float, unit: str, pf: float = 0.9) -> float:
    """
    Converts a load value to apparent power (VA) for the load schedule.
    Real power units are divided by the power factor.
    """
    unit = unit.strip().upper()
    if pf <= 0:
        pf = 1.0

    # 1. Apparent power
    if unit == "VA": return val
    if unit == "KVA": return val * 1000.0

    # 2. Real power
    if unit == "W": return val / pf
    if unit == "KW": return val * 1000.0 / pf
    if unit == "HP": return val * 746.0 / pf

    # Default
    return val

def convert_length_unit(val: float, unit: str) -> float:
    """Returns length in meters."""
    unit = unit.strip().lower()
    if unit in ["m", "mts", "metros", "metro"]: return val
    if unit in ["ft", "pies", "pie"]: return val * 0.3048
    if unit in ["yd", "yarda", "yardas"]: return val * 0.9144
    return val

def convert_flag(value) -> bool:
    # Rows added in the editor leave checkbox cells empty (NaN)
    return bool(value) if pd.notna(value) else False
