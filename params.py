# params.py
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Tuple


@dataclass(frozen=True)
class EModelParams:
    # ---------- Loudness & sidetone (dB) ----------
    SLR: float      # send loudness rating
    RLR: float      # receive loudness rating
    STMR: float     # sidetone masking rating
    LSTR: float     # listener sidetone rating
    Ds: float       # D-value of telephone, send side

    # ---------- Echo ----------
    TELR: float     # talker echo loudness rating (dB)
    WEPL: float     # weighted echo path loss (dB)

    # ---------- Delay (ms) ----------
    T: float        # mean one-way delay of the echo path
    Tr: float       # round-trip delay in a 4-wire loop
    Ta: float       # absolute end-to-end delay

    # ---------- Codec / equipment ----------
    Qdu: float      # quantization distortion units
    Ie: float       # equipment impairment factor
    Bpl: float      # packet-loss robustness factor
    Ppl: float      # random packet-loss probability (%)
    BurstR: float   # burst ratio (1 = random loss)

    # ---------- Noise ----------
    Nc: float       # circuit noise referred to 0 dBr point (dBm0p)
    Nfor: float     # noise floor at the receive side (dBmp)
    Ps: float       # room noise, send side (dB(A))
    Pr: float       # room noise, receive side (dB(A))

    # ---------- Expectation ----------
    A: float        # advantage factor

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "EModelParams":
        """
        Build a record from a mapping holding exactly the twenty field names.
        Raises ValueError for missing or unknown keys, TypeError for
        values that are not plain numbers. Integers too large for a float raise
        ValueError.
        """
        missing = [k for k in FIELDS if k not in data]
        if missing:
            raise ValueError(f"missing field(s): {', '.join(missing)}")
        unknown = sorted(k for k in data if k not in FIELDS)
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(unknown)}")
        values = {}
        for k in FIELDS:
            v = data[k]
            # bool is an int subclass; JSON true/false is not a level
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise TypeError(f"field {k!r} must be a number, got {type(v).__name__}")
            try:
                values[k] = float(v)
            except OverflowError as e:
                raise ValueError(f"field {k!r} is out of float range") from e
        return cls(**values)

    def to_dict(self) -> Dict[str, float]:
        return {k: getattr(self, k) for k in FIELDS}

    def replace(self, **changes: float) -> "EModelParams":
        return replace(self, **{k: float(v) for k, v in changes.items()})


FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(EModelParams))

# ITU-T G.107 Table 3 default values.
G107_DEFAULTS: Dict[str, float] = {
    "SLR": 8.0, "RLR": 2.0, "STMR": 15.0, "LSTR": 18.0, "Ds": 3.0,
    "TELR": 65.0, "WEPL": 110.0,
    "T": 0.0, "Tr": 0.0, "Ta": 0.0,
    "Qdu": 1.0, "Ie": 0.0, "Bpl": 4.3, "Ppl": 0.0, "BurstR": 1.0,
    "Nc": -70.0, "Nfor": -64.0, "Ps": 35.0, "Pr": 35.0,
    "A": 0.0,
}

# ITU-T G.107 Table 3 permitted ranges (inclusive). Only consulted by the
# optional range check in loader.py; the engine itself never looks at them.
PERMITTED_RANGES: Dict[str, Tuple[float, float]] = {
    "SLR": (0.0, 18.0), "RLR": (-5.0, 14.0), "STMR": (10.0, 20.0),
    "LSTR": (13.0, 23.0), "Ds": (-3.0, 3.0),
    "TELR": (5.0, 65.0), "WEPL": (5.0, 110.0),
    "T": (0.0, 500.0), "Tr": (0.0, 1000.0), "Ta": (0.0, 500.0),
    "Qdu": (1.0, 14.0), "Ie": (0.0, 40.0), "Bpl": (1.0, 40.0),
    "Ppl": (0.0, 20.0), "BurstR": (1.0, 8.0),
    "Nc": (-80.0, -40.0), "Nfor": (-80.0, -40.0),
    "Ps": (35.0, 85.0), "Pr": (35.0, 85.0),
    "A": (0.0, 20.0),
}


def g107_defaults() -> EModelParams:
    """The G.107 reference connection (R ~ 93.2)."""
    return EModelParams(**G107_DEFAULTS)
