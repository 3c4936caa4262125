# emodel.py
"""
ITU-T G.107 E-model: transmission rating factor R from the twenty
connection parameters in `params.EModelParams`.

    R = Ro - Is - Id - Ie_eff + A

Every quantity is a float64 scalar evaluated under np.errstate(all="ignore"),
so a formula taken outside its domain (log10 of a non-positive value, a
fractional power of a negative base, x/0) yields nan/inf, which then
propagates to R. Nothing here raises on numeric input.
"""

from __future__ import annotations
from typing import Dict
import numpy as np

from params import EModelParams

LOG10_2 = np.log10(2.0)


# -------- noise --------
def olr(SLR, RLR):
    return SLR + RLR

def nos(Ps, SLR, Ds, OLR):
    """Room noise at the send side referred to the 0 dBr point."""
    return Ps - SLR - Ds - 100.0 + 0.004*(Ps - OLR - Ds - 14.0)**2

def pre(Pr, LSTR):
    """Effective room noise at the receive side, raised by listener sidetone."""
    return Pr + 10.0*np.log10(1.0 + np.power(10.0, (10.0 - LSTR)/10.0))

def nor(RLR, Pre):
    return RLR - 121.0 + Pre + 0.008*(Pre - 35.0)**2

def nfo(Nfor, RLR):
    return Nfor + RLR

def total_noise(Nc, Nos, Nor, Nfo):
    """Power sum of the four noise sources (No, dBm0p)."""
    return 10.0*np.log10(np.power(10.0, Nc/10.0) + np.power(10.0, Nos/10.0)
                         + np.power(10.0, Nor/10.0) + np.power(10.0, Nfo/10.0))

def basic_snr(SLR, No):
    """Ro."""
    return 15.0 - 1.5*(SLR + No)


# -------- simultaneous impairments --------
def stmr_o(STMR, T, TELR):
    return -10.0*np.log10(np.power(10.0, -STMR/10.0) + np.exp(-T/4.0)*np.power(10.0, -TELR/10.0))

def _ist_term(STMRo, a, b, c):
    return np.power(1.0 + np.power((STMRo + a)/b, c), 1.0/c)

def ist(STMRo):
    """Sidetone impairment."""
    return (12.0*_ist_term(STMRo, -13.0, 6.0, 8.0)
            - 28.0*_ist_term(STMRo, 1.0, 19.4, 35.0)
            - 13.0*_ist_term(STMRo, -3.0, 33.0, 13.0)
            + 29.0)

def q_factor(Qdu):
    return 37.0 - 15.0*np.log10(Qdu)

def g_factor(Q):
    return 1.07 + 0.258*Q + 0.0602*Q*Q

def y_factor(Ro, G):
    return (Ro - 100.0)/15.0 + 46.0/8.4 - G/9.0

def z_factor(G):
    return 46.0/30.0 - G/40.0

def iq(Y, Z):
    """Quantizing distortion impairment."""
    return 15.0*np.log10(1.0 + np.power(10.0, Y) + np.power(10.0, Z))

def xorl(OLR, No, RLR):
    return OLR + 0.2*(64.0 + No - RLR)

def iolr(Xorl):
    """Impairment from a too-low overall loudness rating."""
    return 20.0*(np.power(1.0 + np.power(Xorl/8.0, 8.0), 1.0/8.0) - Xorl/8.0)

def simultaneous_impairment(Iolr, Ist, Iq):
    """Is."""
    return Iolr + Ist + Iq


# -------- delay impairments --------
def rle(WEPL, Tr):
    return 10.5*(WEPL + 7.0)*np.power(Tr + 1.0, -0.25)

def idle(Ro, Rle):
    """Listener echo impairment."""
    d = Ro - Rle
    return d/2.0 + np.sqrt(d*d/4.0 + 169.0)

def roe(No, RLR):
    return -1.5*(No - RLR)

def terv(TELR, T, STMR, Ist):
    """Talker echo rating, weighted by the echo delay."""
    TERV = TELR - 40.0*np.log10((1.0 + T/10.0)/(1.0 + T/150.0)) + 6.0*np.exp(-0.3*T*T)
    if STMR < 9.0:
        return TERV + Ist/2.0
    return TERV

def re_factor(TERV):
    return 80.0 + 2.5*(TERV - 14.0)

def idte(Roe, Re, T, STMR, Ist):
    """Talker echo impairment."""
    d = Roe - Re
    Idte = (d/2.0 + np.sqrt(d*d/4.0 + 100.0) - 1.0)*(1.0 - np.exp(-T))
    if STMR > 20.0:
        return np.sqrt(Idte*Idte + Ist*Ist)
    return Idte

def x_factor(Ta):
    return np.log10(Ta/100.0)/LOG10_2

def idd(Ta, X):
    """Absolute delay impairment; exactly 0 up to 100 ms."""
    if Ta <= 100.0:
        return np.float64(0.0)
    return 25.0*(np.power(1.0 + np.power(X, 6.0), 1.0/6.0)
                 - 3.0*np.power(1.0 + np.power(X/3.0, 6.0), 1.0/6.0) + 2.0)

def delay_impairment(Idte, Idle, Idd):
    """Id."""
    return Idte + Idle + Idd


# -------- equipment --------
def ie_eff(Ie, Ppl, BurstR, Bpl):
    """Packet-loss dependent effective equipment impairment."""
    return Ie + (95.0 - Ie)*(Ppl/(Ppl/BurstR + Bpl))

def r_factor(Ro, Is, Id, Ie_eff, A):
    return Ro - Is - Id - Ie_eff + A


# -------- stages --------
def noise_stage(p: Dict[str, np.float64]) -> Dict[str, np.float64]:
    OLR = olr(p["SLR"], p["RLR"])
    Nos = nos(p["Ps"], p["SLR"], p["Ds"], OLR)
    Pre = pre(p["Pr"], p["LSTR"])
    Nor = nor(p["RLR"], Pre)
    Nfo = nfo(p["Nfor"], p["RLR"])
    No = total_noise(p["Nc"], Nos, Nor, Nfo)
    Ro = basic_snr(p["SLR"], No)
    return {"OLR": OLR, "Nos": Nos, "Pre": Pre, "Nor": Nor, "Nfo": Nfo, "No": No, "Ro": Ro}

def simultaneous_stage(p: Dict[str, np.float64], OLR, No, Ro) -> Dict[str, np.float64]:
    STMRo = stmr_o(p["STMR"], p["T"], p["TELR"])
    Ist = ist(STMRo)
    Q = q_factor(p["Qdu"])
    G = g_factor(Q)
    Y = y_factor(Ro, G)
    Z = z_factor(G)
    Iq = iq(Y, Z)
    Xorl = xorl(OLR, No, p["RLR"])
    Iolr = iolr(Xorl)
    Is = simultaneous_impairment(Iolr, Ist, Iq)
    return {"STMRo": STMRo, "Ist": Ist, "Q": Q, "G": G, "Y": Y, "Z": Z, "Iq": Iq,
            "Xorl": Xorl, "Iolr": Iolr, "Is": Is}

def delay_stage(p: Dict[str, np.float64], No, Ro, Ist) -> Dict[str, np.float64]:
    Rle = rle(p["WEPL"], p["Tr"])
    Idle = idle(Ro, Rle)
    Roe = roe(No, p["RLR"])
    TERV = terv(p["TELR"], p["T"], p["STMR"], Ist)
    Re = re_factor(TERV)
    Idte = idte(Roe, Re, p["T"], p["STMR"], Ist)
    X = x_factor(p["Ta"])
    Idd = idd(p["Ta"], X)
    Id = delay_impairment(Idte, Idle, Idd)
    return {"Rle": Rle, "Idle": Idle, "Roe": Roe, "TERV": TERV, "Re": Re, "Idte": Idte,
            "X": X, "Idd": Idd, "Id": Id}

def equipment_stage(p: Dict[str, np.float64]) -> Dict[str, np.float64]:
    return {"Ie_eff": ie_eff(p["Ie"], p["Ppl"], p["BurstR"], p["Bpl"])}


def evaluate(params: EModelParams) -> Dict[str, float]:
    """
    Run the whole E-model for one parameter record.

    Returns every intermediate quantity plus "R", in evaluation order.
    """
    p = {k: np.float64(v) for k, v in params.to_dict().items()}
    with np.errstate(all="ignore"):
        noise = noise_stage(p)
        simult = simultaneous_stage(p, noise["OLR"], noise["No"], noise["Ro"])
        delay = delay_stage(p, noise["No"], noise["Ro"], simult["Ist"])
        equip = equipment_stage(p)
        R = r_factor(noise["Ro"], simult["Is"], delay["Id"], equip["Ie_eff"], p["A"])
    out = {**noise, **simult, **delay, **equip, "R": R}
    return {k: float(v) for k, v in out.items()}


def compute(params: EModelParams) -> float:
    return evaluate(params)["R"]


def mos_from_r(R: float) -> float:
    """G.107 Annex B mapping from R to an estimated conversational MOS."""
    if np.isnan(R):
        return float("nan")
    if R <= 0: return 1.0
    if R >= 100: return 4.5
    return float(1.0 + 0.035*R + 7e-6*R*(R-60)*(100-R))
