"""
SGP4/SDP4 orbit propagation.

This module turns decoded two-line mean elements into an initialized
ElementRecord and propagates it to a time offset, producing position and
velocity in the TEME frame. Orbits with a period of 225 minutes or more use
the deep-space perturbations from deep_space.py.

Reference: Vallado, Crawford, Hujsak, Kelso, "Revisiting Spacetrack
Report #3", AIAA 2006-6753.
"""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from math import atan2, cos, fabs, floor, fmod, pi, sin, sqrt
from typing import Any, Dict, Tuple

import numpy as np

from .deep_space import ResonanceState, dpper, dscom, dsinit, dspace
from .exceptions import InitError, PropagationError
from .gravity import GravityModel
from .timeutils import DEG2RAD, JD_SGP4_EPOCH, MINUTES_PER_DAY, TWO_PI, gstime, julian_to_datetime

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

DEEP_SPACE_PERIOD_MIN = 225.0
XPDOTP = MINUTES_PER_DAY / TWO_PI  # rev/day per rad/min
KEPLER_TOLERANCE = 1.0e-12
KEPLER_MAX_ITERATIONS = 10

_TEMP4 = 1.5e-12
_X2O3 = 2.0 / 3.0

# Derived coefficients, zeroed before every initialization
_COEFFICIENTS = (
    # near earth
    "aycof", "con41", "cc1", "cc4", "cc5", "d2", "d3", "d4", "delmo", "eta",
    "argpdot", "omgcof", "sinmao", "t2cof", "t3cof", "t4cof", "t5cof",
    "x1mth2", "x7thm1", "mdot", "nodedot", "xlcof", "xmcof", "nodecf",
    "gsto", "no_unkozai", "a", "alta", "altp",
    # deep space
    "d2201", "d2211", "d3210", "d3222", "d4410", "d4422", "d5220", "d5232",
    "d5421", "d5433", "dedt", "del1", "del2", "del3", "didt", "dmdt", "dnodt",
    "domdt", "e3", "ee2", "peo", "pgho", "pho", "pinco", "plo", "se2", "se3",
    "sgh2", "sgh3", "sgh4", "sh2", "sh3", "si2", "si3", "sl2", "sl3", "sl4",
    "xfact", "xgh2", "xgh3", "xgh4", "xh2", "xh3", "xi2", "xi3", "xl2", "xl3",
    "xl4", "xlamo", "zmol", "zmos",
)


class OperationMode(Enum):
    """Initialization mode: improved (modern) or legacy AFSPC behaviour."""

    IMPROVED = "i"
    AFSPC = "a"

    @classmethod
    def from_string(cls, value: str) -> "OperationMode":
        """Create OperationMode from 'i'/'a' or 'improved'/'afspc'."""
        lookup = {"i": cls.IMPROVED, "improved": cls.IMPROVED,
                  "a": cls.AFSPC, "afspc": cls.AFSPC, "legacy": cls.AFSPC}
        try:
            return lookup[value.lower()]
        except KeyError:
            raise ValueError(
                f"Invalid operation mode: {value}. "
                f"Valid modes: {sorted(lookup)}"
            )


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class OrbitalElements:
    """
    Mean orbital elements as decoded from a two-line element set.

    Angles are in degrees, mean motion in revolutions per day. ``ndot`` and
    ``nddot`` are stored as they appear in the TLE (first derivative / 2,
    second derivative / 6); SGP4 does not use them.
    """

    satnum: int
    epoch_jd: float
    mean_motion: float
    eccentricity: float
    inclination: float
    raan: float
    arg_perigee: float
    mean_anomaly: float
    bstar: float = 0.0
    ndot: float = 0.0
    nddot: float = 0.0
    name: str = ""
    classification: str = "U"
    intl_designator: str = ""
    element_number: int = 0
    revolution_number: int = 0

    @property
    def epoch(self) -> datetime:
        """Epoch as a naive UTC datetime."""
        return julian_to_datetime(self.epoch_jd)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "satnum": self.satnum,
            "name": self.name,
            "epoch": self.epoch.isoformat(),
            "epoch_jd": self.epoch_jd,
            "mean_motion_rev_per_day": self.mean_motion,
            "eccentricity": self.eccentricity,
            "inclination_deg": self.inclination,
            "raan_deg": self.raan,
            "arg_perigee_deg": self.arg_perigee,
            "mean_anomaly_deg": self.mean_anomaly,
            "bstar": self.bstar,
        }


@dataclass(frozen=True, eq=False)
class StateVector:
    """TEME position (km) and velocity (km/s) at a time offset from epoch."""

    position: np.ndarray
    velocity: np.ndarray
    minutes_since_epoch: float = 0.0

    @property
    def velocity_km_per_min(self) -> np.ndarray:
        return self.velocity * 60.0

    @property
    def radius_km(self) -> float:
        return float(np.linalg.norm(self.position))


class ElementRecord:
    """
    An initialized SGP4 element record.

    Holds the raw elements in radians and radians per minute, the gravity
    constants, and every derived coefficient. Deep-space records also own a
    ResonanceState that ``propagate`` updates in place, so one record must
    not be propagated from two call sites at once. Use ``copy()`` or
    ``propagate_stateless`` to get an independent propagation.
    """

    def __init__(self, elements: OrbitalElements, gravity_model: GravityModel,
                 mode: OperationMode) -> None:
        self.elements = elements
        self.gravity_model = gravity_model
        self.mode = mode

        const = gravity_model.constants
        self.tumin = const.tumin
        self.mu = const.mu
        self.radius_earth_km = const.radius_earth_km
        self.xke = const.xke
        self.j2 = const.j2
        self.j3 = const.j3
        self.j4 = const.j4
        self.j3oj2 = const.j3oj2

        self.satnum = elements.satnum
        self.epoch_jd = elements.epoch_jd
        self.bstar = elements.bstar
        self.ecco = elements.eccentricity
        self.inclo = elements.inclination * DEG2RAD
        self.nodeo = elements.raan * DEG2RAD
        self.argpo = elements.arg_perigee * DEG2RAD
        self.mo = elements.mean_anomaly * DEG2RAD
        self.no_kozai = elements.mean_motion / XPDOTP
        self.ndot = elements.ndot / (XPDOTP * MINUTES_PER_DAY)
        self.nddot = elements.nddot / (XPDOTP * MINUTES_PER_DAY * MINUTES_PER_DAY)

        for name in _COEFFICIENTS:
            setattr(self, name, 0.0)
        self.method = "n"
        self.isimp = 0
        self.irez = 0
        self.resonance = ResonanceState()

    @property
    def is_deep_space(self) -> bool:
        return self.method == "d"

    @property
    def afspc_mode(self) -> bool:
        return self.mode is OperationMode.AFSPC

    @property
    def period_minutes(self) -> float:
        return TWO_PI / self.no_unkozai

    @property
    def revolutions_per_day(self) -> float:
        return self.no_unkozai * XPDOTP

    def copy(self) -> "ElementRecord":
        """Return a copy with its own resonance state."""
        clone = copy.copy(self)
        clone.resonance = ResonanceState(
            self.resonance.atime, self.resonance.xli, self.resonance.xni
        )
        return clone

    def __repr__(self) -> str:
        kind = "deep-space" if self.is_deep_space else "near-earth"
        return (f"ElementRecord(satnum={self.satnum}, epoch_jd={self.epoch_jd:.8f}, "
                f"{kind}, model={self.gravity_model.value}, mode={self.mode.value})")


# =============================================================================
# INITIALIZATION
# =============================================================================


def _initl(rec: ElementRecord, epoch: float) -> Tuple[float, ...]:
    """Un-Kozai the mean motion and compute the common epoch quantities."""
    eccsq = rec.ecco * rec.ecco
    omeosq = 1.0 - eccsq
    rteosq = sqrt(omeosq)
    cosio = cos(rec.inclo)
    cosio2 = cosio * cosio

    ak = pow(rec.xke / rec.no_kozai, _X2O3)
    d1 = 0.75 * rec.j2 * (3.0 * cosio2 - 1.0) / (rteosq * omeosq)
    del_ = d1 / (ak * ak)
    adel = ak * (1.0 - del_ * del_ - del_ * (1.0 / 3.0 + 134.0 * del_ * del_ / 81.0))
    del_ = d1 / (adel * adel)
    rec.no_unkozai = rec.no_kozai / (1.0 + del_)

    ao = pow(rec.xke / rec.no_unkozai, _X2O3)
    sinio = sin(rec.inclo)
    po = ao * omeosq
    con42 = 1.0 - 5.0 * cosio2
    rec.con41 = -con42 - cosio2 - cosio2
    posq = po * po
    rp = ao * (1.0 - rec.ecco)

    if rec.afspc_mode:
        # legacy sidereal time at epoch
        ts70 = epoch - 7305.0
        ds70 = floor(ts70 + 1.0e-8)
        tfrac = ts70 - ds70
        c1 = 1.72027916940703639e-2
        thgr70 = 1.7321343856509374
        fk5r = 5.07551419432269442e-15
        c1p2p = c1 + TWO_PI
        gsto = fmod(thgr70 + c1 * ds70 + c1p2p * tfrac + ts70 * ts70 * fk5r, TWO_PI)
        if gsto < 0.0:
            gsto += TWO_PI
        rec.gsto = gsto
    else:
        rec.gsto = gstime(epoch + JD_SGP4_EPOCH)

    return ao, con42, cosio, cosio2, eccsq, omeosq, posq, rp, rteosq, sinio


def initialize(elements: OrbitalElements,
               gravity_model: GravityModel = GravityModel.WGS84,
               mode: OperationMode = OperationMode.IMPROVED) -> ElementRecord:
    """
    Initialize an element record for propagation.

    Args:
        elements: Decoded mean elements
        gravity_model: Gravity constants to use
        mode: Improved or legacy AFSPC initialization

    Returns:
        Initialized ElementRecord

    Raises:
        InitError: If the elements are malformed or the orbit is invalid
    """
    if not 0.0 <= elements.eccentricity < 1.0:
        raise InitError(
            f"Satellite {elements.satnum}: eccentricity {elements.eccentricity} "
            "not within range 0.0 <= e < 1.0"
        )
    if elements.mean_motion <= 0.0:
        raise InitError(
            f"Satellite {elements.satnum}: mean motion {elements.mean_motion} "
            "must be positive"
        )

    rec = ElementRecord(elements, gravity_model, mode)
    epoch = rec.epoch_jd - JD_SGP4_EPOCH

    ss = 78.0 / rec.radius_earth_km + 1.0
    qzms2ttemp = (120.0 - 78.0) / rec.radius_earth_km
    qzms2t = qzms2ttemp * qzms2ttemp * qzms2ttemp * qzms2ttemp

    (ao, con42, cosio, cosio2, eccsq, omeosq, posq,
     rp, rteosq, sinio) = _initl(rec, epoch)

    if ao <= 0.0:
        raise InitError(f"Satellite {rec.satnum}: semi-major axis {ao} is not positive")
    if rp < 1.0:
        raise InitError(
            f"Satellite {rec.satnum}: perigee {(rp - 1.0) * rec.radius_earth_km:.1f} km "
            "is below the earth surface"
        )

    rec.a = pow(rec.no_unkozai * rec.tumin, -_X2O3)
    rec.alta = rec.a * (1.0 + rec.ecco) - 1.0
    rec.altp = rec.a * (1.0 - rec.ecco) - 1.0

    rec.isimp = 0
    if rp < 220.0 / rec.radius_earth_km + 1.0:
        rec.isimp = 1
    sfour = ss
    qzms24 = qzms2t
    perige = (rp - 1.0) * rec.radius_earth_km

    # perigees below 156 km alter s and qoms2t
    if perige < 156.0:
        sfour = perige - 78.0
        if perige < 98.0:
            sfour = 20.0
        qzms24temp = (120.0 - sfour) / rec.radius_earth_km
        qzms24 = qzms24temp * qzms24temp * qzms24temp * qzms24temp
        sfour = sfour / rec.radius_earth_km + 1.0

    pinvsq = 1.0 / posq
    tsi = 1.0 / (ao - sfour)
    rec.eta = ao * rec.ecco * tsi
    etasq = rec.eta * rec.eta
    eeta = rec.ecco * rec.eta
    psisq = fabs(1.0 - etasq)
    coef = qzms24 * pow(tsi, 4.0)
    coef1 = coef / pow(psisq, 3.5)
    cc2 = coef1 * rec.no_unkozai * (
        ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
        + 0.375 * rec.j2 * tsi / psisq * rec.con41 * (8.0 + 3.0 * etasq * (8.0 + etasq)))
    rec.cc1 = rec.bstar * cc2
    cc3 = 0.0
    if rec.ecco > 1.0e-4:
        cc3 = -2.0 * coef * tsi * rec.j3oj2 * rec.no_unkozai * sinio / rec.ecco
    rec.x1mth2 = 1.0 - cosio2
    rec.cc4 = 2.0 * rec.no_unkozai * coef1 * ao * omeosq * (
        rec.eta * (2.0 + 0.5 * etasq) + rec.ecco * (0.5 + 2.0 * etasq)
        - rec.j2 * tsi / (ao * psisq) * (
            -3.0 * rec.con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
            + 0.75 * rec.x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * cos(2.0 * rec.argpo)))
    rec.cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)
    cosio4 = cosio2 * cosio2
    temp1 = 1.5 * rec.j2 * pinvsq * rec.no_unkozai
    temp2 = 0.5 * temp1 * rec.j2 * pinvsq
    temp3 = -0.46875 * rec.j4 * pinvsq * pinvsq * rec.no_unkozai
    rec.mdot = (rec.no_unkozai + 0.5 * temp1 * rteosq * rec.con41
                + 0.0625 * temp2 * rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4))
    rec.argpdot = (-0.5 * temp1 * con42
                   + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
                   + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4))
    xhdot1 = -temp1 * cosio
    rec.nodedot = xhdot1 + (0.5 * temp2 * (4.0 - 19.0 * cosio2)
                            + 2.0 * temp3 * (3.0 - 7.0 * cosio2)) * cosio
    xpidot = rec.argpdot + rec.nodedot
    rec.omgcof = rec.bstar * cc3 * cos(rec.argpo)
    rec.xmcof = 0.0
    if rec.ecco > 1.0e-4:
        rec.xmcof = -_X2O3 * coef * rec.bstar / eeta
    rec.nodecf = 3.5 * omeosq * xhdot1 * rec.cc1
    rec.t2cof = 1.5 * rec.cc1
    # avoid divide by zero at 180 deg inclination
    if fabs(cosio + 1.0) > 1.5e-12:
        rec.xlcof = -0.25 * rec.j3oj2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
    else:
        rec.xlcof = -0.25 * rec.j3oj2 * sinio * (3.0 + 5.0 * cosio) / _TEMP4
    rec.aycof = -0.5 * rec.j3oj2 * sinio
    delmotemp = 1.0 + rec.eta * cos(rec.mo)
    rec.delmo = delmotemp * delmotemp * delmotemp
    rec.sinmao = sin(rec.mo)
    rec.x7thm1 = 7.0 * cosio2 - 1.0

    if TWO_PI / rec.no_unkozai >= DEEP_SPACE_PERIOD_MIN:
        rec.method = "d"
        rec.isimp = 1
        tc = 0.0
        inclm = rec.inclo

        terms = dscom(rec, epoch, rec.ecco, rec.argpo, tc, rec.inclo, rec.nodeo,
                      rec.no_unkozai)
        rec.ecco, rec.inclo, rec.nodeo, rec.argpo, rec.mo = dpper(
            rec, 0.0, True, rec.ecco, rec.inclo, rec.nodeo, rec.argpo, rec.mo,
            rec.afspc_mode,
        )
        dsinit(rec, terms, 0.0, tc, xpidot, eccsq, terms.em, 0.0, inclm, 0.0,
               terms.nm, 0.0)
        logger.debug(
            f"Satellite {rec.satnum}: deep-space orbit, period "
            f"{rec.period_minutes:.1f} min, resonance class {rec.irez}"
        )

    if rec.isimp != 1:
        cc1sq = rec.cc1 * rec.cc1
        rec.d2 = 4.0 * ao * tsi * cc1sq
        temp = rec.d2 * tsi * rec.cc1 / 3.0
        rec.d3 = (17.0 * ao + sfour) * temp
        rec.d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * rec.cc1
        rec.t3cof = rec.d2 + 2.0 * cc1sq
        rec.t4cof = 0.25 * (3.0 * rec.d3 + rec.cc1 * (12.0 * rec.d2 + 10.0 * cc1sq))
        rec.t5cof = 0.2 * (3.0 * rec.d4 + 12.0 * rec.cc1 * rec.d3
                           + 6.0 * rec.d2 * rec.d2 + 15.0 * cc1sq * (2.0 * rec.d2 + cc1sq))

    try:
        _sgp4(rec, 0.0)
    except PropagationError as e:
        raise InitError(f"Satellite {rec.satnum}: epoch propagation failed: {e}") from e

    logger.debug(f"Initialized {rec!r}")
    return rec


# =============================================================================
# PROPAGATION
# =============================================================================


def _sgp4(rec: ElementRecord, tsince: float) -> Tuple[Tuple[float, float, float],
                                                      Tuple[float, float, float]]:
    """Core SGP4 step; raises PropagationError."""
    vkmpersec = rec.radius_earth_km * rec.xke / 60.0
    t = tsince

    # secular gravity and atmospheric drag
    xmdf = rec.mo + rec.mdot * t
    argpdf = rec.argpo + rec.argpdot * t
    nodedf = rec.nodeo + rec.nodedot * t
    argpm = argpdf
    mm = xmdf
    t2 = t * t
    nodem = nodedf + rec.nodecf * t2
    tempa = 1.0 - rec.cc1 * t
    tempe = rec.bstar * rec.cc4 * t
    templ = rec.t2cof * t2

    if rec.isimp != 1:
        delomg = rec.omgcof * t
        delmtemp = 1.0 + rec.eta * cos(xmdf)
        delm = rec.xmcof * (delmtemp * delmtemp * delmtemp - rec.delmo)
        temp = delomg + delm
        mm = xmdf + temp
        argpm = argpdf - temp
        t3 = t2 * t
        t4 = t3 * t
        tempa = tempa - rec.d2 * t2 - rec.d3 * t3 - rec.d4 * t4
        tempe = tempe + rec.bstar * rec.cc5 * (sin(mm) - rec.sinmao)
        templ = templ + rec.t3cof * t3 + t4 * (rec.t4cof + t * rec.t5cof)

    nm = rec.no_unkozai
    em = rec.ecco
    inclm = rec.inclo
    if rec.method == "d":
        em, argpm, inclm, mm, nodem, nm = dspace(
            rec, t, t, em, argpm, inclm, mm, nodem, nm
        )

    if nm <= 0.0:
        raise PropagationError(f"mean motion {nm:f} is less than zero", 2, tsince)

    am = pow(rec.xke / nm, _X2O3) * tempa * tempa
    nm = rec.xke / pow(am, 1.5)
    em = em - tempe

    if em >= 1.0 or em < -0.001:
        raise PropagationError(
            f"mean eccentricity {em:f} not within range 0.0 <= e < 1.0", 1, tsince
        )
    if em < 1.0e-6:
        em = 1.0e-6
    mm = mm + rec.no_unkozai * templ
    xlm = mm + argpm + nodem

    nodem = fmod(nodem, TWO_PI)
    argpm = fmod(argpm, TWO_PI)
    xlm = fmod(xlm, TWO_PI)
    mm = fmod(xlm - argpm - nodem, TWO_PI)

    sinim = sin(inclm)
    cosim = cos(inclm)

    # lunar-solar periodics
    ep = em
    xincp = inclm
    argpp = argpm
    nodep = nodem
    mp = mm
    sinip = sinim
    cosip = cosim
    aycof = rec.aycof
    xlcof = rec.xlcof
    con41 = rec.con41
    x1mth2 = rec.x1mth2
    x7thm1 = rec.x7thm1
    if rec.method == "d":
        ep, xincp, nodep, argpp, mp = dpper(
            rec, t, False, ep, xincp, nodep, argpp, mp, rec.afspc_mode
        )
        if xincp < 0.0:
            xincp = -xincp
            nodep = nodep + pi
            argpp = argpp - pi
        if ep < 0.0 or ep > 1.0:
            raise PropagationError(
                f"perturbed eccentricity {ep:f} not within range 0.0 <= e <= 1.0",
                3, tsince,
            )

        # long period periodics use the perturbed inclination
        sinip = sin(xincp)
        cosip = cos(xincp)
        aycof = -0.5 * rec.j3oj2 * sinip
        if fabs(cosip + 1.0) > 1.5e-12:
            xlcof = -0.25 * rec.j3oj2 * sinip * (3.0 + 5.0 * cosip) / (1.0 + cosip)
        else:
            xlcof = -0.25 * rec.j3oj2 * sinip * (3.0 + 5.0 * cosip) / _TEMP4

    axnl = ep * cos(argpp)
    temp = 1.0 / (am * (1.0 - ep * ep))
    aynl = ep * sin(argpp) + temp * aycof
    xl = mp + argpp + nodep + temp * xlcof * axnl

    # Kepler's equation
    u = fmod(xl - nodep, TWO_PI)
    eo1 = u
    tem5 = 9999.9
    ktr = 1
    sineo1 = coseo1 = 0.0
    while fabs(tem5) >= KEPLER_TOLERANCE and ktr <= KEPLER_MAX_ITERATIONS:
        sineo1 = sin(eo1)
        coseo1 = cos(eo1)
        tem5 = 1.0 - coseo1 * axnl - sineo1 * aynl
        tem5 = (u - aynl * coseo1 + axnl * sineo1 - eo1) / tem5
        if fabs(tem5) >= 0.95:
            tem5 = 0.95 if tem5 > 0.0 else -0.95
        eo1 = eo1 + tem5
        ktr += 1

    # short period preliminary quantities
    ecose = axnl * coseo1 + aynl * sineo1
    esine = axnl * sineo1 - aynl * coseo1
    el2 = axnl * axnl + aynl * aynl
    pl = am * (1.0 - el2)
    if pl < 0.0:
        raise PropagationError(f"semi-latus rectum {pl:f} is less than zero", 4, tsince)

    rl = am * (1.0 - ecose)
    rdotl = sqrt(am) * esine / rl
    rvdotl = sqrt(pl) / rl
    betal = sqrt(1.0 - el2)
    temp = esine / (1.0 + betal)
    sinu = am / rl * (sineo1 - aynl - axnl * temp)
    cosu = am / rl * (coseo1 - axnl + aynl * temp)
    su = atan2(sinu, cosu)
    sin2u = (cosu + cosu) * sinu
    cos2u = 1.0 - 2.0 * sinu * sinu
    temp = 1.0 / pl
    temp1 = 0.5 * rec.j2 * temp
    temp2 = temp1 * temp

    if rec.method == "d":
        cosisq = cosip * cosip
        con41 = 3.0 * cosisq - 1.0
        x1mth2 = 1.0 - cosisq
        x7thm1 = 7.0 * cosisq - 1.0

    # short period periodics
    mrt = rl * (1.0 - 1.5 * temp2 * betal * con41) + 0.5 * temp1 * x1mth2 * cos2u
    su = su - 0.25 * temp2 * x7thm1 * sin2u
    xnode = nodep + 1.5 * temp2 * cosip * sin2u
    xinc = xincp + 1.5 * temp2 * cosip * sinip * cos2u
    mvt = rdotl - nm * temp1 * x1mth2 * sin2u / rec.xke
    rvdot = rvdotl + nm * temp1 * (x1mth2 * cos2u + 1.5 * con41) / rec.xke

    # orientation vectors
    sinsu = sin(su)
    cossu = cos(su)
    snod = sin(xnode)
    cnod = cos(xnode)
    sini = sin(xinc)
    cosi = cos(xinc)
    xmx = -snod * cosi
    xmy = cnod * cosi
    ux = xmx * sinsu + cnod * cossu
    uy = xmy * sinsu + snod * cossu
    uz = sini * sinsu
    vx = xmx * cossu - cnod * sinsu
    vy = xmy * cossu - snod * sinsu
    vz = sini * cossu

    if mrt < 1.0:
        raise PropagationError(
            f"mrt {mrt:f} is less than 1.0 indicating the satellite has decayed",
            6, tsince,
        )

    mr = mrt * rec.radius_earth_km
    r = (mr * ux, mr * uy, mr * uz)
    v = ((mvt * ux + rvdot * vx) * vkmpersec,
         (mvt * uy + rvdot * vy) * vkmpersec,
         (mvt * uz + rvdot * vz) * vkmpersec)
    return r, v


def propagate(record: ElementRecord, minutes_since_epoch: float) -> StateVector:
    """
    Propagate an element record.

    Deep-space records advance their resonance integrator as a side effect;
    calls moving monotonically away from epoch are the cheapest.

    Args:
        record: Initialized element record
        minutes_since_epoch: Time offset from the element epoch in minutes

    Returns:
        StateVector in the TEME frame

    Raises:
        PropagationError: If the orbit has decayed or become invalid
    """
    r, v = _sgp4(record, minutes_since_epoch)
    return StateVector(np.array(r), np.array(v), minutes_since_epoch)


def propagate_stateless(record: ElementRecord, minutes_since_epoch: float) -> StateVector:
    """
    Propagate without touching the record's integrator state.

    The resonance integration restarts from epoch on a private copy, so the
    call is reentrant at the cost of integrating the whole interval.
    """
    clone = record.copy()
    clone.resonance.reset(record.xlamo, record.no_unkozai)
    return propagate(clone, minutes_since_epoch)


def minutes_since_epoch(record: ElementRecord, jd: float) -> float:
    """Minutes between the record epoch and a Julian date."""
    return (jd - record.epoch_jd) * MINUTES_PER_DAY


def propagate_to_julian(record: ElementRecord, jd: float) -> StateVector:
    """Propagate a record to a Julian date."""
    return propagate(record, minutes_since_epoch(record, jd))
