"""
parameters.py — Randomised Operating Conditions per Fault Class

Draws the load torque factor and per-phase voltage perturbations that a
single simulation run is driven with. Each class has its own distribution:

    0 — Healthy            : T ~ N(1, 0.05),       deltas ~ N(0, 0.02)
    1 — Voltage unbalance  : T ~ N(1, 0.05),       one phase sagged by U(0.10, 0.35)
    2 — Torque overload    : T ~ U(1.3, 2.0),      deltas ~ N(0, 0.02)
    3 — Torque braking     : T ~ -U(1.2, 2.2),     deltas ~ N(0, 0.02)
"""

from .config import FAULT_CLASSES


class InvalidClassError(ValueError):
    """Raised for a class id outside the fault class table."""


def _small_deltas(rng, sd=0.02):
    return tuple(float(d) for d in rng.normal(0.0, sd, size=3))


def random_params_for_class(class_id, rng):
    """
    Draw one run's operating parameters for a fault class.

    Parameters
    ----------
    class_id : int       — fault class (0-3)
    rng      : Generator — numpy random generator, the only state consumed

    Returns
    -------
    torque_factor : float — load torque as a multiple of nominal
    delta_a       : float — phase A voltage offset [pu]
    delta_b       : float — phase B voltage offset [pu]
    delta_c       : float — phase C voltage offset [pu]
    """
    if class_id not in FAULT_CLASSES:
        raise InvalidClassError(f"Unknown classId {class_id!r}")

    if class_id == 0:
        torque_factor = 1.0 + 0.05 * rng.standard_normal()
        deltas        = _small_deltas(rng)

    elif class_id == 1:
        torque_factor = 1.0 + 0.05 * rng.standard_normal()
        mag           = rng.uniform(0.10, 0.35)
        phase_sel     = rng.integers(3)
        deltas        = tuple(-float(mag) if i == phase_sel else 0.0 for i in range(3))

    elif class_id == 2:
        torque_factor = rng.uniform(1.3, 2.0)
        deltas        = _small_deltas(rng)

    else:
        # Negative load drives the machine above synchronous speed
        torque_factor = -rng.uniform(1.2, 2.2)
        deltas        = _small_deltas(rng)

    return (float(torque_factor),) + deltas
