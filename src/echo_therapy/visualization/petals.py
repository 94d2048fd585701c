"""
Petal Styles
============

Closed table of per-style petal policies.

Every FlowerStyle owns exactly one PetalPolicy: the petal path (SVG path
data in a local frame centred on the flower origin, petal pointing up) and
the behaviour flags that the engine applies.

    style      path                     placement     rotates  trembles  particles  pulses
    spiky      sharp quadratic spike    radiate       yes      no        no         no
    drooping   heavy cubic hang         hang (fixed)  NO       no        no         no
    trembling  thin short spike         radiate       yes      yes       no         no
    calm       balanced lotus           radiate       yes      no        no         yes
    particle   wide open round          radiate       yes      no        yes        no

The table is checked at import time against FlowerStyle, so adding a style
without a policy fails immediately.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from echo_therapy.models.flower import FlowerStyle


class Placement(str, Enum):
    """How petals are positioned around the core."""

    RADIATE = "radiate"  # offset and scale grow with intensity
    HANG = "hang"        # fixed offset and scale; petals hang down


# Hanging petals ignore intensity.
HANG_OFFSET = 20.0
HANG_SCALE = 0.6


@dataclass(frozen=True)
class PetalPolicy:
    """
    Shape and behaviour for one style.

    Attributes:
        path: SVG path data for a single petal
        placement: RADIATE or HANG
        rotates: Whole scene spins continuously
        trembles: Each petal jitters with its own phase
        emits_particles: Decorative particles around the flower
        pulses: Centre glyph radius oscillates
    """

    path: str
    placement: Placement = Placement.RADIATE
    rotates: bool = True
    trembles: bool = False
    emits_particles: bool = False
    pulses: bool = False

    def offset_and_scale(self, intensity: int) -> Tuple[float, float]:
        """
        Petal translation along its own axis and scale factor.

        Radiating petals move outward (negative y in the local frame) by
        10 + intensity and scale by 0.5 + 0.1 * intensity.
        """
        if self.placement == Placement.HANG:
            return HANG_OFFSET, HANG_SCALE
        return -(10.0 + intensity), 0.5 + intensity * 0.1


PETAL_POLICIES: Dict[FlowerStyle, PetalPolicy] = {
    FlowerStyle.SPIKY: PetalPolicy(
        path="M0,0 Q15,-60 0,-120 Q-15,-60 0,0",
    ),
    FlowerStyle.DROOPING: PetalPolicy(
        path="M0,0 C30,-30 50,40 60,60 C40,50 20,30 0,0",
        placement=Placement.HANG,
        rotates=False,
    ),
    FlowerStyle.TREMBLING: PetalPolicy(
        path="M0,0 Q5,-40 0,-80 Q-5,-40 0,0",
        trembles=True,
    ),
    FlowerStyle.CALM: PetalPolicy(
        path="M0,0 C20,-40 60,-40 80,0 C60,40 20,40 0,0",
        pulses=True,
    ),
    FlowerStyle.PARTICLE: PetalPolicy(
        path="M0,0 C30,-50 70,-50 100,0 C70,50 30,50 0,0",
        emits_particles=True,
    ),
}

_missing = set(FlowerStyle) - set(PETAL_POLICIES)
if _missing:
    raise RuntimeError(f"No petal policy for styles: {sorted(s.value for s in _missing)}")


def policy_for(style: FlowerStyle) -> PetalPolicy:
    """Look up the policy for a validated style."""
    return PETAL_POLICIES[FlowerStyle(style)]
