"""Hack orchestration: scripted attacks staged on the node network.

Each HackEvent walks a small state machine:

    PREPARE -> LAUNCH -> IN_FLIGHT -> IMPACT -> DONE

PREPARE lights the hacker up, LAUNCH fires a red packet at the target,
IN_FLIGHT waits for it to land, IMPACT lights the target and lingers.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from hackscene.model.node import Link
from hackscene.model.packet import Packet
from hackscene.randomness import pick
from hackscene.systems.network import HACKER_ID

if TYPE_CHECKING:
    from hackscene.model.node import Node
    from hackscene.randomness import RandomSource
    from hackscene.systems.network import NodeNetwork

logger = logging.getLogger(__name__)

COOLDOWN_RANGE = (5.0, 15.0)  # seconds between new events
PREPARE_TIME = 0.5
IMPACT_TIME = 1.5
ATTACK_COLOR = "#ff0066"
ATTACK_SPEED = 260.0


class HackState(Enum):
    """Stages of a hack event."""

    PREPARE = "prepare"
    LAUNCH = "launch"
    IN_FLIGHT = "inFlight"
    IMPACT = "impact"
    DONE = "done"


class HackEvent:
    """One staged attack from the hacker node to a target node."""

    def __init__(self, network: NodeNetwork, hacker: Node, target: Node) -> None:
        self.network = network
        self.hacker = hacker
        self.target = target
        self.state = HackState.PREPARE
        self.timer = 0.0  # seconds spent in the current state
        self.packet: Packet | None = None

    def __repr__(self) -> str:
        return f"HackEvent({self.hacker.id} -> {self.target.id}, {self.state.value})"

    @property
    def done(self) -> bool:
        return self.state is HackState.DONE

    def _enter(self, state: HackState) -> None:
        logger.debug("Hack on %s: %s -> %s", self.target.id, self.state.value, state.value)
        self.state = state
        self.timer = 0.0

    def update(self, dt: float) -> None:
        """Advance the event one frame through its phases.

        Args:
            dt: Seconds since the previous frame

        Side effects:
            - Keeps the hacker highlighted while preparing
            - Adds the attack packet to the network on the update after
              entering LAUNCH
            - Marks the target hacked when the packet arrives
            - Mutates self.state and self.timer
        """
        self.timer += dt

        if self.state == HackState.PREPARE:
            self.hacker.mark_hacked()
            if self.timer > PREPARE_TIME:
                self._enter(HackState.LAUNCH)
        elif self.state == HackState.LAUNCH:
            self.packet = Packet(
                link=Link(self.hacker, self.target), color=ATTACK_COLOR, speed=ATTACK_SPEED
            )
            self.network.add_packet(self.packet)
            self.state = HackState.IN_FLIGHT
        elif self.state == HackState.IN_FLIGHT:
            if self.packet is not None and self.packet.done:
                self.target.mark_hacked()
                self._enter(HackState.IMPACT)
        elif self.state == HackState.IMPACT:
            if self.timer > IMPACT_TIME:
                self._enter(HackState.DONE)


class HackOrchestrator:
    """Periodically stages a HackEvent and drives every active one."""

    def __init__(self, network: NodeNetwork, rng: RandomSource) -> None:
        self.network = network
        self.rng = rng
        self.events: list[HackEvent] = []
        self.cooldown = 0.0
        self.cooldown_range = COOLDOWN_RANGE
        self.completed = 0

    def trigger(self) -> None:
        """Launch a new event on the next update."""
        self.cooldown = 0.0

    def create_event(self) -> HackEvent | None:
        """Pick a target and build an event, or None if the network has no victim."""
        hacker = self.network.get(HACKER_ID)
        targets = self.network.leaves()
        if hacker is None or not targets:
            logger.debug("No hacker or no eligible target; skipping hack event")
            return None
        event = HackEvent(self.network, hacker, pick(self.rng, targets))
        logger.info("Hack event staged against %s", event.target.id)
        return event

    def update(self, dt: float) -> None:
        """Count down the cooldown, start an event when it expires, step events.

        A new cooldown is drawn even when no event could be created. Finished
        events are removed and counted in self.completed.
        """
        self.cooldown -= dt
        if self.cooldown <= 0:
            self.cooldown = self.rng.uniform(*self.cooldown_range)
            event = self.create_event()
            if event is not None:
                self.events.append(event)

        for event in self.events:
            event.update(dt)

        finished = [e for e in self.events if e.done]
        if finished:
            self.completed += len(finished)
            self.events = [e for e in self.events if not e.done]
