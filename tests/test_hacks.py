"""Tests for hack events and the orchestrator."""

import pytest

from hackscene.systems.hacks import HackEvent, HackOrchestrator, HackState
from hackscene.systems.network import HACKER_ID, ROUTER_ID, NodeNetwork
from tests.conftest import FixedRandom


def make_network() -> NodeNetwork:
    """A network with background traffic switched off."""
    network = NodeNetwork(1000, 1000, FixedRandom(0.5))
    network.traffic_timer = 1e9
    return network


def make_event(network: NodeNetwork, target_id: str = "desktop1") -> HackEvent:
    return HackEvent(network, network.nodes[HACKER_ID], network.nodes[target_id])


def run(event: HackEvent, network: NodeNetwork, seconds: float, dt: float = 1 / 60) -> None:
    """Step network then event, as the director does, for `seconds`."""
    for _ in range(round(seconds / dt)):
        network.update(dt, 1000, 1000)
        event.update(dt)


class TestHackEvent:
    """Tests for the HackEvent state machine."""

    def test_starts_in_prepare(self):
        event = make_event(make_network())

        assert event.state is HackState.PREPARE
        assert event.packet is None

    def test_prepare_lights_hacker_immediately(self):
        network = make_network()
        event = make_event(network)

        event.update(0.01)

        assert network.nodes[HACKER_ID].highlight == 1.0
        assert event.state is HackState.PREPARE

    def test_prepare_to_launch_after_half_second(self):
        network = make_network()
        event = make_event(network)

        for _ in range(3):
            event.update(0.2)

        assert event.state is HackState.LAUNCH
        assert event.timer == 0.0

    def test_prepare_holds_at_exactly_half_second(self):
        event = make_event(make_network())

        event.update(0.5)

        assert event.state is HackState.PREPARE

    def test_launch_fires_red_packet(self):
        network = make_network()
        event = make_event(network, "phone")
        event.state = HackState.LAUNCH

        event.update(0.0)

        assert event.state is HackState.IN_FLIGHT
        assert network.packets == [event.packet]
        assert event.packet.color == "#ff0066"
        assert event.packet.speed == 260
        assert event.packet.t == 0
        assert event.packet.link.source is network.nodes[HACKER_ID]
        assert event.packet.link.dest is network.nodes["phone"]

    def test_launch_does_not_alter_topology(self):
        network = make_network()
        event = make_event(network)
        event.state = HackState.LAUNCH

        event.update(0.0)

        assert len(network.links) == 8

    def test_in_flight_waits_for_packet(self):
        network = make_network()
        event = make_event(network, "iot")
        event.state = HackState.LAUNCH
        event.update(0.0)

        run(event, network, 3.0)

        assert event.state is HackState.IN_FLIGHT
        assert network.nodes["iot"].highlight == 0.0

    def test_impact_lights_target(self):
        network = make_network()
        event = make_event(network, "iot")
        event.state = HackState.LAUNCH
        event.update(0.0)

        network.update(4.0, 1000, 1000)
        event.update(4.0)

        assert event.state is HackState.IMPACT
        assert event.timer == 0.0
        assert network.nodes["iot"].highlight == 1.0
        assert network.packets == []

    def test_impact_to_done_after_linger(self):
        event = make_event(make_network())
        event.state = HackState.IMPACT

        event.update(1.5)
        assert event.state is HackState.IMPACT

        event.update(0.01)
        assert event.done

    def test_done_is_terminal(self):
        event = make_event(make_network())
        event.state = HackState.DONE

        event.update(10.0)

        assert event.state is HackState.DONE

    def test_full_cycle(self):
        network = make_network()
        event = make_event(network, "cloud")
        states = []

        for _ in range(60 * 8):
            network.update(1 / 60, 1000, 1000)
            event.update(1 / 60)
            if not states or states[-1] is not event.state:
                states.append(event.state)

        assert states == list(HackState)


class TestHackOrchestrator:
    """Tests for HackOrchestrator."""

    def test_first_update_creates_event(self):
        network = make_network()
        hacks = HackOrchestrator(network, FixedRandom(0.0))

        hacks.update(0.0)

        assert len(hacks.events) == 1
        assert hacks.cooldown == 5.0

    def test_cooldown_range(self):
        hacks = HackOrchestrator(make_network(), FixedRandom(0.5))

        hacks.update(0.0)

        assert hacks.cooldown == 10.0

    def test_target_excludes_hacker_and_router(self):
        network = make_network()
        hacks = HackOrchestrator(network, FixedRandom(0.999))

        event = hacks.create_event()

        assert event.hacker is network.nodes[HACKER_ID]
        assert event.target.id not in (HACKER_ID, ROUTER_ID)
        assert event.target is network.nodes["cloud"]

    @pytest.mark.parametrize("fraction", [0.0, 0.2, 0.4, 0.6, 0.8, 0.99])
    def test_targets_are_always_leaves(self, fraction):
        network = make_network()

        event = HackOrchestrator(network, FixedRandom(fraction)).create_event()

        assert event.target in network.leaves()

    def test_no_target_skips_event(self):
        network = make_network()
        for node_id in [n.id for n in network.leaves()]:
            del network.nodes[node_id]
        hacks = HackOrchestrator(network, FixedRandom(0.0))

        hacks.update(0.1)
        hacks.update(10.0)

        assert hacks.events == []
        assert hacks.create_event() is None

    def test_no_hacker_skips_event(self):
        network = make_network()
        del network.nodes[HACKER_ID]
        hacks = HackOrchestrator(network, FixedRandom(0.0))

        hacks.update(0.1)

        assert hacks.events == []

    def test_finished_events_removed_and_counted(self):
        network = make_network()
        hacks = HackOrchestrator(network, FixedRandom(0.0))
        hacks.update(0.0)
        event = hacks.events[0]
        event.state = HackState.IMPACT

        hacks.update(1.6)

        assert event.done
        assert event not in hacks.events
        assert hacks.completed == 1

    def test_trigger_starts_event_next_update(self):
        network = make_network()
        hacks = HackOrchestrator(network, FixedRandom(0.0))
        hacks.update(0.0)

        hacks.trigger()
        hacks.update(0.0)

        assert len(hacks.events) == 2

    def test_events_overlap(self):
        """A new event can start while an earlier one is still running."""
        network = make_network()
        hacks = HackOrchestrator(network, FixedRandom(0.0))

        for _ in range(60 * 6):
            network.update(1 / 60, 1000, 1000)
            hacks.update(1 / 60)

        assert hacks.completed == 1
        assert len(hacks.events) == 1
