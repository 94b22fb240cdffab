"""Node network: fixed star topology with background traffic packets.

The router sits at the hub, seven devices hang off it, and the hacker node
connects to the router from the lower right. Hack events reuse this network
by injecting their own packets and lighting up nodes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hackscene.model.node import Link, Node, NodeKind
from hackscene.model.packet import Packet
from hackscene.randomness import pick
from hackscene.surface.canvas import scoped

if TYPE_CHECKING:
    from hackscene.randomness import RandomSource
    from hackscene.surface.assets import ImageAsset
    from hackscene.surface.canvas import Surface

logger = logging.getLogger(__name__)

HACKER_ID = "hacker"
ROUTER_ID = "router"

TRAFFIC_COLOR = "#00ff88"
TRAFFIC_INTERVAL = (0.3, 1.0)  # seconds between traffic bursts
TRAFFIC_SPEED = (120.0, 240.0)
DEFAULT_SPEED = 180.0
HIGHLIGHT_DECAY = 0.2  # per second

LINK_COLOR = "rgba(0,255,120,0.4)"
LINK_WIDTH = 2
NODE_COLOR = "#00ff88"
NODE_RADIUS = 10
PACKET_RADIUS = 4
SKULL_SIZE = 24

# (id, kind, dx, dy): offsets from the hub in units of the spread (sx, sy)
LEAF_LAYOUT: tuple[tuple[str, NodeKind, float, float], ...] = (
    ("server", NodeKind.SERVER, -0.4, -0.4),
    ("desktop1", NodeKind.DESKTOP, 0.0, -0.6),
    ("desktop2", NodeKind.DESKTOP, 0.4, -0.3),
    ("laptop1", NodeKind.LAPTOP, -0.5, 0.2),
    ("phone", NodeKind.PHONE, 0.3, 0.3),
    ("iot", NodeKind.IOT, -0.1, 0.5),
    ("cloud", NodeKind.CLOUD, 0.5, -0.7),
)


def layout_positions(width: float, height: float) -> dict[str, tuple[float, float]]:
    """Node positions as proportions of the surface, roughly matching the backdrop."""
    cx, cy = width * 0.45, height * 0.35
    sx, sy = width * 0.25, height * 0.25

    positions = {
        HACKER_ID: (width * 0.72, height * 0.65),
        ROUTER_ID: (cx, cy),
    }
    for node_id, _, dx, dy in LEAF_LAYOUT:
        positions[node_id] = (cx + sx * dx, cy + sy * dy)
    return positions


class NodeNetwork:
    """Owns nodes, static links and every in-flight packet."""

    def __init__(self, width: int, height: int, rng: RandomSource) -> None:
        self.rng = rng
        self.nodes: dict[str, Node] = {}
        self.links: list[Link] = []
        self.packets: list[Packet] = []
        self.traffic_timer = 0.0
        self.setup_layout(width, height)

    def setup_layout(self, width: int, height: int) -> None:
        """Build the topology on first call; afterwards move nodes in place.

        Keeping node identity means in-flight packets keep following the
        nodes they were sent between.
        """
        positions = layout_positions(width, height)
        if self.nodes:
            for node_id, (x, y) in positions.items():
                self.nodes[node_id].move_to(x, y)
            logger.debug("Network relaid out for %dx%d", width, height)
            return

        kinds = {HACKER_ID: NodeKind.HACKER, ROUTER_ID: NodeKind.ROUTER}
        kinds.update({node_id: kind for node_id, kind, _, _ in LEAF_LAYOUT})

        # draw order: hacker first, router among the leaves
        leaf_ids = [node_id for node_id, *_ in LEAF_LAYOUT]
        order = [HACKER_ID, *leaf_ids[:3], ROUTER_ID, *leaf_ids[3:]]
        for node_id in order:
            x, y = positions[node_id]
            self.nodes[node_id] = Node(id=node_id, x=x, y=y, kind=kinds[node_id])

        router = self.nodes[ROUTER_ID]
        self.links = [Link(router, self.nodes[node_id]) for node_id, *_ in LEAF_LAYOUT]
        self.links.append(Link(self.nodes[HACKER_ID], router))

    def get(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def leaves(self) -> list[Node]:
        """Every node except the hacker and the router."""
        return [n for n in self.nodes.values() if n.id not in (HACKER_ID, ROUTER_ID)]

    def add_packet(self, packet: Packet) -> None:
        self.packets.append(packet)

    def send_packet(
        self,
        from_id: str,
        to_id: str,
        color: str = TRAFFIC_COLOR,
        speed: float = DEFAULT_SPEED,
    ) -> Packet | None:
        """Send a packet between two nodes over an ephemeral link.

        Unknown ids are ignored: no packet is created and None is returned.
        """
        source = self.nodes.get(from_id)
        dest = self.nodes.get(to_id)
        if source is None or dest is None:
            logger.debug("Ignoring packet %s -> %s: unknown node", from_id, to_id)
            return None
        packet = Packet(link=Link(source, dest), color=color, speed=speed)
        self.add_packet(packet)
        return packet

    def update(self, dt: float, width: int, height: int) -> None:
        """Decay highlights, send background traffic, advance packets.

        Args:
            dt: Seconds since the previous frame
            width: Surface width (layout changes go through setup_layout)
            height: Surface height

        Side effects:
            - Lowers every node.highlight by 0.2 * dt, floored at 0
            - Sends a router/leaf packet when the traffic timer expires
            - Advances packets and drops the ones that have arrived
        """
        for node in self.nodes.values():
            node.decay(dt, HIGHLIGHT_DECAY)

        self.traffic_timer -= dt
        if self.traffic_timer <= 0:
            self.traffic_timer = self.rng.uniform(*TRAFFIC_INTERVAL)
            self._send_traffic()

        for packet in self.packets:
            packet.advance(dt)
        self.packets = [p for p in self.packets if not p.done]

    def _send_traffic(self) -> None:
        """Router <-> random device chatter in both directions."""
        others = self.leaves()
        if ROUTER_ID not in self.nodes or not others:
            return
        target = pick(self.rng, others)
        self.send_packet(ROUTER_ID, target.id, TRAFFIC_COLOR, self.rng.uniform(*TRAFFIC_SPEED))
        self.send_packet(target.id, ROUTER_ID, TRAFFIC_COLOR, self.rng.uniform(*TRAFFIC_SPEED))

    def draw(self, surface: Surface, skull: ImageAsset | None = None) -> None:
        """Draw links, then packets, then nodes.

        Once the skull image has loaded it is drawn over every highlighted
        node, with alpha equal to the highlight.
        """
        for link in self.links:
            surface.stroke_line(
                link.source.x, link.source.y, link.dest.x, link.dest.y, LINK_COLOR, LINK_WIDTH
            )

        for packet in self.packets:
            x, y = packet.position()
            surface.fill_circle(x, y, PACKET_RADIUS, packet.color)

        show_skull = skull is not None and skull.complete
        for node in self.nodes.values():
            surface.fill_circle(node.x, node.y, NODE_RADIUS, NODE_COLOR)
            if node.highlight > 0 and show_skull:
                with scoped(surface, alpha=min(1.0, max(0.0, node.highlight))):
                    surface.draw_image(
                        skull,
                        node.x - SKULL_SIZE / 2,
                        node.y - SKULL_SIZE / 2,
                        SKULL_SIZE,
                        SKULL_SIZE,
                    )
