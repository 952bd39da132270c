"""Local view of the overlay topology around this node."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

MAX_NODES = 100

_WIDE_RULE = "═" * 38


@dataclass(frozen=True)
class NodeInfo:
    """Address of a node in the overlay: an IP and its TCP port."""

    ip: str
    tcp_port: int


@dataclass
class TopologyInfo:
    """Identity of this node and its external, safeguard and internal neighbours."""

    id_ip: str = ""
    id_tcp: int = 0
    ext_ip: str = ""
    ext_tcp: int = 0
    safe_ip: str = ""
    safe_tcp: int = 0
    internal: list[NodeInfo] = field(default_factory=list)

    def initialize(self, my_ip: str, my_tcp_port: int, num_nodes: int) -> None:
        """Reset the topology for a network holding ``num_nodes`` nodes, this one included.

        A node alone in its network is its own external neighbour; otherwise the
        external neighbour is left unset until a direct join picks one.
        """
        self.id_ip = my_ip
        self.id_tcp = my_tcp_port
        if num_nodes == 1:
            self.ext_ip = my_ip
            self.ext_tcp = my_tcp_port
        else:
            self.ext_ip = "N/A"
            self.ext_tcp = -1
        self.internal.clear()

    def external_is_self(self) -> bool:
        """Whether the external neighbour is this node itself."""
        return self.ext_ip == self.id_ip and self.ext_tcp == self.id_tcp

    def reset_external(self) -> None:
        """Make this node its own external neighbour."""
        self.ext_ip = self.id_ip
        self.ext_tcp = self.id_tcp

    def add_internal(self, ip: str, port: int) -> bool:
        """Append an internal neighbour; return False when the table is full."""
        if len(self.internal) >= MAX_NODES:
            return False
        self.internal.append(NodeInfo(ip, port))
        return True

    def remove_internal(self, ip: str, port: int) -> bool:
        """Remove the first internal neighbour at ``ip:port``; return whether one was found."""
        try:
            self.internal.remove(NodeInfo(ip, port))
        except ValueError:
            return False
        return True

    def describe(self) -> str:
        """Return the topology as a framed text block."""
        lines = [
            f"╔{_WIDE_RULE}╗",
            "║ Topologia atual do nó                ║",
            f"╠{_WIDE_RULE}╣",
            f"║ Vizinho externo: {self.ext_ip} {self.ext_tcp}",
        ]
        if not self.internal:
            lines.append("║ Vizinhos internos: Nenhum")
        else:
            lines.append("║ Vizinhos internos:")
            lines.extend(f"║   -> {node.ip} {node.tcp_port}" for node in self.internal)
        lines.append(f"╚{_WIDE_RULE}╝")
        return "\n".join(lines)

    def show(self) -> str:
        """Write the topology, preceded by a blank line, to standard output and return it."""
        text = "\n" + self.describe() + "\n"
        sys.stdout.write(text)
        sys.stdout.flush()
        return text