"""Exchanges with the UDP node registry: listing, registering and unregistering."""

from __future__ import annotations

import re
import socket

from ndnnode.topology import MAX_NODES, NodeInfo, TopologyInfo

MAX_LINE = 256

_INT_PREFIX = re.compile(r"[+-]?\d+")
_RULE = "═" * 34


class RegistryError(Exception):
    """The registry could not be reached or gave an unexpected reply."""


def _leading_int(token: str) -> int:
    match = _INT_PREFIX.match(token)
    return int(match.group()) if match else 0


def parse_nodes_list(reply: str) -> list[NodeInfo]:
    """Parse a ``NODESLIST`` reply into the nodes it lists.

    The first line carries the network identifier; each following non-blank line
    holds ``IP TCP``.
    """
    if not reply.startswith("NODESLIST"):
        raise RegistryError(f"unexpected registry reply: {reply!r}")
    _, _, body = reply.partition("\n")
    nodes = []
    for line in body.split("\n"):
        tokens = line.split()
        if not tokens:
            continue
        if len(nodes) >= MAX_NODES - 1:
            break
        port = _leading_int(tokens[1]) if len(tokens) > 1 else 0
        nodes.append(NodeInfo(tokens[0], port))
    return nodes


def format_nodes(net: int, nodes: list[NodeInfo]) -> str:
    """Return the framed list of the nodes of network ``net``."""
    lines = [
        f"╔{_RULE}╗",
        f"║ Lista de Nós da rede {net:03d}         ║",
        f"╠{_RULE}╣",
    ]
    lines.extend(
        f"║ Nó {number}: {node.ip} {node.tcp_port}"
        for number, node in enumerate(nodes, start=1)
    )
    lines.append(f"╚{_RULE}╝")
    return "\n".join(lines)


def _exchange(sock: socket.socket, reg_addr: tuple[str, int], message: str, echo: bool = True) -> str:
    try:
        sock.sendto(message.encode(), reg_addr)
        if echo:
            print(f">> Enviado: {message}", end="")
        data, _ = sock.recvfrom(MAX_LINE - 1)
    except OSError as exc:
        raise RegistryError(f"registry exchange failed: {exc}") from exc
    reply = data.decode("utf-8", errors="replace")
    if echo:
        print(f">> Recebido: {reply}")
    return reply


def join(
    sock: socket.socket,
    reg_addr: tuple[str, int],
    net: int,
    my_ip: str,
    my_tcp_port: int,
    topo: TopologyInfo,
) -> list[NodeInfo]:
    """Fetch the nodes of ``net``, set up ``topo`` and register this node.

    Returns the nodes that were already in the network.
    """
    reply = _exchange(sock, reg_addr, f"NODES {net:03d}\n")
    nodes = parse_nodes_list(reply)
    topo.initialize(my_ip, my_tcp_port, len(nodes) + 1)

    reply = _exchange(sock, reg_addr, f"REG {net:03d} {my_ip} {my_tcp_port}\n")
    if not reply.startswith("OKREG"):
        raise RegistryError(f"registration refused: {reply!r}")
    return nodes


def leave(
    sock: socket.socket,
    reg_addr: tuple[str, int],
    net: int,
    my_ip: str,
    my_tcp_port: int,
) -> None:
    """Unregister this node from ``net``."""
    reply = _exchange(sock, reg_addr, f"UNREG {net:03d} {my_ip} {my_tcp_port}\n")
    if not reply.startswith("OKUNREG"):
        raise RegistryError(f"unregistration refused: {reply!r}")


def show_nodes(sock: socket.socket, reg_addr: tuple[str, int], net: int) -> list[NodeInfo]:
    """Fetch, print and return the nodes registered in ``net``."""
    reply = _exchange(sock, reg_addr, f"NODES {net:03d}\n", echo=False)
    nodes = parse_nodes_list(reply)
    print(format_nodes(net, nodes))
    return nodes