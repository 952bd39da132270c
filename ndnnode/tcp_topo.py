"""TCP exchanges between overlay neighbours: ENTRY, SAFE and LEAVE messages."""

from __future__ import annotations

import re
import socket

from ndnnode.topology import NodeInfo, TopologyInfo

MAX_MESSAGE = 255
CONNECT_TIMEOUT = 5.0

_INT_PREFIX = re.compile(r"[+-]?\d+")


class DirectJoinError(Exception):
    """A direct join to an external neighbour did not complete."""


def _parse_address(message: str, keyword: str) -> tuple[str, int] | None:
    """Read ``<keyword> <ip> <port>`` from ``message``; None if it does not match."""
    if not message.startswith(keyword):
        return None
    tokens = message[len(keyword):].split()
    if len(tokens) < 2:
        return None
    match = _INT_PREFIX.match(tokens[1])
    if match is None:
        return None
    return tokens[0], int(match.group())


def direct_join(
    ext_ip: str,
    ext_port: int,
    my_ip: str,
    my_tcp_port: int,
    topo: TopologyInfo,
) -> None:
    """Connect to ``ext_ip:ext_port`` as external neighbour and process its SAFE reply.

    Raises DirectJoinError when the connection fails or the reply is missing or malformed.
    """
    try:
        sock = socket.create_connection((ext_ip, ext_port), timeout=CONNECT_TIMEOUT)
    except OSError as exc:
        raise DirectJoinError(f"could not connect to {ext_ip}:{ext_port}: {exc}") from exc

    with sock:
        try:
            sock.sendall(f"ENTRY {my_ip} {my_tcp_port}\n".encode())
            sock.shutdown(socket.SHUT_WR)
            print(f">> Enviado ENTRY para {ext_ip}:{ext_port}")
            data = sock.recv(MAX_MESSAGE)
        except OSError as exc:
            raise DirectJoinError(f"exchange with {ext_ip}:{ext_port} failed: {exc}") from exc

    if not data:
        raise DirectJoinError(f"no reply from {ext_ip}:{ext_port}")

    reply = data.decode("utf-8", errors="replace")
    print(f">> Recebido: {reply}", end="")

    topo.ext_ip = ext_ip
    topo.ext_tcp = ext_port

    safe = _parse_address(reply, "SAFE")
    if safe is None:
        raise DirectJoinError(f"unexpected reply from {ext_ip}:{ext_port}: {reply!r}")

    if safe == (ext_ip, ext_port):
        topo.add_internal(ext_ip, ext_port)


def handle_message(message: str, topo: TopologyInfo) -> str | None:
    """Apply an incoming ENTRY or LEAVE message to ``topo``.

    Returns the reply to send back (a SAFE line for ENTRY), or None.
    """
    if message.startswith("ENTRY"):
        address = _parse_address(message, "ENTRY")
        if address is None:
            return None
        ip, port = address
        reply = f"SAFE {topo.ext_ip} {topo.ext_tcp}\n"
        print(f">> Enviado SAFE para {ip}:{port}")
        if topo.external_is_self():
            topo.ext_ip = ip
            topo.ext_tcp = port
        topo.add_internal(ip, port)
        return reply

    if message.startswith("LEAVE"):
        address = _parse_address(message, "LEAVE")
        if address is None:
            return None
        ip, port = address
        print(f">> Recebido LEAVE {ip}:{port}")
        if NodeInfo(ip, port) in topo.internal:
            print(f">> MEU - Vou remover o vizinho interno {ip}:{port}")
            topo.remove_internal(ip, port)
            print(f">> Vizinho interno {ip}:{port} removido.")
        else:
            print(">> NOT MY")
            print(f">> Removendo vizinho externo {topo.ext_ip}:{topo.ext_tcp}")
            topo.reset_external()
            print(f">> Fazendo djoin para novo vizinho externo {ip}:{port}")
            try:
                direct_join(ip, port, topo.id_ip, topo.id_tcp, topo)
            except DirectJoinError as exc:
                print(f">> {exc}")
    return None


def accept_entry(listener: socket.socket, topo: TopologyInfo) -> None:
    """Accept one connection on ``listener`` and handle the message it carries."""
    try:
        conn, _ = listener.accept()
    except OSError as exc:
        print(f"Erro no accept TCP: {exc}")
        return

    with conn:
        try:
            data = conn.recv(MAX_MESSAGE)
        except OSError as exc:
            print(f"Erro ao ler mensagem TCP: {exc}")
            return
        if not data:
            print("Erro ao ler mensagem TCP")
            return

        message = data.decode("utf-8", errors="replace")
        print(f">> Recebido: {message}", end="")

        reply = handle_message(message, topo)
        if reply is not None:
            try:
                conn.sendall(reply.encode())
                conn.shutdown(socket.SHUT_WR)
            except OSError as exc:
                print(f"Erro ao enviar resposta TCP: {exc}")


def send_leave_message(my_ip: str, my_port: int, dest_ip: str, dest_port: int) -> bool:
    """Send ``LEAVE my_ip my_port`` to ``dest_ip:dest_port``; return whether it was sent."""
    try:
        sock = socket.create_connection((dest_ip, dest_port), timeout=CONNECT_TIMEOUT)
    except OSError as exc:
        print(f"Connection failed: {exc}")
        return False

    with sock:
        print(f">> Enviando LEAVE para {dest_ip}:{dest_port}")
        try:
            sock.sendall(f"LEAVE {my_ip} {my_port}\n".encode())
            sock.shutdown(socket.SHUT_WR)
        except OSError as exc:
            print(f"Send failed: {exc}")
            return False
    return True