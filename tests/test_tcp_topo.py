import socket
import threading

import pytest

from ndnnode.tcp_topo import (
    DirectJoinError,
    accept_entry,
    direct_join,
    handle_message,
    send_leave_message,
)
from ndnnode.topology import NodeInfo, TopologyInfo

HOST = "127.0.0.1"


def _unused_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((HOST, 0))
        return sock.getsockname()[1]


def _recv_all(conn):
    conn.settimeout(5)
    chunks = []
    while True:
        chunk = conn.recv(1024)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks).decode()


def _serve_once(make_reply):
    listener = socket.create_server((HOST, 0))
    port = listener.getsockname()[1]
    received = []

    def serve():
        with listener:
            listener.settimeout(5)
            conn, _ = listener.accept()
            with conn:
                received.append(_recv_all(conn))
                conn.sendall(make_reply(port).encode())

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    return port, received, thread


def _alone(port=5000):
    topo = TopologyInfo()
    topo.initialize(HOST, port, 1)
    return topo


def test_entry_on_lonely_node_makes_newcomer_external():
    topo = _alone()
    reply = handle_message("ENTRY 10.0.0.2 6000\n", topo)
    assert reply == "SAFE 127.0.0.1 5000\n"
    assert (topo.ext_ip, topo.ext_tcp) == ("10.0.0.2", 6000)
    assert topo.internal == [NodeInfo("10.0.0.2", 6000)]


def test_entry_keeps_existing_external():
    topo = _alone()
    topo.ext_ip, topo.ext_tcp = "10.0.0.9", 7000
    reply = handle_message("ENTRY 10.0.0.2 6000\n", topo)
    assert reply == "SAFE 10.0.0.9 7000\n"
    assert (topo.ext_ip, topo.ext_tcp) == ("10.0.0.9", 7000)
    assert topo.internal == [NodeInfo("10.0.0.2", 6000)]


def test_malformed_entry_is_ignored():
    topo = _alone()
    assert handle_message("ENTRY 10.0.0.2\n", topo) is None
    assert topo.internal == []
    assert topo.external_is_self()


def test_unknown_message_is_ignored():
    topo = _alone()
    assert handle_message("HELLO there\n", topo) is None
    assert topo.internal == []


def test_leave_from_internal_neighbour_removes_it():
    topo = _alone()
    topo.ext_ip, topo.ext_tcp = "10.0.0.9", 7000
    topo.add_internal("10.0.0.2", 6000)
    topo.add_internal("10.0.0.3", 6001)
    assert handle_message("LEAVE 10.0.0.2 6000\n", topo) is None
    assert topo.internal == [NodeInfo("10.0.0.3", 6001)]
    assert (topo.ext_ip, topo.ext_tcp) == ("10.0.0.9", 7000)


def test_leave_from_external_with_unreachable_target_resets_external():
    topo = _alone()
    topo.ext_ip, topo.ext_tcp = "10.0.0.9", 7000
    handle_message(f"LEAVE {HOST} {_unused_port()}\n", topo)
    assert topo.external_is_self()


def test_leave_from_external_joins_new_neighbour():
    port, received, thread = _serve_once(lambda p: "SAFE 10.0.0.8 8000\n")
    topo = _alone()
    topo.ext_ip, topo.ext_tcp = "10.0.0.9", 7000
    handle_message(f"LEAVE {HOST} {port}\n", topo)
    thread.join(5)
    assert received == ["ENTRY 127.0.0.1 5000\n"]
    assert (topo.ext_ip, topo.ext_tcp) == (HOST, port)


def test_direct_join_sends_entry_and_records_external():
    port, received, thread = _serve_once(lambda p: "SAFE 10.0.0.8 8000\n")
    topo = _alone(6000)
    direct_join(HOST, port, "10.0.0.1", 6000, topo)
    thread.join(5)
    assert received == ["ENTRY 10.0.0.1 6000\n"]
    assert (topo.ext_ip, topo.ext_tcp) == (HOST, port)
    assert topo.internal == []


def test_direct_join_double_link_adds_internal():
    port, received, thread = _serve_once(lambda p: f"SAFE {HOST} {p}\n")
    topo = _alone(6000)
    direct_join(HOST, port, HOST, 6000, topo)
    thread.join(5)
    assert topo.internal == [NodeInfo(HOST, port)]


def test_direct_join_bad_reply_raises_after_setting_external():
    port, _, thread = _serve_once(lambda p: "NOPE\n")
    topo = _alone(6000)
    with pytest.raises(DirectJoinError):
        direct_join(HOST, port, HOST, 6000, topo)
    thread.join(5)
    assert (topo.ext_ip, topo.ext_tcp) == (HOST, port)


def test_direct_join_refused_raises():
    topo = _alone(6000)
    with pytest.raises(DirectJoinError):
        direct_join(HOST, _unused_port(), HOST, 6000, topo)
    assert topo.external_is_self()


def test_send_leave_message_delivers_line():
    with socket.create_server((HOST, 0)) as listener:
        listener.settimeout(5)
        port = listener.getsockname()[1]
        assert send_leave_message("10.0.0.1", 5000, HOST, port) is True
        conn, _ = listener.accept()
        with conn:
            assert _recv_all(conn) == "LEAVE 10.0.0.1 5000\n"


def test_send_leave_message_to_closed_port_fails():
    assert send_leave_message("10.0.0.1", 5000, HOST, _unused_port()) is False


def test_accept_entry_replies_safe_and_updates_topology():
    topo = _alone(5000)
    with socket.create_server((HOST, 0)) as listener:
        listener.settimeout(5)
        client = socket.create_connection(listener.getsockname(), timeout=5)
        with client:
            client.sendall(b"ENTRY 127.0.0.1 7000\n")
            client.shutdown(socket.SHUT_WR)
            accept_entry(listener, topo)
            reply = _recv_all(client)
    assert reply == "SAFE 127.0.0.1 5000\n"
    assert (topo.ext_ip, topo.ext_tcp) == (HOST, 7000)
    assert topo.internal == [NodeInfo(HOST, 7000)]