# ndnnode

Building blocks for a node of a small overlay network. A node registers with
a UDP registry server under a three-digit network identifier, connects to
other nodes over TCP, and keeps track of its external neighbour and its
internal neighbours.

## Installation

    pip install .

## Modules

### `ndnnode.topology`

- `NodeInfo(ip, tcp_port)` – an immutable node address.
- `TopologyInfo` – this node's identity (`id_ip`, `id_tcp`), its external
  neighbour (`ext_ip`, `ext_tcp`), a safeguard address (`safe_ip`,
  `safe_tcp`) and the list of internal neighbours (`internal`).
  - `initialize(my_ip, my_tcp_port, num_nodes)` – sets the identity and
    clears the internal neighbours. With `num_nodes == 1` the node is its own
    external neighbour; otherwise the external neighbour is set to `N/A -1`.
  - `external_is_self()`, `reset_external()`
  - `add_internal(ip, port)` – appends a neighbour, returns `False` once the
    table holds 100 entries.
  - `remove_internal(ip, port)` – removes the first match, returns whether
    one was found.
  - `describe()` returns the topology as a framed text block; `show()` writes
    it to standard output and returns what it wrote.

### `ndnnode.udp_reg`

Exchanges with the registry over a UDP socket you supply, addressed to
`reg_addr = (ip, port)`:

- `join(sock, reg_addr, net, my_ip, my_tcp_port, topo)` – sends `NODES`,
  initializes `topo`, sends `REG` and returns the nodes already in the network.
- `leave(sock, reg_addr, net, my_ip, my_tcp_port)` – sends `UNREG`.
- `show_nodes(sock, reg_addr, net)` – fetches, prints and returns the node list.
- `parse_nodes_list(reply)` and `format_nodes(net, nodes)` – parsing and
  display helpers.

Failed exchanges and unexpected replies raise `RegistryError`.

### `ndnnode.tcp_topo`

- `handle_message(message, topo)` – applies an `ENTRY` or `LEAVE` message to
  `topo` and returns the `SAFE` reply for an `ENTRY`, otherwise `None`. A
  `LEAVE` from an unknown node resets the external neighbour and direct-joins
  the address it carries.
- `accept_entry(listener, topo)` – accepts one connection on a listening
  socket, handles its message and sends back any reply.
- `direct_join(ext_ip, ext_port, my_ip, my_tcp_port, topo)` – sends `ENTRY`
  to a node and processes its `SAFE` reply; raises `DirectJoinError` on failure.
- `send_leave_message(my_ip, my_port, dest_ip, dest_port)` – sends `LEAVE`,
  returns whether it was sent.

## Protocol

Registry (UDP):

    NODES <net>                 -> NODESLIST <net>\n<ip> <port>\n...
    REG <net> <ip> <port>       -> OKREG
    UNREG <net> <ip> <port>     -> OKUNREG

Between nodes (TCP, one message per connection):

    ENTRY <ip> <port>           -> SAFE <ip> <port>
    LEAVE <ip> <port>

## Example

    from ndnnode.topology import TopologyInfo
    from ndnnode.tcp_topo import handle_message

    topo = TopologyInfo()
    topo.initialize("127.0.0.1", 58001, 1)
    reply = handle_message("ENTRY 127.0.0.1 58002\n", topo)
    print(reply)            # SAFE 127.0.0.1 58001
    print(topo.describe())  # external and internal neighbour: 127.0.0.1 58002

## What this package does not do

It provides no command to start a node and no interactive command reader
(`join`, `djoin`, `leave`, `show topology` and so on). It does not parse
start-up arguments, validate addresses and ports, or create and bind the UDP
and listening TCP sockets; the caller creates those sockets and drives the
event loop, passing them to the functions above.

## Running the tests

    pip install .[test]
    pytest