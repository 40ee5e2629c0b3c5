# clams

A small Minecraft server core. It accepts TCP connections, reads
length-prefixed packets and takes each client through the handshake,
status, login and configuration states of the protocol. A tick loop
runs at a fixed rate of 20 ticks per second. A console on standard
input accepts `stop` to shut the server down.

## Installing

```
pip install .
```

The only runtime dependency is `cryptography`. At start-up the server
uses it to generate a 1024-bit RSA key pair. The public half is kept in
DER form as `TcpServer.public_key`.

## Running

```
clams
clams --port 25570
```

The server listens on port 25565 unless `--port` is given. On start-up
it prints `Starting Minecraft server on *:<port>`. When it is ready, it
prints how many milliseconds start-up took. Type `stop` at the `>`
prompt to drop every client and shut down. SIGTERM and SIGABRT shut the
server down in the same way.

The server's responses are fixed:

- A status request gets a fixed JSON reply: version `1.21.4`, protocol
  769, description "A Minecraft Server", and 0 of 20 players online.
- A login start is answered at once with a login success packet that
  carries the client's own name and UUID.
- Client information in the configuration state is answered with three
  packets, in this order:
  - a `minecraft:brand` plugin message of `CLAMS`;
  - the `minecraft:vanilla` feature flag;
  - finish configuration.

## Using the pieces

The protocol building blocks can be used on their own.

- `clams.readbuffer.ReadBuffer`
  - `feed()` appends received bytes.
  - `read_length()` resolves the VarInt length prefix, or returns `None`
    when more bytes are needed.
  - `read_*` methods read bytes, bools, big-endian integers and floats,
    VarInts, strings and UUIDs.
  - `reset()` drops the current packet and keeps any bytes that follow it.
  - A VarInt that is too long raises `MalformedVarintError`. A read past
    the received bytes raises `BufferOverflowError`.
- `clams.writebuffer`
  - `WriteBuffer` builds a packet, and `packet()` returns it with its
    VarInt length prefix.
  - `encode_varint` and `encode_varlong` encode single values.
- `clams.packet_ids`: the clientbound packet identifiers `StatusPacket`,
  `LoginPacket` and `ConfigPacket`.
- `clams.connection`
  - `Connection` holds one client's protocol `State`, receives bytes
    towards the next packet, and has the `send_*` methods for clientbound
    packets.
- `clams.worker`
  - The serverbound packet handlers.
  - `dispatch()` routes a complete packet by state and id.
  - `NetworkWorker` watches client sockets on a background thread.
- `clams.tcpserver`
  - `TcpServer` accepts clients on a background thread and keeps the list
    of connections.
  - `make_public_key()` generates the RSA public key.
- `clams.server`
  - `Server` runs everything and drives the tick loop.
  - `sleep_until()` sleeps until a `time.monotonic_ns()` deadline.
  - `main()` is the command above.
- `clams.entity`
  - `UUID`, `Position`, `Vec3D`, `Entity`, `Player` and `GameMode`.
- `clams.chunk_cache`
  - `ChunkCache.request_chunks()` walks a diamond of chunks around a
    player.
  - It returns, and prints, a grid that marks the chunks that are not
    loaded.
- `clams.logger`: `logger()` returns the shared `Logger`. Its `info` and
  `warn` write to standard output and `err` writes to standard error.

```python
from clams.writebuffer import WriteBuffer
from clams.readbuffer import ReadBuffer

wbuf = WriteBuffer()
wbuf.write_byte(0x00)
wbuf.write_string("hello")
data = wbuf.packet()

rbuf = ReadBuffer()
rbuf.feed(data)
length = rbuf.read_length()   # 7
packet_id = rbuf.read_char()  # 0
text = rbuf.read_string()     # "hello"
```

## What it does not do

- No play state: packets that arrive after configuration are logged as
  unknown and ignored.
- No world is sent to clients.
  - `ChunkCache.at()` never finds a loaded chunk.
  - `Server.tick()` does nothing.
- No authentication, encryption or compression is carried out.
  - The RSA public key is generated at start-up, but it is never used.
  - `send_encryption_request` and `send_set_compression` exist, but the
    login flow does not call them.
- Nothing is stored: no worlds, player data or configuration files.

## Tests

```
pip install .[test]
pytest
```