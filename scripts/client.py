#!/usr/bin/env python3
"""
Interactive Client for kvpool

A small command-line client for talking to a running kvpool server.

Usage:
    python scripts/client.py                  # Connect to 127.0.0.1:10808
    python scripts/client.py --host 1.2.3.4   # Connect to specific host
    python scripts/client.py --port 8080      # Connect to specific port

Type 'help' at the prompt for the command list.
"""

import argparse
import socket
import sys

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


class PoolClient:
    """Line-oriented TCP client for kvpool."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket = None
        self._buffer = b''

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None
            self._buffer = b''

    def _read_line(self) -> str:
        while b'\n' not in self._buffer:
            chunk = self.socket.recv(4096)
            if not chunk:
                raise ConnectionError("Connection closed by server")
            self._buffer += chunk
        line, self._buffer = self._buffer.split(b'\n', 1)
        return line.decode('utf-8')

    def send_command(self, command: str) -> str:
        """Send a command and receive its response."""
        if not self.socket:
            return "ERROR: Not connected"

        try:
            self.socket.sendall(f"{command.strip()}\n".encode('utf-8'))

            # The status report spans two lines
            lines = 2 if command.strip().lower() == "status" else 1
            return "\n".join(self._read_line() for _ in range(lines))

        except socket.timeout:
            return "ERROR: Request timed out"
        except (OSError, ConnectionError) as e:
            return f"ERROR: {e}"

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def print_help():
    """Print help message."""
    print("""
kvpool Commands:
----------------
  add <key> [t|]<value> [timeout]      Store only if the key is absent
  set <key> [t|]<value> [timeout]      Store, overwriting
  replace <key> [t|]<value> [timeout]  Store only if the key exists
  delete <key>                         Delete a key
  increment <key> [timeout]            Add one to a numeric value
  decrement <key> [timeout]            Subtract one from a numeric value
  get <key>                            Retrieve a value (null if absent)
  has <key>                            Check if a key exists
  flush                                Remove everything
  status                               Memory and item report

  Type tags t: s (string, default), b (boolean), i (integer)

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client
  reconnect                 Reconnect to the server

Examples:
---------
  set mykey s|myvalue 60    Store "myvalue" for 60 seconds
  set counter i|1024        Store the integer 1024
  increment counter         counter is now 1025
""")


def main():
    parser = argparse.ArgumentParser(
        description="Interactive client for kvpool"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Server host (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=10808,
        help="Server port (default: 10808)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print(f"Connecting to {args.host}:{args.port}...")

    client = PoolClient(args.host, args.port, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print(f"  Try: kvpool --port {args.port}")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                lower_cmd = command.lower()

                if lower_cmd == "help":
                    print_help()
                    continue

                if lower_cmd in ("exit", "quit"):
                    print("Goodbye!")
                    break

                if lower_cmd == "reconnect":
                    client.disconnect()
                    print("Reconnected!" if client.connect() else "Reconnection failed.")
                    continue

                print(client.send_command(command))

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
