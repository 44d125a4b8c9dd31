import socket
import threading
import unittest

from maze_client import MazeSession
from maze_client.protocol import GameOverError, RejectedError
from maze_server.app import MazeTCPServer
from maze_server.config import ServerConfig
from maze_server.protocol import MAX_LINE_LENGTH


class ClientIntegrationTests(unittest.TestCase):
    def setUp(self):
        self.server = MazeTCPServer(ServerConfig(host="127.0.0.1", port=0))
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        self.host, self.port = self.server.server_address

    def tearDown(self):
        self.server.shutdown()
        self.server.server_close()
        self.thread.join(timeout=2)

    def test_client_end_to_end(self):
        with MazeSession.connect(self.host, self.port, "alice", "grid", wait=True, timeout=5) as session:
            self.assertEqual((session.width(), session.height()), (7, 5))
            self.assertEqual((session.query_x(), session.query_y()), (1, 1))

            grid = session.fetch_maze_grid()
            self.assertEqual(grid[3], [1, 0, 0, 0, 1, 2, 1])
            self.assertEqual(session.inspect_cell(5, 3), 2)

            with self.assertRaises(RejectedError) as ctx:
                session.mov("W")
            self.assertEqual(ctx.exception.message, " You bumped into a wall.")

            for key in "DDDDSS":
                session.mov(key)

            with self.assertRaises(GameOverError) as ctx:
                session.mov("a")
            self.assertEqual(ctx.exception.message, " Level complete.")

    def test_unknown_level_aborts_connect(self):
        with self.assertRaises(RejectedError) as ctx:
            MazeSession.connect(self.host, self.port, "alice", "nowhere", timeout=5)
        self.assertEqual(ctx.exception.message, " Unknown level nowhere")

    def test_overlong_line_is_refused_and_connection_stays_usable(self):
        with socket.create_connection((self.host, self.port), timeout=5) as sock:
            reader = sock.makefile("rb")
            sock.sendall(b"USER " + b"x" * (MAX_LINE_LENGTH * 3) + b"\n")
            self.assertEqual(reader.readline(), b"NOPE Command too long\n")
            sock.sendall(b"USER alice\n")
            self.assertEqual(reader.readline(), b"DONE\n")
            reader.close()


if __name__ == "__main__":
    unittest.main()
