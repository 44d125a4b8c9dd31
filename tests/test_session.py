import socketserver
import threading
import unittest

from maze_client import ClientConfig, Direction, MazeSession
from maze_client.protocol import (
    GameOverError,
    ProtocolError,
    RejectedError,
    ShapeMismatchError,
    UnexpectedResponseError,
)


class ScriptedHandler(socketserver.StreamRequestHandler):
    server: "ScriptedServer"

    def handle(self) -> None:
        for reply in self.server.replies:
            line = self.rfile.readline()
            if not line:
                return
            self.server.received.append(line.decode())
            self.wfile.write(reply.encode())
        self.server.done.set()


class ScriptedServer(socketserver.TCPServer):
    """Answers the n-th line it receives with the n-th scripted reply."""

    allow_reuse_address = True

    def __init__(self, replies):
        self.replies = list(replies)
        self.received = []
        self.done = threading.Event()
        super().__init__(("127.0.0.1", 0), ScriptedHandler)


HANDSHAKE = ["DONE\n", "DONE\n", "DATA 10\n", "DATA 8\n"]


class SessionTestCase(unittest.TestCase):
    def start_server(self, replies):
        self.server = ScriptedServer(replies)
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        self.addCleanup(self._stop_server)
        return self.server.server_address

    def _stop_server(self):
        self.server.shutdown()
        self.server.server_close()
        self.thread.join(timeout=2)

    def connect(self, replies, wait=False):
        host, port = self.start_server(replies)
        session = MazeSession.connect(host, port, "koskja", "tardis", wait=wait, timeout=5)
        self.addCleanup(session.close)
        return session


class HandshakeTests(SessionTestCase):
    def test_handshake_seeds_dimensions(self):
        session = self.connect(HANDSHAKE)
        self.assertEqual(session.width(), 10)
        self.assertEqual(session.height(), 8)
        self.assertEqual(
            self.server.received,
            ["USER koskja\n", "LEVL tardis\n", "GETW\n", "GETH\n"],
        )

    def test_handshake_with_wait(self):
        session = self.connect(["DONE\n", "DONE\n", "DONE\n", "DATA 3\n", "DATA 4\n"], wait=True)
        self.assertEqual((session.width(), session.height()), (3, 4))
        self.assertEqual(self.server.received[2], "WAIT\n")

    def test_accessors_do_not_touch_the_transport(self):
        session = self.connect(HANDSHAKE)
        self.assertTrue(self.server.done.wait(2))
        session.width()
        session.height()
        self.assertEqual(len(self.server.received), 4)

    def test_rejected_user_aborts_connect(self):
        host, port = self.start_server(["NOPE bad user\n"])
        with self.assertRaises(RejectedError) as ctx:
            MazeSession.connect(host, port, "koskja", "tardis", timeout=5)
        self.assertEqual(ctx.exception.message, " bad user")
        self.assertEqual(self.server.received, ["USER koskja\n"])

    def test_game_over_during_level_selection(self):
        host, port = self.start_server(["DONE\n", "OVER closed\n"])
        with self.assertRaises(GameOverError):
            MazeSession.connect(host, port, "koskja", "tardis", timeout=5)

    def test_dimension_must_be_single_value(self):
        host, port = self.start_server(["DONE\n", "DONE\n", "DATA 10 11\n"])
        with self.assertRaises(UnexpectedResponseError):
            MazeSession.connect(host, port, "koskja", "tardis", timeout=5)

    def test_server_closing_during_handshake(self):
        host, port = self.start_server(["DONE\n"])
        with self.assertRaises(ConnectionError):
            MazeSession.connect(host, port, "koskja", "tardis", timeout=5)

    def test_from_config(self):
        host, port = self.start_server(HANDSHAKE)
        config = ClientConfig(host=host, port=port, user="koskja", level="tardis", timeout=5)
        with MazeSession.from_config(config) as session:
            self.assertEqual(session.width(), 10)


class GameplayTests(SessionTestCase):
    def test_query_position(self):
        session = self.connect(HANDSHAKE + ["DATA 2\n", "DATA 7\n"])
        self.assertEqual(session.query_x(), 2)
        self.assertEqual(session.query_y(), 7)
        self.assertEqual(self.server.received[4:], ["GETX\n", "GETY\n"])

    def test_inspect_cell(self):
        session = self.connect(HANDSHAKE + ["DATA 1\n", "NOPE out of range\n"])
        self.assertEqual(session.inspect_cell(3, 5), 1)
        with self.assertRaises(RejectedError):
            session.inspect_cell(30, 50)
        self.assertEqual(self.server.received[4:], ["WHAT 3 5\n", "WHAT 30 50\n"])

    def test_fetch_maze_and_grid(self):
        maze = "DATA 1 1 1 0 0 2\n"
        host, port = self.start_server(["DONE\n", "DONE\n", "DATA 3\n", "DATA 2\n", maze, maze])
        with MazeSession.connect(host, port, "koskja", "tardis", timeout=5) as session:
            self.assertEqual(session.fetch_maze(), [1, 1, 1, 0, 0, 2])
            self.assertEqual(session.fetch_maze_grid(), [[1, 1, 1], [0, 0, 2]])

    def test_fetch_maze_grid_shape_mismatch(self):
        session = self.connect(HANDSHAKE + ["DATA 1 2 3\n"])
        with self.assertRaises(ShapeMismatchError):
            session.fetch_maze_grid()

    def test_move_accepts_keys_and_directions(self):
        session = self.connect(HANDSHAKE + ["DONE\n", "DONE\n", "DONE\n"])
        session.mov("W")
        session.mov(Direction.RIGHT)
        session.mov("Q")
        self.assertEqual(self.server.received[4:], ["MOVE w\n", "MOVE d\n", "MOVE q\n"])

    def test_move_rejected(self):
        session = self.connect(HANDSHAKE + ["NOPE wall\n"])
        with self.assertRaises(RejectedError) as ctx:
            session.mov("a")
        self.assertEqual(ctx.exception.message, " wall")

    def test_move_into_finished_game(self):
        session = self.connect(HANDSHAKE + ["OVER finished\n"])
        with self.assertRaises(GameOverError) as ctx:
            session.mov("d")
        self.assertEqual(ctx.exception.message, " finished")
        self.assertEqual(self.server.received[-1], "MOVE d\n")

    def test_move_with_unexpected_reply(self):
        session = self.connect(HANDSHAKE + ["DATA 1\n"])
        with self.assertRaises(UnexpectedResponseError):
            session.mov("s")

    def test_wait(self):
        session = self.connect(HANDSHAKE + ["DONE\n"])
        session.wait()
        self.assertEqual(self.server.received[-1], "WAIT\n")

    def test_unknown_tag_is_a_protocol_error(self):
        session = self.connect(HANDSHAKE + ["XXXX foo\n"])
        with self.assertRaises(ProtocolError):
            session.query_x()

    def test_closed_session(self):
        session = self.connect(HANDSHAKE)
        session.close()
        with self.assertRaisesRegex(RuntimeError, "closed"):
            session.query_x()


if __name__ == "__main__":
    unittest.main()
