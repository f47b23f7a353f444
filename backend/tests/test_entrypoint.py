import unittest
from unittest.mock import patch

from movie_night import __main__ as entrypoint


class TestEntrypoint(unittest.TestCase):
    def test_serves_on_configured_port(self) -> None:
        with patch.object(entrypoint.settings, "PORT", 9123), patch.object(
            entrypoint.settings, "HOST", "127.0.0.1"
        ), patch("movie_night.__main__.uvicorn.run") as run:
            entrypoint.main()

        args, kwargs = run.call_args
        self.assertEqual(args, ("movie_night.main:app",))
        self.assertEqual(kwargs["port"], 9123)
        self.assertEqual(kwargs["host"], "127.0.0.1")
