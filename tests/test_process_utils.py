import subprocess
import unittest
from unittest.mock import patch

from process_utils import CommandError, run_capture, run_quiet, shell_join, spawn_detached


class RunCaptureTests(unittest.TestCase):
    def test_returns_stdout(self):
        done = subprocess.CompletedProcess(["ollama", "list"], 0, stdout="NAME\nfoo:1b\n", stderr="")
        with patch("process_utils.subprocess.run", return_value=done) as run:
            out = run_capture(["ollama", "list"], timeout=2.0)
        self.assertEqual(out, "NAME\nfoo:1b\n")
        self.assertEqual(run.call_args.kwargs["timeout"], 2.0)
        self.assertTrue(run.call_args.kwargs["capture_output"])

    def test_missing_executable(self):
        with patch("process_utils.subprocess.run", side_effect=FileNotFoundError(2, "No such file")):
            with self.assertRaises(CommandError) as ctx:
                run_capture(["ollama", "list"])
        self.assertEqual(str(ctx.exception), "ollama not found")
        self.assertIsNone(ctx.exception.returncode)

    def test_non_zero_exit_uses_last_stderr_line(self):
        done = subprocess.CompletedProcess(
            ["ollama", "ps"], 1, stdout="", stderr="Error: could not connect to ollama app, is it running?\n"
        )
        with patch("process_utils.subprocess.run", return_value=done):
            with self.assertRaises(CommandError) as ctx:
                run_capture(["ollama", "ps"])
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertIn("is it running?", str(ctx.exception))

    def test_timeout(self):
        with patch("process_utils.subprocess.run", side_effect=subprocess.TimeoutExpired(["ollama", "list"], 1.0)):
            with self.assertRaises(CommandError) as ctx:
                run_capture(["ollama", "list"], timeout=1.0)
        self.assertIn("timed out", str(ctx.exception))


class RunQuietTests(unittest.TestCase):
    def test_non_zero_exit_is_returned_not_raised(self):
        with patch("process_utils.subprocess.call", return_value=1) as call:
            self.assertEqual(run_quiet(["ollama", "stop", "a:1b"]), 1)
        kwargs = call.call_args.kwargs
        self.assertIs(kwargs["stdout"], subprocess.DEVNULL)
        self.assertIs(kwargs["stderr"], subprocess.DEVNULL)

    def test_missing_executable_raises(self):
        with patch("process_utils.subprocess.call", side_effect=FileNotFoundError(2, "No such file")):
            with self.assertRaises(CommandError):
                run_quiet(["ollama", "stop", "a:1b"])


class SpawnDetachedTests(unittest.TestCase):
    def test_does_not_wait_for_the_process(self):
        with patch("process_utils.subprocess.Popen") as popen:
            self.assertIsNone(spawn_detached(["ollama", "run", "a:1b"]))
        popen.assert_called_once()
        self.assertEqual(popen.call_args.args[0], ["ollama", "run", "a:1b"])
        self.assertIs(popen.call_args.kwargs["stdin"], subprocess.DEVNULL)
        proc = popen.return_value
        proc.wait.assert_not_called()
        proc.communicate.assert_not_called()

    def test_detaches_into_new_session_on_posix(self):
        with patch("process_utils.os.name", "posix"):
            with patch("process_utils.subprocess.Popen") as popen:
                spawn_detached(["ollama", "run", "a:1b"])
        self.assertTrue(popen.call_args.kwargs["start_new_session"])

    def test_start_failure_raises(self):
        with patch("process_utils.subprocess.Popen", side_effect=FileNotFoundError(2, "No such file")):
            with self.assertRaises(CommandError):
                spawn_detached(["ollama", "run", "a:1b"])


class ShellJoinTests(unittest.TestCase):
    def test_quotes_arguments(self):
        self.assertEqual(shell_join(["ollama", "run", "my model"]), "ollama run 'my model'")


if __name__ == "__main__":
    unittest.main()
