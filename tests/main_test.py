import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from xmini.main import main, parse_args


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write(self, source):
        path = os.path.join(self.tmpdir.name, "prog.xm")
        with open(path, "w") as file:
            file.write(source)
        return path

    def run_main(self, argv, stdin=None):
        """Returns (exit code, stdout, stderr) of running main with argv."""
        out, err = io.StringIO(), io.StringIO()
        code = 0
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err), \
                mock.patch("sys.stdin", io.StringIO(stdin or "")):
            try:
                code = main(argv)
            except SystemExit as error:
                code = error.code
        return code, out.getvalue(), err.getvalue()

    def test_parse_args(self):
        args = parse_args([])
        self.assertIsNone(args.file)
        self.assertFalse(args.keep_going)

        args = parse_args(["prog.xm", "--keep-going"])
        self.assertEqual("prog.xm", args.file)
        self.assertTrue(args.keep_going)

    def test_file_mode(self):
        path = self.write("var x 5\noutput x\nvar x 10\noutput x\ntext \"multi word\"\n")
        code, out, err = self.run_main([path])

        self.assertEqual(0, code)
        self.assertEqual("5\n10\nmulti word\n", out)
        self.assertIn("Variable x already defined", err)

    def test_file_mode_lexical_error(self):
        path = self.write("output 1\noutput &x\n")
        code, out, err = self.run_main([path])

        self.assertEqual(1, code)
        self.assertEqual("", out)
        self.assertIn("Error on line 2 at position 7: Unexpected token: &x", err)

    def test_file_mode_runtime_error(self):
        path = self.write("output 1\noutput / 5 0\noutput 2\n")
        code, out, err = self.run_main([path])

        self.assertEqual(1, code)
        self.assertEqual("1\n", out)
        self.assertIn("Division by zero", err)

    def test_missing_file(self):
        code, out, err = self.run_main([os.path.join(self.tmpdir.name, "missing.xm")])
        self.assertEqual(1, code)
        self.assertIn("could not be opened", err)

    def test_interactive_keep_going(self):
        code, out, err = self.run_main(["--keep-going"], stdin="var x 2\noutput / x 0\noutput x\nquit\n")

        self.assertEqual(0, code)
        self.assertTrue(out.startswith("XMini 0.1.0"))
        self.assertIn("2\n", out)
        self.assertIn("Division by zero", err)

    def test_interactive_errors_are_fatal(self):
        code, out, err = self.run_main([], stdin="output 1\noutput / 1 0\ntext unreachable\n")

        self.assertEqual(1, code)
        self.assertNotIn("unreachable", out)
        self.assertIn("Division by zero", err)
        self.assertIn("1\n", out)

    def test_interactive_eof_identifier(self):
        code, out, err = self.run_main([], stdin="EOF\ntext after\n")

        self.assertEqual(1, code)
        self.assertNotIn("after", out)
        self.assertIn("Unexpected token IDENTIFIER 'EOF'", err)

    def test_interactive_end_of_input(self):
        code, out, err = self.run_main([], stdin="text bye\n")
        self.assertEqual(0, code)
        self.assertIn("bye\n", out)


if __name__ == '__main__':
    unittest.main()
