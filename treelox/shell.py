"""Interactive prompt for the Lox interpreter. Uses cmd as backend."""

import cmd
import sys

from .errors import ParseFailed, RuntimeFailed, ScanFailed
from .interpreter import Interpreter, run_program


class Shell(cmd.Cmd):
    """Runs each input line against one long-lived interpreter."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information, Ctrl-D to quit."
    prompt = "> "

    def __init__(self, interpreter=None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interpreter = interpreter if interpreter is not None else Interpreter()

    def default(self, line):
        """Executes a line of Lox source."""
        try:
            run_program(line, self.interpreter)
        except (ScanFailed, ParseFailed) as e:
            for diagnostic in e.diagnostics:
                print(diagnostic, file=sys.stderr)
        except RuntimeFailed as e:
            print(e.error, file=sys.stderr)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Type Lox statements and press enter, e.g. 'var a = 1;' then 'print a + 2;'.\n"
              "Variables and functions persist between lines. 'clock()' returns the\n"
              "current monotonic time in seconds.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return True
