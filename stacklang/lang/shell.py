"""Handles interactive/command-line mode for the stack language interpreter. Uses cmd as backend."""

import cmd

from stacklang.lang.error import Fault


class Shell(cmd.Cmd):
    """Stack language interpreter shell."""
    intro = "Stack language interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary stack language statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line = self._tmp_line + line

            try:
                self.sess.add(line)
            except Fault as error:
                if error.reason != Fault.TRUNCATED:
                    self._tmp_line = ""
                    self.prompt = self._tmp_prompt
                    raise

                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            self.sess.run()

    def postcmd(self, stop, line):
        """Flushes program output before the next prompt is shown."""
        self.stdout.flush()
        return stop

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the stack language interpreter!\n\n"
              "Declare variables with 'stack NAME : TYPE', where TYPE is 'text' or 'num', \n"
              "optionally initialized with '<- LITERAL'. Write values with 'out <- EXPR' \n"
              "('+' joins values as text) and read a line into a variable with 'in -> NAME'.\n\n"
              "Try it out by typing 'stack greeting : text <- \"hi\\n\"' and then \n"
              "'out <- greeting'. Type 'vars' to list variables, 'reset' to forget them.", file=self.stdout)

    def do_vars(self, arg):
        """Lists every declared variable with its current value."""
        for name, value in self.sess.environment:
            print(f"{name} = {value!r}", file=self.stdout)

    def do_reset(self, arg):
        """Forgets every declared variable."""
        self.sess.reset()

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
