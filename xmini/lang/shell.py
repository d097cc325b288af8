"""Handles interactive/command-line mode for the XMini interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """XMini interpreter shell. Every line is run as soon as it is entered, against the session's variable store.
    Only the line 'quit' and end of input are shell commands: everything else is XMini source.
    """
    intro = "XMini 0.1.0 :: Python backend\nType 'quit' to exit."
    prompt = ">>> "
    QUIT = "quit"

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def cmdloop(self, intro=None):
        """Same loop as cmd.Cmd.cmdloop, except that end of input calls do_EOF directly instead of being turned into
        an 'EOF' line, which would be indistinguishable from the identifier EOF.
        """
        self.preloop()
        intro = intro if intro is not None else self.intro
        if intro:
            self.stdout.write(str(intro) + "\n")

        stop = None
        while not stop:
            if self.cmdqueue:
                line = self.cmdqueue.pop(0)
            elif self.use_rawinput:
                try:
                    line = input(self.prompt)
                except EOFError:
                    line = None
            else:
                self.stdout.write(self.prompt)
                self.stdout.flush()
                line = self.stdin.readline()
                line = line.rstrip("\r\n") if line else None

            if line is None:
                stop = self.do_EOF("")
            else:
                stop = self.postcmd(self.onecmd(self.precmd(line)), line)
        self.postloop()

    def onecmd(self, line):
        """Runs line as XMini source unless it is exactly 'quit' or empty."""
        self.lastcmd = ""
        stripped = line.strip()
        if stripped == Shell.QUIT:
            return self.do_quit("")
        elif not stripped:
            return self.emptyline()
        return self.default(line)

    def default(self, line):
        """Executes arbitrary XMini statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if self.sess.add(line, self.line_num):
                self.sess.run()

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_quit(arg)

    def do_quit(self, arg):
        """Exits interpreter."""
        return True
