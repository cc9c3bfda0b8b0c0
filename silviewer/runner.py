import logging
import subprocess

LOG = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/bash"


def pick_output(out, err):
    """ Error text wins unless it is empty or a lone newline. Never both. """
    return out if err in ("", "\n") else err


def run_program(command, source, shell=DEFAULT_SHELL):
    """
    Runs command through shell with source on stdin.
    Returns stdout, or stderr when the command wrote anything meaningful there.
    A shell that cannot be launched is reported as text, same as any other failure.
    """
    try:
        p = subprocess.Popen(
            [shell, "-c", command],
            stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            text=True, encoding="utf-8", errors="replace"
        )
    except (OSError, ValueError) as e:
        LOG.warning("could not launch %s: %s", shell, e)
        return f"{e}\n"

    out, err = p.communicate(input=source)
    LOG.info("`%s` exited with code %d", command, p.returncode)
    return pick_output(out, err)
