import argparse
import logging
from dataclasses import dataclass

LOG = logging.getLogger(__name__)

MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 36


@dataclass
class Settings:
    """ In-session configuration. Never written to disk. """
    compiler: str = "swiftc"
    demangler: str = "xcrun swift-demangle"
    shell: str = "/bin/bash"
    module_name: str = "SILInspector"
    font_family: str = "Courier"
    font_size: int = 22

    def update(self, **changes):
        """ Applies changes in place and returns the names of the fields that actually changed. """
        changed = []
        for name, value in changes.items():
            if not hasattr(self, name):
                raise AttributeError(f"unknown setting: {name}")
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed.append(name)
        if changed:
            LOG.info("settings changed: %s", ", ".join(f"{n}={getattr(self, n)!r}" for n in changed))
        return changed


def clamp_font_size(size):
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, int(size)))


def build_arg_parser():
    parser = argparse.ArgumentParser(
        prog="sil-viewer",
        description="Inspect swiftc parse trees, ASTs, SIL, LLVM IR and assembly side by side.",
    )
    defaults = Settings()
    parser.add_argument("--compiler", default=defaults.compiler, help="swift compiler executable (default: %(default)s)")
    parser.add_argument("--demangler", default=defaults.demangler, help="command the output is piped through when demangling (default: %(default)s)")
    parser.add_argument("--shell", default=defaults.shell, help="shell used to run commands (default: %(default)s)")
    parser.add_argument("--module-name", default=defaults.module_name, help="module name passed with -parse-as-library (default: %(default)s)")
    parser.add_argument("--font-size", type=int, default=defaults.font_size, help=f"editor font size, {MIN_FONT_SIZE}-{MAX_FONT_SIZE} (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log composed commands and dispatches")
    return parser


def settings_from_args(args):
    return Settings(
        compiler=args.compiler,
        demangler=args.demangler,
        shell=args.shell,
        module_name=args.module_name,
        font_size=clamp_font_size(args.font_size),
    )
