import enum
import logging
from dataclasses import dataclass

LOG = logging.getLogger(__name__)

# ========================================================
# 1. TABS & FLAGS
# ========================================================

class Tab(enum.Enum):
    SOURCE = "source"
    PARSE = "parse"
    AST = "ast"
    PRETTY_PRINT_AST = "pretty-printed-ast"
    RAW_SIL = "raw-intermediate-rep-gen"
    CANONICAL_SIL = "canonical-intermediate-rep"
    IR = "full-intermediate-rep"
    ASSEMBLY = "assembly"

    @property
    def title(self):
        return TAB_TITLES[self]


TAB_TITLES = {
    Tab.SOURCE: "Source code",
    Tab.PARSE: "Parse",
    Tab.AST: "AST",
    Tab.PRETTY_PRINT_AST: "Pre-SIL Swift from AST",
    Tab.RAW_SIL: "Raw SIL",
    Tab.CANONICAL_SIL: "Canonical SIL",
    Tab.IR: "IR",
    Tab.ASSEMBLY: "Assembly",
}

# Tabs whose command ignores the flags
FIXED_COMMANDS = {
    Tab.PARSE: "-dump-parse",
    Tab.AST: "-dump-ast",
    Tab.PRETTY_PRINT_AST: "-print-ast",
}

TEMPLATED_COMMANDS = {
    Tab.RAW_SIL: "-emit-silgen",
    Tab.CANONICAL_SIL: "-emit-sil",
    Tab.IR: "-emit-ir",
    Tab.ASSEMBLY: "-emit-assembly",
}


@dataclass(frozen=True)
class Flags:
    demangle: bool = True
    optimize: bool = False
    module_optimize: bool = False
    parse_as_library: bool = False


FLAG_NAMES = ("demangle", "optimize", "module_optimize", "parse_as_library")

# ========================================================
# 2. COMPOSER
# ========================================================

def with_parse_as_library(enabled, program, module_name="SILInspector"):
    return f"{program} -parse-as-library -module-name {module_name}" if enabled else program

def with_optimize(enabled, program):
    return f"{program} -O" if enabled else program

def with_module_optimize(enabled, program):
    return f"{program} -whole-module-optimization" if enabled else program

def with_demangle(enabled, program, demangler="xcrun swift-demangle"):
    return f"{program} | {demangler}" if enabled else program


def apply_flags(program, flags, module_name="SILInspector", demangler="xcrun swift-demangle"):
    """ Appends the enabled flags to program: parse-as-library, -O, WMO, demangle pipe. """
    program = with_parse_as_library(flags.parse_as_library, program, module_name)
    program = with_optimize(flags.optimize, program)
    program = with_module_optimize(flags.module_optimize, program)
    return with_demangle(flags.demangle, program, demangler)


def base_command(tab, compiler="swiftc"):
    if tab in FIXED_COMMANDS:
        return f"{compiler} - {FIXED_COMMANDS[tab]}"
    if tab in TEMPLATED_COMMANDS:
        return f"{compiler} - {TEMPLATED_COMMANDS[tab]}"
    return None


def compose_command(tab, flags, settings=None):
    """
    Builds the shell command for tab.
    Returns None for the source tab, which has nothing to run.
    """
    compiler = settings.compiler if settings else "swiftc"
    program = base_command(tab, compiler)
    if program is None or tab in FIXED_COMMANDS:
        return program
    if settings:
        program = apply_flags(program, flags, settings.module_name, settings.demangler)
    else:
        program = apply_flags(program, flags)
    LOG.debug("composed %s: %s", tab.value, program)
    return program
