import logging
from dataclasses import dataclass, field

from silviewer.commands import Tab, Flags, FLAG_NAMES, compose_command
from silviewer.config import Settings
from silviewer.runner import run_program

LOG = logging.getLogger(__name__)

DEFAULT_SOURCE = "// Paste or write your Swift code here"

# ========================================================
# 1. SESSION STATE
# ========================================================

@dataclass
class Session:
    source: str = DEFAULT_SOURCE
    demangle: bool = True
    optimize: bool = False
    module_optimize: bool = False
    parse_as_library: bool = False
    selected_tab: Tab = Tab.SOURCE
    command_run: str = ""
    outputs: dict = field(default_factory=lambda: {tab: "" for tab in Tab if tab is not Tab.SOURCE})
    generations: dict = field(default_factory=lambda: {tab: 0 for tab in Tab})

    @property
    def flags(self):
        return Flags(self.demangle, self.optimize, self.module_optimize, self.parse_as_library)

    def output(self, tab):
        return self.outputs.get(tab, "")


@dataclass(frozen=True)
class RunRequest:
    tab: Tab
    command: str
    source: str
    generation: int

# ========================================================
# 2. BINDER
# ========================================================

class Binder:
    """
    Reruns the compiler whenever a flag or the selected tab changes.

    dispatch(request) decides where the run happens; the default runs it inline.
    Whoever executes a request must hand the result back through complete(),
    which drops it if a newer request for the same tab has been issued since.
    """

    def __init__(self, session, settings=None, runner=run_program, dispatch=None, on_output=None):
        self.session = session
        self.settings = settings or Settings()
        self.runner = runner
        self.dispatch = dispatch or self.run_inline
        self.on_output = on_output

    def execute(self, request):
        return self.runner(request.command, request.source, self.settings.shell)

    def run_inline(self, request):
        self.complete(request, self.execute(request))

    def set_flag(self, name, value):
        if name not in FLAG_NAMES:
            raise AttributeError(f"unknown flag: {name}")
        value = bool(value)
        if getattr(self.session, name) == value: return
        setattr(self.session, name, value)
        self.refresh()

    def select_tab(self, tab):
        if self.session.selected_tab == tab: return
        self.session.selected_tab = tab
        self.refresh()

    def set_source(self, text):
        # Only flag and tab changes rerun; use refresh() to pick up edits
        self.session.source = text

    def refresh(self):
        """ Composes and dispatches a run for the selected tab. Returns the request, or None for the source tab. """
        tab = self.session.selected_tab
        command = compose_command(tab, self.session.flags, self.settings)
        if command is None: return None
        self.session.command_run = command
        self.session.generations[tab] += 1
        request = RunRequest(tab, command, self.session.source, self.session.generations[tab])
        LOG.debug("dispatching %s #%d", tab.value, request.generation)
        self.dispatch(request)
        return request

    def complete(self, request, output):
        """ Stores output for request.tab. Returns False when the request was superseded. """
        latest = self.session.generations[request.tab]
        if request.generation != latest:
            LOG.warning("dropping stale %s result #%d (latest #%d)", request.tab.value, request.generation, latest)
            return False
        self.session.outputs[request.tab] = output
        if self.on_output: self.on_output(request.tab, output)
        return True
