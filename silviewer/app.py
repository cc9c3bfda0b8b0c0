import sys
import logging

from PyQt5.QtWidgets import QApplication, QMainWindow, QTabWidget
from PyQt5.QtGui import QFont
from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

from silviewer.commands import Tab
from silviewer.config import Settings, build_arg_parser, settings_from_args, clamp_font_size
from silviewer.runner import run_program
from silviewer.session import Session, Binder
from silviewer.widgets import CodeEditor, OutputView, PreferencesDialog

LOG = logging.getLogger(__name__)

# ========================================================
# 1. BACKGROUND RUNS
# ========================================================

class RunSignals(QObject):
    finished = pyqtSignal(object, str)

class RunTask(QRunnable):
    """ Executes one RunRequest off the GUI thread; the result comes back through signals.finished. """
    def __init__(self, binder, request):
        super().__init__()
        self.binder = binder
        self.request = request
        self.signals = RunSignals()
    def run(self):
        self.signals.finished.emit(self.request, self.binder.execute(self.request))

# ========================================================
# 2. MAIN WINDOW
# ========================================================

class MainWindow(QMainWindow):
    def __init__(self, session=None, settings=None, runner=run_program, threaded=True):
        super().__init__()
        self.session = session or Session()
        self.settings = settings or Settings()
        self.pool = QThreadPool.globalInstance()
        self.binder = Binder(
            self.session, self.settings, runner=runner,
            dispatch=self.dispatch_in_pool if threaded else None,
            on_output=self.show_output,
        )
        self.setWindowTitle("SIL Viewer")
        self.resize(1400, 900)

        self.tabs = QTabWidget()
        self.tabs.setFont(QFont(self.tabs.font().family(), 18))
        self.setCentralWidget(self.tabs)

        self.source_editor = CodeEditor(tab=Tab.SOURCE, font=self.editor_font())
        self.source_editor.setPlainText(self.session.source)
        self.source_editor.textChanged.connect(lambda: self.binder.set_source(self.source_editor.toPlainText()))
        self.tabs.addTab(self.source_editor, Tab.SOURCE.title)

        self.views = {}
        for tab in Tab:
            if tab is Tab.SOURCE: continue
            view = OutputView(tab, font=self.editor_font())
            view.options.flag_toggled.connect(self.on_flag_toggled)
            view.options.font_size_changed.connect(self.on_font_size_changed)
            view.copy_requested.connect(self.copy_command)
            self.tabs.addTab(view, tab.title)
            self.views[tab] = view

        self.tab_order = list(Tab)
        self.tabs.setCurrentIndex(self.tab_order.index(self.session.selected_tab))
        self.tabs.currentChanged.connect(self.on_tab_changed)
        self.create_menu()
        self.sync_views()

    def create_menu(self):
        menubar = self.menuBar()
        file_menu = menubar.addMenu("File")
        file_menu.addAction("Quit", self.close, "Ctrl+Q")
        run_menu = menubar.addMenu("Run")
        run_action = run_menu.addAction("Run Current Tab", self.run_current)
        run_action.setShortcuts(["Ctrl+R", "F5"])
        edit_menu = menubar.addMenu("Edit")
        edit_menu.addAction("Preferences", self.open_preferences)

    def run_current(self):
        self.binder.refresh()
        self.sync_views()

    def editor_font(self):
        return QFont(self.settings.font_family, self.settings.font_size)

    # --- Dispatch ---
    def dispatch_in_pool(self, request):
        task = RunTask(self.binder, request)
        task.signals.finished.connect(self.on_run_finished)
        self.pool.start(task)

    def on_run_finished(self, request, output):
        self.binder.complete(request, output)

    # --- Session -> view ---
    def show_output(self, tab, output):
        self.views[tab].editor.set_text_keep_scroll(output)

    def sync_views(self):
        for tab, view in self.views.items():
            view.options.sync(self.session, self.settings.font_size)
            view.show_command(self.session.command_run)
            view.editor.set_text_keep_scroll(self.session.output(tab))

    # --- View -> session ---
    def on_tab_changed(self, index):
        self.binder.select_tab(self.tab_order[index])
        self.sync_views()

    def on_flag_toggled(self, name, checked):
        self.binder.set_flag(name, checked)
        self.sync_views()

    def on_font_size_changed(self, size):
        self.settings.update(font_size=clamp_font_size(size))
        self.update_editor_font()

    def update_editor_font(self):
        font = self.editor_font()
        self.source_editor.setFont(font)
        for view in self.views.values(): view.editor.setFont(font)
        self.sync_views()

    def copy_command(self):
        QApplication.clipboard().setText(self.session.command_run)

    def open_preferences(self):
        dialog = PreferencesDialog(self.settings, self)
        if not dialog.exec_(): return
        if {"font_family", "font_size"} & set(dialog.changed): self.update_editor_font()
        if {"compiler", "demangler", "shell", "module_name"} & set(dialog.changed): self.run_current()


def main(argv=None):
    argv = sys.argv if argv is None else argv
    args, qt_args = build_arg_parser().parse_known_args(argv[1:])
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(levelname)s] %(message)s")
    app = QApplication(argv[:1] + qt_args)
    window = MainWindow(settings=settings_from_args(args))
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
