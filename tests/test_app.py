import os
import threading
import time

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PyQt5.QtWidgets")

from PyQt5.QtWidgets import QApplication
from PyQt5.QtCore import QThreadPool

from silviewer.commands import Tab
from silviewer.app import MainWindow


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(qapp):
    calls = []
    def runner(command, source, shell):
        calls.append(command)
        return f"out: {command}"
    w = MainWindow(runner=runner, threaded=False)
    w.calls = calls
    yield w
    w.close()


def test_starts_on_source_tab_without_running(window):
    assert window.tabs.count() == len(Tab)
    assert window.tabs.currentIndex() == 0
    assert window.calls == []


def test_tab_switch_shows_output_and_command(window):
    window.tabs.setCurrentIndex(list(Tab).index(Tab.AST))
    view = window.views[Tab.AST]
    assert window.calls == ["swiftc - -dump-ast"]
    assert view.editor.toPlainText() == "out: swiftc - -dump-ast"
    assert view.copy_button.text() == "swiftc - -dump-ast"


def test_checkbox_reruns_and_syncs_other_views(window):
    window.tabs.setCurrentIndex(list(Tab).index(Tab.CANONICAL_SIL))
    window.views[Tab.CANONICAL_SIL].options.checkboxes["optimize"].setChecked(True)
    assert window.calls[-1] == "swiftc - -emit-sil -O | xcrun swift-demangle"
    assert window.views[Tab.IR].options.checkboxes["optimize"].isChecked()


def test_editing_source_does_not_rerun(window):
    window.tabs.setCurrentIndex(list(Tab).index(Tab.PARSE))
    window.source_editor.setPlainText("let y = 2")
    assert len(window.calls) == 1
    assert window.session.source == "let y = 2"


def test_copy_command(window, qapp):
    window.tabs.setCurrentIndex(list(Tab).index(Tab.IR))
    window.views[Tab.IR].copy_button.click()
    assert QApplication.clipboard().text() == "swiftc - -emit-ir | xcrun swift-demangle"


def pump_until(qapp, predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)
    return predicate()


def test_threaded_run_happens_off_gui_thread(qapp):
    main_thread = threading.get_ident()
    threads = []
    def runner(command, source, shell):
        threads.append(threading.get_ident())
        return f"out {command}"
    w = MainWindow(runner=runner, threaded=True)
    try:
        w.tabs.setCurrentIndex(list(Tab).index(Tab.IR))
        QThreadPool.globalInstance().waitForDone()
        expected = "out swiftc - -emit-ir | xcrun swift-demangle"
        assert pump_until(qapp, lambda: w.views[Tab.IR].editor.toPlainText() == expected)
        assert threads and all(ident != main_thread for ident in threads)
        assert w.session.outputs[Tab.IR] == expected
    finally:
        w.close()


def test_threaded_stale_run_finishing_last_is_dropped(qapp):
    pool = QThreadPool.globalInstance()
    pool.setMaxThreadCount(max(2, pool.maxThreadCount()))
    release = threading.Event()
    def runner(command, source, shell):
        if " -O" not in command:
            release.wait(5)
            return "stale"
        return "fresh"
    w = MainWindow(runner=runner, threaded=True)
    try:
        w.tabs.setCurrentIndex(list(Tab).index(Tab.CANONICAL_SIL))
        w.views[Tab.CANONICAL_SIL].options.checkboxes["optimize"].setChecked(True)
        editor = w.views[Tab.CANONICAL_SIL].editor
        assert pump_until(qapp, lambda: editor.toPlainText() == "fresh")
        release.set()
        pool.waitForDone()
        pump_until(qapp, lambda: False, timeout=0.2)
        assert editor.toPlainText() == "fresh"
        assert w.session.outputs[Tab.CANONICAL_SIL] == "fresh"
    finally:
        release.set()
        pool.waitForDone()
        w.close()
