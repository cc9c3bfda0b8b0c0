import re

from PyQt5.QtWidgets import (
    QPlainTextEdit, QTextEdit, QWidget, QVBoxLayout, QHBoxLayout, QCheckBox,
    QLabel, QSlider, QPushButton, QDialog, QFormLayout, QLineEdit,
    QFontComboBox, QSpinBox, QDialogButtonBox, QStyle
)
from PyQt5.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor, QFont, QPainter, QTextFormat
from PyQt5.QtCore import Qt, QRect, QSize, pyqtSignal

from silviewer.commands import Tab
from silviewer.config import MIN_FONT_SIZE, MAX_FONT_SIZE

# ========================================================
# 1. HIGHLIGHTERS
# ========================================================

def make_format(color, bold=False):
    fmt = QTextCharFormat()
    fmt.setForeground(QColor(color))
    if bold: fmt.setFontWeight(QFont.Bold)
    return fmt

class BaseHighlighter(QSyntaxHighlighter):
    def __init__(self, document):
        super().__init__(document)
        self.rules = []
        self.update_rules()
    def update_rules(self): pass
    def highlightBlock(self, text):
        for pattern, fmt in self.rules:
            for match in pattern.finditer(text):
                self.setFormat(match.start(), match.end() - match.start(), fmt)

class SwiftSyntaxHighlighter(BaseHighlighter):
    KEYWORDS = [
        "func", "let", "var", "if", "else", "guard", "return", "for", "in", "while",
        "repeat", "switch", "case", "default", "break", "continue", "struct", "class",
        "enum", "protocol", "extension", "import", "init", "deinit", "self", "Self",
        "static", "final", "private", "fileprivate", "internal", "public", "open",
        "mutating", "inout", "throws", "throw", "try", "catch", "async", "await",
        "where", "typealias", "associatedtype", "some", "any", "nil", "true", "false"
    ]
    def update_rules(self):
        fmt_kw = make_format("blue", bold=True)
        for word in self.KEYWORDS: self.rules.append((re.compile(r'\b' + word + r'\b'), fmt_kw))
        self.rules.append((re.compile(r'@\w+'), make_format("darkred")))
        self.rules.append((re.compile(r'"[^"\\]*(\\.[^"\\]*)*"'), make_format("magenta")))
        self.rules.append((re.compile(r'//.*'), make_format("green")))

class SilHighlighter(BaseHighlighter):
    """ Shared by SIL and LLVM IR: both use %values, @symbols and // or ; comments. """
    def update_rules(self):
        self.rules.append((re.compile(r'%[\w.]+'), make_format("#a31515", bold=True)))
        self.rules.append((re.compile(r'@[\w$.]+'), make_format("#795e26")))
        self.rules.append((re.compile(r'^\s*(sil|sil_stage|sil_vtable|sil_witness_table|define|declare)\b'), make_format("blue", bold=True)))
        self.rules.append((re.compile(r'^\s*bb\d+.*:'), make_format("#795e26", bold=True)))
        self.rules.append((re.compile(r'//.*$|;.*$'), make_format("green")))

class AssemblyHighlighter(BaseHighlighter):
    def update_rules(self):
        self.rules.append((re.compile(r'%[a-z0-9]+'), make_format("#a31515", bold=True)))
        insts = ["mov", "push", "pop", "call", "ret", "add", "sub", "jmp", "je", "jne", "cmp", "lea", "nop", "xor", "ldr", "str", "stp", "ldp", "bl", "adrp"]
        for word in insts: self.rules.append((re.compile(r'\b' + word + r'[a-z]*\b'), make_format("blue")))
        self.rules.append((re.compile(r'^\s*\.?[\w$]+:'), make_format("#795e26", bold=True)))
        self.rules.append((re.compile(r'^\s*\.[a-z_]+'), make_format("gray")))
        self.rules.append((re.compile(r'[#;].*$'), make_format("green")))

HIGHLIGHTERS = {
    Tab.SOURCE: SwiftSyntaxHighlighter,
    Tab.PRETTY_PRINT_AST: SwiftSyntaxHighlighter,
    Tab.RAW_SIL: SilHighlighter,
    Tab.CANONICAL_SIL: SilHighlighter,
    Tab.IR: SilHighlighter,
    Tab.ASSEMBLY: AssemblyHighlighter,
}

# ========================================================
# 2. EDITOR
# ========================================================

class LineNumberArea(QWidget):
    def __init__(self, editor):
        super().__init__(editor)
        self.codeEditor = editor
    def sizeHint(self): return QSize(self.codeEditor.lineNumberAreaWidth(), 0)
    def paintEvent(self, event): self.codeEditor.lineNumberAreaPaintEvent(event)

class CodeEditor(QPlainTextEdit):
    def __init__(self, tab=Tab.SOURCE, font=None, parent=None):
        super().__init__(parent)
        self.tab = tab
        highlighter = HIGHLIGHTERS.get(tab)
        self.highlighter = highlighter(self.document()) if highlighter else None
        self.setLineWrapMode(QPlainTextEdit.NoWrap)
        self.setFont(font or QFont("Courier", 22))

        self.lineNumberArea = LineNumberArea(self)
        self.blockCountChanged.connect(self.updateLineNumberAreaWidth)
        self.updateRequest.connect(self.updateLineNumberArea)
        self.cursorPositionChanged.connect(self.highlightCurrentLine)
        self.updateLineNumberAreaWidth(0)
        self.highlightCurrentLine()

    def lineNumberAreaWidth(self):
        digits = len(str(max(1, self.blockCount())))
        return 6 + self.fontMetrics().horizontalAdvance('9') * digits

    def updateLineNumberAreaWidth(self, _):
        self.setViewportMargins(self.lineNumberAreaWidth(), 0, 0, 0)

    def updateLineNumberArea(self, rect, dy):
        if dy: self.lineNumberArea.scroll(0, dy)
        else: self.lineNumberArea.update(0, rect.y(), self.lineNumberArea.width(), rect.height())
        if rect.contains(self.viewport().rect()): self.updateLineNumberAreaWidth(0)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        cr = self.contentsRect()
        self.lineNumberArea.setGeometry(QRect(cr.left(), cr.top(), self.lineNumberAreaWidth(), cr.height()))

    def lineNumberAreaPaintEvent(self, event):
        painter = QPainter(self.lineNumberArea)
        painter.fillRect(event.rect(), Qt.lightGray)
        block = self.firstVisibleBlock()
        blockNumber = block.blockNumber()
        top = int(self.blockBoundingGeometry(block).translated(self.contentOffset()).top())
        bottom = top + int(self.blockBoundingRect(block).height())
        while block.isValid() and top <= event.rect().bottom():
            if block.isVisible() and bottom >= event.rect().top():
                painter.setPen(Qt.black)
                painter.drawText(0, top, self.lineNumberArea.width() - 3, self.fontMetrics().height(), Qt.AlignRight, str(blockNumber + 1))
            block = block.next()
            top = bottom
            bottom = top + int(self.blockBoundingRect(block).height())
            blockNumber += 1

    def highlightCurrentLine(self):
        selections = []
        if not self.isReadOnly():
            selection = QTextEdit.ExtraSelection()
            selection.format.setBackground(QColor(Qt.yellow).lighter(180))
            selection.format.setProperty(QTextFormat.FullWidthSelection, True)
            selection.cursor = self.textCursor()
            selection.cursor.clearSelection()
            selections.append(selection)
        self.setExtraSelections(selections)

    def set_text_keep_scroll(self, text):
        if text == self.toPlainText(): return
        sb = self.verticalScrollBar().value()
        self.setPlainText(text)
        self.verticalScrollBar().setValue(sb)

# ========================================================
# 3. OUTPUT TAB
# ========================================================

FLAG_LABELS = (
    ("demangle", "Demangle"),
    ("optimize", "Optimize"),
    ("module_optimize", "Module optimize"),
    ("parse_as_library", "Parse as library"),
)

class OptionsBar(QWidget):
    flag_toggled = pyqtSignal(str, bool)
    font_size_changed = pyqtSignal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout()
        layout.setContentsMargins(8, 8, 8, 8)
        self.checkboxes = {}
        for name, label in FLAG_LABELS:
            box = QCheckBox(label)
            box.toggled.connect(lambda checked, n=name: self.flag_toggled.emit(n, checked))
            layout.addWidget(box)
            self.checkboxes[name] = box
        layout.addStretch(1)
        layout.addWidget(QLabel("Font size"))
        self.font_slider = QSlider(Qt.Horizontal)
        self.font_slider.setRange(MIN_FONT_SIZE, MAX_FONT_SIZE)
        self.font_slider.setSingleStep(1)
        self.font_slider.setFixedWidth(160)
        self.font_slider.valueChanged.connect(self.font_size_changed.emit)
        layout.addWidget(self.font_slider)
        self.setLayout(layout)

    def sync(self, session, font_size):
        """ Mirrors session flags without echoing signals back. """
        for name, box in self.checkboxes.items():
            box.blockSignals(True); box.setChecked(getattr(session, name)); box.blockSignals(False)
        self.font_slider.blockSignals(True); self.font_slider.setValue(font_size); self.font_slider.blockSignals(False)

class OutputView(QWidget):
    """ Options, read-only compiler output and the copy-command button. """
    copy_requested = pyqtSignal()

    def __init__(self, tab, font=None, parent=None):
        super().__init__(parent)
        self.tab = tab
        self.options = OptionsBar()
        self.editor = CodeEditor(tab=tab, font=font)
        self.editor.setReadOnly(True)
        self.editor.highlightCurrentLine()
        self.copy_button = QPushButton()
        self.copy_button.setIcon(self.style().standardIcon(QStyle.SP_FileIcon))
        self.copy_button.setToolTip("Copy command to clipboard")
        self.copy_button.clicked.connect(self.copy_requested.emit)
        layout = QVBoxLayout()
        layout.addWidget(self.options)
        layout.addWidget(self.editor)
        layout.addWidget(self.copy_button, alignment=Qt.AlignLeft)
        self.setLayout(layout)

    def show_command(self, command):
        self.copy_button.setText(command)

# ========================================================
# 4. PREFERENCES
# ========================================================

class PreferencesDialog(QDialog):
    def __init__(self, settings, parent=None):
        super().__init__(parent)
        self.settings = settings
        self.changed = []
        self.setWindowTitle("Preferences")
        self.setFixedWidth(450)

        layout = QFormLayout()
        self.compiler_input = QLineEdit(settings.compiler)
        layout.addRow("Swift Compiler:", self.compiler_input)
        self.demangler_input = QLineEdit(settings.demangler)
        layout.addRow("Demangler Command:", self.demangler_input)
        self.shell_input = QLineEdit(settings.shell)
        layout.addRow("Shell:", self.shell_input)
        self.module_input = QLineEdit(settings.module_name)
        layout.addRow("Library Module Name:", self.module_input)

        self.font_combo = QFontComboBox()
        self.font_combo.setCurrentFont(QFont(settings.font_family))
        layout.addRow("Editor Font:", self.font_combo)
        self.size_spin = QSpinBox()
        self.size_spin.setRange(MIN_FONT_SIZE, MAX_FONT_SIZE)
        self.size_spin.setValue(settings.font_size)
        layout.addRow("Font Size:", self.size_spin)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.apply_settings)
        btns.rejected.connect(self.reject)
        layout.addRow(btns)
        self.setLayout(layout)

    def apply_settings(self):
        self.changed = self.settings.update(
            compiler=self.compiler_input.text().strip() or self.settings.compiler,
            demangler=self.demangler_input.text().strip() or self.settings.demangler,
            shell=self.shell_input.text().strip() or self.settings.shell,
            module_name=self.module_input.text().strip() or self.settings.module_name,
            font_family=self.font_combo.currentFont().family(),
            font_size=self.size_spin.value(),
        )
        self.accept()
