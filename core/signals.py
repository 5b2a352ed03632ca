from PySide6.QtCore import QObject, Signal


class ViewSignals(QObject):
    """Bridges observer threads to the Qt GUI thread.

    Observer callbacks run on their own threads and only emit these signals;
    Qt queues the emission to the slots living on the GUI thread.
    """

    status_changed = Signal()
    table_changed = Signal()
    quit_requested = Signal()
