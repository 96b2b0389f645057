import signal


class CtrlCHandler:
    """
    Handle Ctrl+C so the sensor source, service and display shut down in order.
    """
    def __init__(self):
        self.should_stop = False
        self._previous = signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, sig, frame):
        """Callback executed when Ctrl+C is detected"""
        print("\n[INFO] Interrupt signal detected, closing cleanly...")
        self.should_stop = True

    def restore(self):
        """Put back the SIGINT handler that was active before"""
        signal.signal(signal.SIGINT, self._previous)
