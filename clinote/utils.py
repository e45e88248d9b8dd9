import os
import re
import time
import unicodedata


_TRUTHY = {"1", "true", "yes", "on"}


# ======================= Logger Class =======================
class Logger:
    def __init__(self):
        self.printed_messages = set()

    @property
    def debug_enabled(self) -> bool:
        return os.getenv("CLINOTE_DEBUG", "").lower() in _TRUTHY

    def _write(self, message: str):
        log_file = os.getenv("CLINOTE_LOG_FILE")
        if not log_file:
            return
        try:
            with open(log_file, "a", encoding="utf-8") as fh:
                fh.write(message + "\n")
        except OSError:
            pass

    def log(self, msg, once=False):
        """
        Print a timestamped message.
        If once=True, the message is only printed once per session.
        """
        if once:
            msg_hash = hash(msg)
            if msg_hash in self.printed_messages:
                return
            self.printed_messages.add(msg_hash)
        full_message = f"{time.strftime('%Y-%m-%d %H:%M:%S')} - {msg}"
        print(full_message)
        self._write(full_message)

    def debug(self, msg):
        if self.debug_enabled:
            self.log(f"[DEBUG] {msg}")


logger = Logger()


# ======================= Text Normalization =======================
def normalize_note(text) -> str:
    """
    Normalize a clinical note read from a file:
    - Unicode NFKC normalization;
    - drop control characters except newlines and tabs;
    - collapse runs of spaces.
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)

    text = unicodedata.normalize("NFKC", text)
    text = "".join(ch for ch in text if ch in "\n\t" or unicodedata.category(ch)[0] != "C")
    text = re.sub(r"[ \u00A0\u1680\u2000-\u200B\u202F\u205F\u3000]+", " ", text)
    return text.strip()
