import logging

logger = logging.getLogger("py_localmodel")


class LocalDebug:
    """Opt-in debug side channel; a no-op unless ``enabled``."""

    def __init__(self, enabled: bool = False):
        self.enabled = bool(enabled)

    def log(self, msg: str, *args):
        if not self.enabled:
            return
        logger.debug("[LocalModel] " + msg, *args)
