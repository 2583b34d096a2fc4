"""watchdogctl - install and configure the Linux watchdog daemon."""

__version__ = "0.1.0"
