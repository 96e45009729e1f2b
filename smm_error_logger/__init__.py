"""Read error logs from a BIOS-BMC shared-memory circular buffer."""

__version__ = "0.1.0"

__all__ = ["buffer", "dictionary_manager", "layout", "pci_handler"]