"""Auto-save package: debouncer, saving indicator and coordinator."""

from tax_intake.autosave.coordinator import AutoSaveCoordinator
from tax_intake.autosave.debouncer import Debouncer
from tax_intake.autosave.indicator import SavingIndicator

__all__ = ["AutoSaveCoordinator", "Debouncer", "SavingIndicator"]
